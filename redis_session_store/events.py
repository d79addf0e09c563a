"""
Event Hub - In-process publish/subscribe for connection lifecycle events.

Both the client and the session store own an EventHub rather than
inheriting from an emitter base, and expose on/once/off/wait_for.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

logger = logging.getLogger("redis_session_store.events")

Listener = Callable[..., Any]


class EventHub:
    """
    Synchronous event publisher keyed by event name.

    Listeners run in registration order inside ``emit``. A listener that
    raises is logged and skipped so the remaining listeners still run.
    A listener that returns a coroutine has it scheduled as a task.

    Usage:
        hub = EventHub()
        hub.on("ready", lambda: print("ready"))
        hub.emit("ready")

        # Await the next emission
        args = await hub.wait_for("end", timeout=5)
    """

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def on(self, event: str, listener: Listener) -> Listener:
        """
        Subscribe a listener to an event.

        Args:
            event: Event name
            listener: Callable invoked with the event's positional args

        Returns:
            The listener, for a later off()
        """
        self._listeners.setdefault(event, []).append((listener, False))
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Subscribe a listener that is removed after its first call."""
        self._listeners.setdefault(event, []).append((listener, True))
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        """
        Unsubscribe a listener.

        Returns True if the listener was found and removed.
        """
        entries = self._listeners.get(event, [])
        for index, (registered, _) in enumerate(entries):
            if registered is listener or registered == listener:
                del entries[index]
                return True
        return False

    def listeners(self, event: str) -> List[Listener]:
        """Get the listeners currently subscribed to an event."""
        return [listener for listener, _ in self._listeners.get(event, [])]

    def clear(self, event: Optional[str] = None) -> None:
        """Remove all listeners, or only those of one event."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def emit(self, event: str, *args: Any) -> bool:
        """
        Dispatch an event to its listeners.

        Args:
            event: Event name
            *args: Payload passed to every listener

        Returns:
            True if at least one listener was subscribed
        """
        entries = self._listeners.get(event)
        if not entries:
            return False

        # Snapshot so listeners may subscribe/unsubscribe while dispatching
        snapshot = list(entries)
        self._listeners[event] = [entry for entry in entries if not entry[1]]

        for listener, _ in snapshot:
            try:
                result = listener(*args)
            except Exception:
                logger.exception(f"Listener for '{event}' event failed")
                continue
            if asyncio.iscoroutine(result):
                self._schedule(event, result)
        return True

    async def wait_for(self, event: str, timeout: Optional[float] = None) -> Tuple[Any, ...]:
        """
        Wait for the next emission of an event.

        Args:
            event: Event name
            timeout: Seconds to wait (None = forever)

        Returns:
            The positional args the event was emitted with

        Raises:
            asyncio.TimeoutError: If the event does not fire in time
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def resolve(*args: Any) -> None:
            if not future.done():
                future.set_result(args)

        self.once(event, resolve)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            self.off(event, resolve)

    def _schedule(self, event: str, coro: Any) -> None:
        """Run a coroutine returned by a listener in the background."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)

        def done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    f"Async listener for '{event}' event failed",
                    exc_info=finished.exception(),
                )

        task.add_done_callback(done)
