"""
Redis Client - redis.asyncio client with connection lifecycle events.

redis-py connects lazily and reports nothing about its connection state.
RedisClient keeps redis-py in charge of sockets, pooling and the protocol,
and adds a status field plus connect/ready/reconnecting/error/end/idle
events around it.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from redis_session_store.client.status import ConnectionStatus
from redis_session_store.events import EventHub, Listener
from redis_session_store.exceptions import ClientClosedError

logger = logging.getLogger("redis_session_store.client")

# Errors meaning the connection itself is gone, as opposed to a bad command
CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)

MAX_CONNECT_ATTEMPTS = 50

RetryStrategy = Callable[[int], Optional[float]]


def default_retry_strategy(attempt: int) -> Optional[float]:
    """
    Back off linearly, 50ms per attempt, capped at 2 seconds.

    Args:
        attempt: Number of failed attempts so far (starts at 1)

    Returns:
        Seconds to wait before the next attempt, or None to give up
    """
    if attempt > MAX_CONNECT_ATTEMPTS:
        return None
    return min(attempt * 0.05, 2.0)


class RedisClient:
    """
    Evented wrapper around ``redis.asyncio.Redis``.

    Lifecycle:
        wait -> connecting -> connect -> ready
        ready -> close (connection error) -> reconnecting -> connecting ...
        any -> end (quit, or retry strategy gave up)

    Usage:
        client = RedisClient(host="localhost", port=6379, db=0)
        client.on("ready", lambda: print("redis ready"))
        await client.connect()

        await client.setex("sid", 60, "{}")
        await client.quit()

        # Same server, another logical database
        other = client.duplicate(db=2)
    """

    def __init__(
        self,
        *,
        factory: Callable[..., Any] = aioredis.Redis,
        lazy_connect: bool = False,
        retry_strategy: RetryStrategy = default_retry_strategy,
        **options: Any
    ):
        """
        Initialize the client.

        Args:
            factory: Builds the underlying redis-py client from ``options``
            lazy_connect: Do not start connecting on construction
            retry_strategy: Maps failed attempt count to a delay in seconds
            **options: Passed verbatim to ``factory`` (host, port, db,
                       password, unix_socket_path, ...)
        """
        self._factory = factory
        self._options: Dict[str, Any] = dict(options)
        self._lazy_connect = lazy_connect
        self._retry_strategy = retry_strategy

        self._redis = factory(**options)
        self._events = EventHub()
        self._status = ConnectionStatus.WAIT
        self._connect_lock = asyncio.Lock()
        self._pending = 0
        self._connect_task: Optional[asyncio.Task] = None

        if not lazy_connect:
            self._start_connecting()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> ConnectionStatus:
        """Current connection status."""
        return self._status

    @property
    def options(self) -> Dict[str, Any]:
        """Options the underlying client was built with."""
        return dict(self._options)

    @property
    def redis(self) -> Any:
        """The wrapped redis-py client."""
        return self._redis

    def _transition(self, status: ConnectionStatus, event: Optional[str] = None, *args: Any) -> None:
        """Set the status, then announce it."""
        self._status = status
        if event is not None:
            logger.debug(f"redis {event} (status={status})")
            self._events.emit(event, *args)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Listener:
        """Subscribe to a lifecycle event."""
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        """Subscribe to the next occurrence of a lifecycle event."""
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> bool:
        """Unsubscribe from a lifecycle event."""
        return self._events.off(event, listener)

    async def wait_for(self, event: str, timeout: Optional[float] = None) -> tuple:
        """Wait for the next occurrence of a lifecycle event."""
        return await self._events.wait_for(event, timeout=timeout)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def _start_connecting(self) -> None:
        """Begin connecting in the background if an event loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet; the first command connects instead
            return
        self._connect_task = loop.create_task(self._connect_in_background())

    async def _connect_in_background(self) -> None:
        try:
            await self.connect()
        except CONNECTION_ERRORS as e:
            # Already surfaced through the error and end events
            logger.debug(f"Background connect gave up: {e}")
        except ClientClosedError:
            logger.debug("Client quit before the background connect ran")
        except RedisError as e:
            logger.error(f"Background connect failed: {e}")

    async def connect(self) -> None:
        """
        Connect to Redis, retrying per the retry strategy.

        Returns once the client is ready. Concurrent callers share a
        single connection attempt.

        Raises:
            ClientClosedError: If the client has already ended
            redis.exceptions.ConnectionError: If the retry strategy gives up
            redis.exceptions.RedisError: If the server rejects the PING
        """
        if self._status.is_connected:
            return
        async with self._connect_lock:
            if self._status.is_connected:
                return
            if self._status is ConnectionStatus.END:
                raise ClientClosedError("Redis client has been quit")
            await self._connect_with_retry()

    async def _connect_with_retry(self) -> None:
        attempt = 0
        if self._status is ConnectionStatus.CLOSE:
            self._transition(ConnectionStatus.RECONNECTING, "reconnecting", 0)

        while True:
            self._transition(ConnectionStatus.CONNECTING)
            try:
                await self._redis.ping()
            except CONNECTION_ERRORS as e:
                attempt += 1
                self._transition(ConnectionStatus.CLOSE, "error", e)
                delay = self._retry_strategy(attempt)
                if delay is None:
                    logger.warning(f"Giving up on Redis after {attempt} attempts: {e}")
                    await self._close_redis()
                    self._transition(ConnectionStatus.END, "end")
                    raise
                self._transition(ConnectionStatus.RECONNECTING, "reconnecting", delay)
                await asyncio.sleep(delay)
                if self._status is ConnectionStatus.END:
                    raise ClientClosedError("Redis client was quit while reconnecting")
                continue
            except RedisError as e:
                # Server answered with an error; retrying would not change it
                self._transition(ConnectionStatus.CLOSE, "error", e)
                raise

            self._transition(ConnectionStatus.CONNECT, "connect")
            self._transition(ConnectionStatus.READY, "ready")
            return

    async def _ensure_connected(self) -> None:
        """Verify connection before a command."""
        if self._status is ConnectionStatus.END:
            raise ClientClosedError("Redis client has been quit")
        if not self._status.is_connected:
            await self.connect()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Run one command, tracking connection loss and idleness."""
        await self._ensure_connected()
        self._pending += 1
        try:
            return await getattr(self._redis, command)(*args, **kwargs)
        except CONNECTION_ERRORS as e:
            if self._status is not ConnectionStatus.END:
                self._transition(ConnectionStatus.CLOSE, "error", e)
            raise
        finally:
            self._pending -= 1
            if self._pending == 0 and self._status is not ConnectionStatus.END:
                self._events.emit("idle")

    async def get(self, key: str) -> Any:
        """GET key."""
        return await self._execute("get", key)

    async def set(self, key: str, value: Any, **kwargs: Any) -> Any:
        """SET key value (redis-py keyword options such as ``ex`` pass through)."""
        return await self._execute("set", key, value, **kwargs)

    async def setex(self, key: str, ttl: int, value: Any) -> Any:
        """SETEX key ttl value."""
        return await self._execute("setex", key, ttl, value)

    async def delete(self, *keys: str) -> int:
        """DEL key [key ...]. Returns the number of keys removed."""
        return await self._execute("delete", *keys)

    async def ttl(self, key: str) -> int:
        """TTL key (-1 no expiry, -2 missing)."""
        return await self._execute("ttl", key)

    async def exists(self, *keys: str) -> int:
        """EXISTS key [key ...]."""
        return await self._execute("exists", *keys)

    # ------------------------------------------------------------------
    # Duplication and teardown
    # ------------------------------------------------------------------

    def duplicate(self, **overrides: Any) -> "RedisClient":
        """
        Create an independent client with the same settings.

        Args:
            **overrides: Options replacing the original ones (e.g. db=2)

        Returns:
            A new RedisClient; this client is left untouched
        """
        options = {**self._options, **overrides}
        logger.debug(f"Duplicating redis client (overrides: {sorted(overrides)})")
        return RedisClient(
            factory=self._factory,
            lazy_connect=self._lazy_connect,
            retry_strategy=self._retry_strategy,
            **options
        )

    async def _close_redis(self) -> None:
        await self._redis.aclose()

    async def quit(self) -> None:
        """
        Close the connection. Safe to call more than once.
        """
        if self._status is ConnectionStatus.END:
            logger.debug("quit called on an ended client")
            return

        task = self._connect_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.debug("quitting redis client")
        try:
            await self._close_redis()
        finally:
            self._transition(ConnectionStatus.END, "end")

    def __repr__(self) -> str:
        return f"RedisClient(status={self._status.value!r}, options={sorted(self._options)})"
