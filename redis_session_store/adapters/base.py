"""
Base Session Store - Abstract interface for session persistence.

Defines the contract a web framework's session middleware relies on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class AsyncSessionStore(ABC):
    """
    Abstract base class for async session storage backends.

    Implementations must provide get/set/destroy/quit. ``end`` and the
    async context manager are built on top of ``quit``.

    Usage with a middleware:
    ```python
    from redis_session_store import RedisSessionStore

    store = RedisSessionStore(host="localhost", db=1)
    session = await store.get(sid)
    await store.set(sid, {"user": "alice"}, max_age=3_600_000)
    ```
    """

    @abstractmethod
    async def get(self, sid: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a session.

        Args:
            sid: The session identifier

        Returns:
            The session object, or None if missing, expired or unreadable
        """
        pass

    @abstractmethod
    async def set(
        self,
        sid: str,
        sess: Dict[str, Any],
        max_age: Any = None,
        options: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Store a session.

        Args:
            sid: The session identifier
            sess: JSON-compatible session object
            max_age: Milliseconds until expiry, "session" for the default
                     lifetime, or None for no expiry
            options: Reserved for store-specific extensions
        """
        pass

    @abstractmethod
    async def destroy(self, sid: str) -> None:
        """Delete a session. Missing sessions are not an error."""
        pass

    @abstractmethod
    async def quit(self) -> None:
        """Release the store's connection."""
        pass

    async def end(self) -> None:
        """Alias for quit()."""
        await self.quit()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - quit the store."""
        await self.quit()
        return False
