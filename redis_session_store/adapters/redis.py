"""
Redis Session Store - Session persistence on top of a Redis client.

Sessions are stored as JSON text under the bare session id. Expiry is
left to Redis' own TTL handling.
"""

import logging
from typing import Any, Dict, Optional

from redis_session_store.adapters.base import AsyncSessionStore
from redis_session_store.client import ConnectionStatus, RedisClient
from redis_session_store.codec import DecodeOutcome, decode_session, encode_session
from redis_session_store.config import StoreConfig
from redis_session_store.events import EventHub, Listener
from redis_session_store.expiry import resolve_ttl

logger = logging.getLogger("redis_session_store.adapters.redis")

# Client events re-emitted on the store under the same name
FORWARDED_EVENTS = ("connect", "ready", "reconnecting", "error", "end", "idle")


class RedisSessionStore(AsyncSessionStore):
    """
    Redis-backed session store.

    Wraps a new, shared or duplicated RedisClient and mirrors its
    connection events and status.

    Events:
        connect, ready, reconnecting, error, end, idle - forwarded from
        the client with the client's payload. ``disconnect`` is emitted
        alongside every ``end``.

    Usage:
        # New client from options
        store = RedisSessionStore(host="localhost", port=6379, db=1)

        # Share an existing client
        store = RedisSessionStore(client=client)

        # Clone an existing client onto another database
        store = RedisSessionStore(client=client, duplicate=True, db=2)

        store.on("ready", lambda: print("session store ready"))
        await store.set("sid", {"user": "alice"}, 86_400_000)
        session = await store.get("sid")
        await store.quit()
    """

    def __init__(self, config: Optional[StoreConfig] = None, **options: Any):
        """
        Initialize the store.

        Args:
            config: Explicit configuration
            **options: Flat options (client, duplicate, db, and anything
                       else for the client); merged over ``config``
        """
        if config is None:
            config = StoreConfig.from_options(**options)
        else:
            config = config.merge(**options)

        self._client = self._resolve_client(config)
        self._events = EventHub()
        self._status = ConnectionStatus.WAIT
        self._closed = False
        self._listen()

    @staticmethod
    def _resolve_client(config: StoreConfig) -> Any:
        """Create, duplicate or reuse the client per the config."""
        if config.client is None:
            if config.duplicate:
                logger.warning("'duplicate' has no effect without 'client'; creating a new client")
            logger.debug("Init redis new client")
            return RedisClient(**config.client_options())

        if not callable(getattr(config.client, "on", None)):
            raise TypeError(
                f"client must be a RedisClient (got {type(config.client).__name__}); "
                "wrap redis-py clients by passing their options instead"
            )

        if config.duplicate:
            duplicate = getattr(config.client, "duplicate", None)
            if duplicate is None:
                raise TypeError(
                    f"Cannot duplicate {type(config.client).__name__}: it has no duplicate() method"
                )
            logger.debug("Duplicating provided client with new options (if provided)")
            return duplicate(**config.client_options())

        logger.debug("Using provided client")
        return config.client

    def _listen(self) -> None:
        """Subscribe to the client's lifecycle events."""
        for event in FORWARDED_EVENTS:
            self._client.on(event, self._forwarder(event))
        self._status = ConnectionStatus(self._client.status)

    def _forwarder(self, event: str) -> Listener:
        def forward(*args: Any) -> None:
            self._status = ConnectionStatus(self._client.status)
            logger.debug(f"redis {event} (status={self._status})")
            self._events.emit(event, *args)
            if event == "end":
                self._events.emit("disconnect", *args)
        return forward

    # ------------------------------------------------------------------
    # State and events
    # ------------------------------------------------------------------

    @property
    def status(self) -> ConnectionStatus:
        """Connection status as last reported by the client."""
        return self._status

    @property
    def client(self) -> Any:
        """The underlying Redis client."""
        return self._client

    def on(self, event: str, listener: Listener) -> Listener:
        """Subscribe to a store event."""
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        """Subscribe to the next occurrence of a store event."""
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> bool:
        """Unsubscribe from a store event."""
        return self._events.off(event, listener)

    async def wait_for(self, event: str, timeout: Optional[float] = None) -> tuple:
        """Wait for the next occurrence of a store event."""
        return await self._events.wait_for(event, timeout=timeout)

    # ------------------------------------------------------------------
    # AsyncSessionStore interface
    # ------------------------------------------------------------------

    async def get(self, sid: str) -> Optional[Dict[str, Any]]:
        """Retrieve and deserialize a session."""
        raw = await self._client.get(sid)
        logger.debug(f"GET {sid}: {'found' if raw else 'none'}")

        decoded = decode_session(raw)
        if decoded.outcome is DecodeOutcome.MALFORMED:
            logger.debug(f"parse session error for {sid}: {decoded.error}")
        return decoded.unwrap()

    async def set(
        self,
        sid: str,
        sess: Dict[str, Any],
        max_age: Any = None,
        options: Optional[Dict[str, Any]] = None
    ) -> None:
        """Serialize and store a session, with a TTL when max_age calls for one."""
        ttl = resolve_ttl(max_age)
        payload = encode_session(sess)

        if ttl is not None:
            logger.debug(f"SETEX {sid} {ttl} {payload}")
            await self._client.setex(sid, ttl, payload)
        else:
            logger.debug(f"SET {sid} {payload}")
            await self._client.set(sid, payload)

        logger.debug(f"SET {sid} complete")

    async def destroy(self, sid: str) -> None:
        """Delete a session."""
        logger.debug(f"DEL {sid}")
        await self._client.delete(sid)
        logger.debug(f"DEL {sid} complete")

    async def quit(self) -> None:
        """Close the client connection. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        logger.debug("quitting redis client")
        await self._client.quit()

    def __repr__(self) -> str:
        return f"RedisSessionStore(status={self._status.value!r})"
