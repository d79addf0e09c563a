"""
redis-session-store - Redis session storage for async web frameworks.

Persists session objects as JSON in Redis with native TTL expiry, and
mirrors the Redis connection lifecycle as events and a status field.
"""

__version__ = "1.0.0"

from redis_session_store.adapters import AsyncSessionStore, RedisSessionStore
from redis_session_store.client import ConnectionStatus, RedisClient
from redis_session_store.config import StoreConfig
from redis_session_store.events import EventHub
from redis_session_store.exceptions import ClientClosedError, SessionStoreError
from redis_session_store.expiry import SESSION_MAX_AGE, resolve_ttl

__all__ = [
    # Store
    "AsyncSessionStore",
    "RedisSessionStore",
    "StoreConfig",
    # Client
    "RedisClient",
    "ConnectionStatus",
    "EventHub",
    # Expiry
    "SESSION_MAX_AGE",
    "resolve_ttl",
    # Errors
    "SessionStoreError",
    "ClientClosedError",
]
