"""
Session Store Adapters.

Provides Redis-backed session persistence for web framework middleware.
"""

from redis_session_store.adapters.base import AsyncSessionStore
from redis_session_store.adapters.redis import FORWARDED_EVENTS, RedisSessionStore

__all__ = [
    "AsyncSessionStore",
    "RedisSessionStore",
    "FORWARDED_EVENTS",
]
