"""
Evented Redis client used by the session store.
"""

from redis_session_store.client.client import RedisClient, default_retry_strategy
from redis_session_store.client.status import ConnectionStatus

__all__ = ["RedisClient", "ConnectionStatus", "default_retry_strategy"]
