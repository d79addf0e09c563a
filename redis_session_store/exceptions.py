"""
Session Store Errors.

Redis transport errors are never wrapped; they reach the caller as raised
by redis-py. Only conditions owned by this package live here.
"""


class SessionStoreError(Exception):
    """Base class for errors raised by redis_session_store."""


class ClientClosedError(SessionStoreError):
    """A command was issued on a client that has already been quit."""
