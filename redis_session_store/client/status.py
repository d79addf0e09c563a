"""
Connection Status - Lifecycle states of a RedisClient.
"""

from enum import Enum


class ConnectionStatus(str, Enum):
    """
    Connection lifecycle state.

    Members are ``str`` subclasses, so ``status == "ready"`` holds for
    callers that still compare against plain strings.
    """
    WAIT = "wait"                  # Created, no connection attempted yet
    CONNECTING = "connecting"      # PING in flight
    CONNECT = "connect"            # Server answered
    READY = "ready"                # Accepting commands
    CLOSE = "close"                # Connection lost, not yet retried
    RECONNECTING = "reconnecting"  # Waiting out a retry delay
    END = "end"                    # Terminal, no further commands

    def __str__(self) -> str:
        return self.value

    @property
    def is_connected(self) -> bool:
        """True once the server has answered and the client is usable."""
        return self in (ConnectionStatus.CONNECT, ConnectionStatus.READY)
