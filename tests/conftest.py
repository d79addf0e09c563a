"""
Pytest configuration for redis_session_store tests.

Redis is replaced by fakeredis (shared in-process server, real TTL
behaviour) or by FlakyRedis when a test needs connection failures.
"""

import functools

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from redis.exceptions import ConnectionError as RedisConnectionError


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test."
    )


class FlakyRedis:
    """
    Minimal stand-in for redis.asyncio.Redis with injectable failures.

    Every data command is appended to ``calls`` by name.

    Args:
        fail_pings: Number of initial PINGs that fail
        fail_commands: Whether data commands raise a connection error
        ping_error: Exception every PING raises instead, if given
    """

    def __init__(self, fail_pings: int = 0, fail_commands: bool = False, ping_error=None, **options):
        self.options = options
        self.fail_pings = fail_pings
        self.fail_commands = fail_commands
        self.ping_error = ping_error
        self.pings = 0
        self.closed = False
        self.data = {}
        self.calls = []

    async def ping(self):
        self.pings += 1
        if self.ping_error is not None:
            raise self.ping_error
        if self.pings <= self.fail_pings:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        return True

    def _command(self, name):
        self.calls.append(name)
        if self.fail_commands:
            raise RedisConnectionError("Connection reset by peer")

    async def get(self, key):
        self._command("get")
        return self.data.get(key)

    async def set(self, key, value, **kwargs):
        self._command("set")
        self.data[key] = value
        return True

    async def setex(self, key, ttl, value):
        self._command("setex")
        self.data[key] = value
        return True

    async def delete(self, *keys):
        self._command("delete")
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def server():
    """A private fakeredis server per test."""
    return FakeServer()


@pytest.fixture
def factory(server):
    """Client factory bound to the test's fakeredis server."""
    return functools.partial(FakeAsyncRedis, server=server)


@pytest.fixture
def inspect_db(server):
    """Build a direct fakeredis connection for checking what was stored."""
    def build(db: int = 0):
        return FakeAsyncRedis(server=server, db=db, decode_responses=True)
    return build


@pytest.fixture
def flaky():
    """Build a client factory producing FlakyRedis with the given behaviour."""
    def build(**behaviour):
        return lambda **options: FlakyRedis(**behaviour, **options)
    return build
