"""
Tests for max-age to TTL resolution.
"""

import math
from datetime import timedelta

import pytest

from redis_session_store.expiry import (
    DEFAULT_SESSION_LIFETIME_MS,
    SESSION_MAX_AGE,
    resolve_ttl,
)


class TestResolveTtl:

    def test_milliseconds_round_up_to_seconds(self):
        assert resolve_ttl(86400000) == 86400
        assert resolve_ttl(1001) == 2
        assert resolve_ttl(999.5) == 1

    def test_floor_of_one_second(self):
        assert resolve_ttl(1) == 1
        assert resolve_ttl(0) == 1
        assert resolve_ttl(-3000) == 1

    def test_session_marker(self):
        assert SESSION_MAX_AGE == "session"
        assert resolve_ttl("session") == DEFAULT_SESSION_LIFETIME_MS // 1000 == 86400

    def test_timedelta(self):
        assert resolve_ttl(timedelta(hours=1)) == 3600
        assert resolve_ttl(timedelta(milliseconds=1)) == 1

    @pytest.mark.parametrize("max_age", [None, "1000", "forever", True, False, {}, []])
    def test_no_expiry(self, max_age):
        assert resolve_ttl(max_age) is None

    @pytest.mark.parametrize("max_age", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, max_age):
        with pytest.raises(ValueError, match="finite"):
            resolve_ttl(max_age)
