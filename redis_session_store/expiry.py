"""
Session Expiry - Converts a session max age into a Redis TTL.

Callers express max age in milliseconds (or with the "session" marker);
Redis expects whole seconds.
"""

import math
from datetime import timedelta
from typing import Any, Optional

SESSION_MAX_AGE = "session"
DEFAULT_SESSION_LIFETIME_MS = 24 * 60 * 60 * 1000  # one day
MIN_TTL_SECONDS = 1


def resolve_ttl(max_age: Any) -> Optional[int]:
    """
    Resolve a session max age to a TTL in whole seconds.

    Args:
        max_age: One of
            - int/float: milliseconds until expiry
            - timedelta: duration until expiry
            - "session": the default one-day lifetime
            - anything else (None included): no expiry

    Returns:
        TTL in seconds, rounded up and never below 1, or None for no expiry

    Raises:
        ValueError: If max_age is NaN or infinite
    """
    if isinstance(max_age, bool):
        return None

    if isinstance(max_age, timedelta):
        millis = max_age.total_seconds() * 1000
    elif isinstance(max_age, (int, float)):
        millis = max_age
    elif max_age == SESSION_MAX_AGE:
        millis = DEFAULT_SESSION_LIFETIME_MS
    else:
        return None

    if not math.isfinite(millis):
        raise ValueError(f"max_age must be finite, got {max_age!r}")

    # Rounding may yield 0 or a negative TTL, which Redis rejects
    return max(math.ceil(millis / 1000), MIN_TTL_SECONDS)
