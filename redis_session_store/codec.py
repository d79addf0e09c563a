"""
Session Codec - JSON encoding of session payloads.

The stored value is the bare JSON text of the session object, with no
envelope or version tag, so other processes sharing the store can read it.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class DecodeOutcome(Enum):
    """What was found under a session key."""
    VALUE = "value"          # Valid JSON payload
    ABSENT = "absent"        # No payload stored
    MALFORMED = "malformed"  # Payload exists but cannot be decoded


@dataclass(frozen=True)
class Decoded:
    """Result of decoding a raw stored payload."""
    outcome: DecodeOutcome
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is DecodeOutcome.VALUE

    def unwrap(self) -> Any:
        """Collapse to the public contract: the value, or None."""
        return self.value if self.ok else None


def encode_session(session: Any) -> str:
    """
    Serialize a session object to compact JSON text.

    Raises:
        TypeError: If the object is not JSON serializable
        ValueError: If the object holds NaN or infinite floats, which have
            no JSON representation
    """
    return json.dumps(session, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def decode_session(raw: Union[str, bytes, None]) -> Decoded:
    """
    Decode a raw stored payload.

    Never raises for bad data: undecodable bytes, invalid JSON and
    nesting too deep to parse all come back as a MALFORMED result
    carrying the error.

    Args:
        raw: Value read from Redis (str or bytes), or None if missing

    Returns:
        Decoded result
    """
    if not raw:
        return Decoded(DecodeOutcome.ABSENT)

    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        return Decoded(DecodeOutcome.VALUE, value=json.loads(text))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        return Decoded(DecodeOutcome.MALFORMED, error=e)
