"""
Store Configuration - Options accepted by RedisSessionStore.

Only ``client``, ``duplicate`` and ``db`` mean something to the store.
Everything else is opaque and forwarded to the Redis client untouched.
"""

import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

# Option names from older releases: old name -> (new name, deprecated?)
LEGACY_OPTIONS: Dict[str, tuple] = {
    "socket": ("unix_socket_path", True),
    "pass": ("password", True),
    "auth_pass": ("password", True),
    "path": ("unix_socket_path", False),
}


def _translate_legacy(options: Dict[str, Any]) -> Dict[str, Any]:
    """Rename legacy option keys to their redis-py equivalents."""
    translated = dict(options)
    for old, (new, deprecated) in LEGACY_OPTIONS.items():
        if old not in translated:
            continue
        value = translated.pop(old)
        if deprecated:
            warnings.warn(
                f"The '{old}' option is deprecated, use '{new}' instead.",
                DeprecationWarning,
                stacklevel=4,
            )
        # An explicit new-style option wins over its legacy alias
        translated.setdefault(new, value)
    return translated


@dataclass
class StoreConfig:
    """
    Configuration for a RedisSessionStore.

    Attributes:
        client: Pre-built client to use instead of creating one
        duplicate: When client is set, clone it instead of sharing it
        db: Logical database index for a new or duplicated client
        extra: Any other options, passed verbatim to the client

    Usage:
        config = StoreConfig(db=2, extra={"host": "redis.internal"})
        store = RedisSessionStore(config)

        # Equivalent keyword form
        store = RedisSessionStore(db=2, host="redis.internal")
    """
    client: Optional[Any] = None
    duplicate: bool = False
    db: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, **options: Any) -> "StoreConfig":
        """
        Build a config from a flat option mapping.

        Known fields are picked out; legacy option names are translated
        (with a DeprecationWarning where applicable) and the rest lands
        in ``extra``.
        """
        options = _translate_legacy(options)
        return cls(
            client=options.pop("client", None),
            duplicate=bool(options.pop("duplicate", False)),
            db=options.pop("db", None),
            extra=options,
        )

    def merge(self, **options: Any) -> "StoreConfig":
        """Return a copy with additional flat options applied on top."""
        if not options:
            return replace(self, extra=dict(self.extra))
        overrides = StoreConfig.from_options(**options)
        return StoreConfig(
            client=overrides.client if overrides.client is not None else self.client,
            duplicate=self.duplicate or overrides.duplicate,
            db=overrides.db if overrides.db is not None else self.db,
            extra={**self.extra, **overrides.extra},
        )

    def client_options(self) -> Dict[str, Any]:
        """Options to hand to the client constructor or to duplicate()."""
        options = dict(self.extra)
        if self.db is not None:
            options["db"] = self.db
        return options
