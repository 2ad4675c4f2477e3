"""Size-bounded cache for template lookups.

Keys are strings or sequences of strings. Sequences are joined with a
reserved delimiter so ``["template", "a/", "b.html"]`` is one flat key.
Entries are weighed by a size function (list length for lists, 1 otherwise)
and the least recently used entries are evicted once the total weight
exceeds the configured maximum.

A disabled cache stores nothing and answers every lookup with MISSING.
"""

import logging
from collections import OrderedDict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from tema.exceptions import InvalidOptionError

logger = logging.getLogger(__name__)

KEY_DELIMITER = "\x1f"
DEFAULT_MAX_WEIGHT = 1000


class _Missing:
    """Sentinel type for "no entry", distinct from a cached False."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def default_size(value: Any) -> int:
    """Weigh list values by their length, everything else as 1."""
    if isinstance(value, (list, tuple)):
        return len(value)
    return 1


def encode_key(key: str | Sequence[str]) -> str:
    """Encode a composite key into a single string."""
    if isinstance(key, str):
        return key
    return KEY_DELIMITER.join(str(part) for part in key)


@dataclass
class CacheSettings:
    """Cache configuration.

    Attributes:
        enabled: Whether anything is stored at all
        max_weight: Total weight kept before least recently used entries go
        size: Function weighing a single value
    """

    enabled: bool = False
    max_weight: int = DEFAULT_MAX_WEIGHT
    size: Callable[[Any], int] = field(default=default_size, repr=False)

    def __post_init__(self) -> None:
        if self.max_weight < 1:
            raise InvalidOptionError("cache", f"Cache max weight must be positive (got {self.max_weight})")

    @classmethod
    def from_option(cls, value: Any) -> "CacheSettings":
        """Build settings from the engine's ``cache`` option.

        Accepts False/None (disabled), True (enabled with defaults), an int
        (maximum weight) or a mapping with ``max`` and optional ``size``.
        """
        if isinstance(value, CacheSettings):
            return value
        if value is None or value is False:
            return cls(enabled=False)
        if value is True:
            return cls(enabled=True)
        if isinstance(value, int):
            return cls(enabled=True, max_weight=value)
        if isinstance(value, Mapping):
            return cls(
                enabled=value.get("enabled", True),
                max_weight=value.get("max", DEFAULT_MAX_WEIGHT),
                size=value.get("size") or default_size,
            )
        raise InvalidOptionError("cache", f"Invalid cache option: {value!r}")


class TemplateCache:
    """Least recently used store shared by every render on one engine.

    Callers must not mutate values they get back; cached file listings are
    shared between lookups.
    """

    def __init__(self, settings: Any = False) -> None:
        self._store: OrderedDict[str, tuple[Any, int]] = OrderedDict()
        self._weight = 0
        self.settings = CacheSettings()
        self.configure(settings)

    def configure(self, settings: Any) -> None:
        """Apply a new ``cache`` option, dropping entries that no longer fit."""
        self.settings = CacheSettings.from_option(settings)
        if not self.settings.enabled:
            self.clear()
        else:
            self._evict()
        logger.debug("Cache configured: %s", self.settings)

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @property
    def weight(self) -> int:
        return self._weight

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str | Sequence[str]) -> Any:
        """Return the cached value or MISSING."""
        if not self.enabled:
            return MISSING
        encoded = encode_key(key)
        entry = self._store.get(encoded)
        if entry is None:
            return MISSING
        self._store.move_to_end(encoded)
        return entry[0]

    def set(self, key: str | Sequence[str], value: Any) -> None:
        if not self.enabled:
            return
        encoded = encode_key(key)
        previous = self._store.pop(encoded, None)
        if previous is not None:
            self._weight -= previous[1]
        size = self.settings.size(value)
        self._store[encoded] = (value, size)
        self._weight += size
        self._evict()

    def clear(self) -> None:
        self._store.clear()
        self._weight = 0

    def _evict(self) -> None:
        while self._store and self._weight > self.settings.max_weight:
            evicted, (_, size) = self._store.popitem(last=False)
            self._weight -= size
            logger.debug("Evicted cache entry %r", evicted)
