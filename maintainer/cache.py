"""Thread-safe TTL cache used by the version resolver."""

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 3600.0  # one hour


@dataclass(frozen=True)
class CacheEntry:
    """A cached resolution result.

    Exactly one shape is populated: a single ``sha``, a raw ``tags`` map, or
    the comprehensive ``versions``/``aliases`` pair for a repository.
    """

    timestamp: float
    sha: str | None = None
    tags: Mapping[str, str] | None = None
    versions: Mapping[str, str] | None = None
    aliases: Mapping[str, tuple[str, ...]] | None = None

    @classmethod
    def for_sha(cls, sha: str, timestamp: float) -> "CacheEntry":
        return cls(timestamp=timestamp, sha=sha)

    @classmethod
    def for_tags(cls, tags: Mapping[str, str], timestamp: float) -> "CacheEntry":
        return cls(timestamp=timestamp, tags=MappingProxyType(dict(tags)))

    @classmethod
    def comprehensive(
        cls,
        versions: Mapping[str, str],
        aliases: Mapping[str, list[str] | tuple[str, ...]],
        timestamp: float,
    ) -> "CacheEntry":
        return cls(
            timestamp=timestamp,
            versions=MappingProxyType(dict(versions)),
            aliases=MappingProxyType({sha: tuple(tags) for sha, tags in aliases.items()}),
        )


class TTLCache:
    """Keyed store of immutable entries that expire after ``ttl`` seconds."""

    def __init__(self, ttl: float = DEFAULT_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` if present and not expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        # Entries are replaced wholesale, last write wins
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e.timestamp >= self.ttl]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
