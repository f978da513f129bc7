"""In-memory response cache.

Holds upstream JSON bodies keyed by upstream URL. Responses can be larger
than what shared HTTP caches accept, so the service keeps its own copy for
the lifetime of the process.

- Validity is purely time-based: an entry is valid while its age is below
  the TTL (24 hours by default).
- There is no background expiry. When an insert pushes the entry count over
  the sweep threshold, the inserting caller removes every expired entry.
  Live entries are never evicted.
- Every operation takes the store lock for its own duration only. Callers
  must never hold it across upstream I/O.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

import orjson

logger = logging.getLogger(__name__)

DEFAULT_TTL = 86400  # 24 hours
DEFAULT_SWEEP_THRESHOLD = 100


class CacheWriteError(Exception):
    """A value could not be stored (e.g. it is not JSON-serializable)."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot cache {key}: {reason}")


@dataclass(frozen=True)
class CacheEntry:
    """One cached upstream body.

    ``body`` is the orjson-encoded payload. Entries are replaced whole,
    never mutated.
    """

    key: str
    body: bytes
    stored_at: float

    @property
    def value(self) -> Any:
        """Decoded payload (a fresh object on every access)."""
        return orjson.loads(self.body)


@dataclass(frozen=True)
class CacheStats:
    entries: int
    hits: int
    misses: int
    sweeps: int
    expired_removed: int

    @property
    def hit_ratio(self) -> float:
        total = self.hits + self.misses
        return round(self.hits / total, 4) if total else 0.0


class ResponseCache:
    """Process-wide mapping of cache key to CacheEntry.

    One instance is created per application and handed to every handler
    that needs it.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._sweeps = 0
        self._expired_removed = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> list[str]:
        """Snapshot of the current keys."""
        with self._lock:
            return list(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` regardless of age, or None."""
        with self._lock:
            return self._entries.get(key)

    def is_valid(self, entry: CacheEntry | None) -> bool:
        """True if the entry exists and is younger than the TTL."""
        return entry is not None and (self._clock() - entry.stored_at) < self.ttl

    def set(self, key: str, value: Any) -> CacheEntry:
        """Store ``value`` under ``key``, replacing any previous entry.

        Raises CacheWriteError if the value cannot be serialized; the
        previous entry (if any) is left untouched in that case.
        """
        try:
            body = orjson.dumps(value)
        except (orjson.JSONEncodeError, TypeError) as e:
            raise CacheWriteError(key, str(e)) from e

        with self._lock:
            entry = CacheEntry(key=key, body=body, stored_at=self._clock())
            self._entries[key] = entry
            if len(self._entries) > self.sweep_threshold:
                self._sweep_locked()
        return entry

    def _sweep_locked(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.stored_at >= self.ttl]
        for k in expired:
            del self._entries[k]

        self._sweeps += 1
        self._expired_removed += len(expired)
        if expired:
            logger.info(
                f"Swept {len(expired)} expired cache entries",
                extra={"removed": len(expired), "remaining": len(self._entries)},
            )
        return len(expired)

    def delete_key(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_by_pattern(self, pattern: str) -> int:
        """Remove every entry whose key contains ``pattern`` literally.

        Not a glob or regex, and not anchored: ``/categories`` matches both
        ``.../categories`` and ``.../categories/my-slug``.
        """
        with self._lock:
            matched = [k for k in self._entries if pattern in k]
            for k in matched:
                del self._entries[k]

        if matched:
            logger.info(
                f"Cleared {len(matched)} cache entries matching pattern: {pattern}",
                extra={"pattern": pattern, "removed": len(matched)},
            )
        return len(matched)

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared all {count} cache entries")
        return count

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def record_hit(self) -> None:
        with self._lock:
            self._hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                sweeps=self._sweeps,
                expired_removed=self._expired_removed,
            )
