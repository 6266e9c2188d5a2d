"""In-memory TTL cache.

Each data source owns its own instance with its own TTL; an entry older
than the TTL is deleted on read and reported as a miss.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from dpccompare.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cached value with the clock reading at insertion."""

    value: V
    inserted_at: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    hits: int
    misses: int
    ttl_seconds: float


class TTLCache(Generic[K, V]):
    """Map-backed cache with a fixed per-instance TTL.

    Not thread-safe; callers share instances only within one event loop.

    Args:
        ttl_seconds: Maximum entry age in seconds
        name: Label used in log messages
        clock: Callable returning wall-clock seconds (injectable for tests)
        enabled: When False, ``get`` always misses and ``set`` is a no-op

    Example:
        >>> cache: TTLCache[str, int] = TTLCache(ttl_seconds=60, name="demo")
        >>> cache.set("a", 1)
        >>> cache.get("a")
        1
    """

    def __init__(
        self,
        ttl_seconds: float,
        name: str = "cache",
        clock: Callable[[], float] = time.time,
        *,
        enabled: bool = True,
    ):
        if ttl_seconds <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Cache TTL must be positive, got: {ttl_seconds}",
                context=ErrorContext(
                    operation="ttl_cache_init",
                    additional_data={"name": name, "ttl_seconds": ttl_seconds},
                ),
            )

        self.ttl_seconds = ttl_seconds
        self.name = name
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: K) -> V | None:
        """Return the cached value, or None on a miss or an expired entry."""
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if self._clock() - entry.inserted_at > self.ttl_seconds:
            del self._entries[key]
            self._misses += 1
            logger.debug("Expired entry evicted from %s cache", self.name)
            return None

        self._hits += 1
        return entry.value

    def set(self, key: K, value: V) -> None:
        if not self.enabled:
            return
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("%s cache cleared", self.name)

    def keys(self) -> list[K]:
        return list(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            ttl_seconds=self.ttl_seconds,
        )

    def __contains__(self, key: object) -> bool:
        # Membership checks do not count as hits or misses
        entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and self._clock() - entry.inserted_at <= self.ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)
