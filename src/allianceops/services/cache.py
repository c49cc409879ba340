"""Time-classed response cache with in-flight request coalescing."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from allianceops.schemas.cache import CachedResponse, CacheMeta, CacheStats
from allianceops.services.eviction import enforce_capacity
from allianceops.services.freshness import FreshnessClass, is_fresh
from allianceops.services.store import CacheEntry, EntryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Producer = Callable[[], Awaitable[T]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _mark_retrieved(task: "asyncio.Task[Any]") -> None:
    # Abandoned refreshes must not log "exception was never retrieved".
    if not task.cancelled():
        task.exception()


class ResponseCache:
    """In-memory cache that wraps unreliable async producers.

    A fresh entry is served directly. Otherwise at most one producer call
    per key runs at a time and every concurrent caller shares its outcome.
    When a refresh fails the previous entry is served with ``stale=True``;
    with nothing to fall back on, the producer's exception propagates
    unchanged. The cache never retries a producer.

    Create one instance per application and inject it where needed.
    """

    def __init__(
        self,
        max_entries: int = 500,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize an empty cache.

        Args:
            max_entries: Capacity enforced after every insertion.
            clock: Source of timezone-aware "now"; injectable for tests.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._store = EntryStore()
        self._in_flight: dict[str, asyncio.Task[CacheEntry[Any]]] = {}
        self._generation = 0
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._hits = 0
        self._misses = 0
        self._stale_served = 0
        self._evictions = 0

    @property
    def store(self) -> EntryStore:
        return self._store

    def now(self) -> datetime:
        """Current time on the cache clock."""
        return self._clock()

    def in_flight(self, key: str) -> bool:
        """Check whether a producer call for ``key`` is outstanding."""
        return key in self._in_flight

    async def get_or_fetch(
        self,
        key: str,
        freshness_class: FreshnessClass,
        producer: Producer[T],
    ) -> CachedResponse[T]:
        """Get a cached value or fetch it through ``producer``.

        Args:
            key: Opaque caller-built cache key.
            freshness_class: TTL tier recorded on a newly written entry.
            producer: Zero-argument coroutine function doing the real fetch.

        Returns:
            The payload with its cache metadata.
        """
        now = self._clock()
        entry = self._store.get(key)

        # Fast path: fresh hit, no eviction check
        if entry is not None and is_fresh(entry, now):
            entry.touch(now)
            self._hits += 1
            logger.debug("Cache hit for %s", key)
            return self._respond(entry, stale=False)

        self._misses += 1

        # Check and register without yielding so only one producer starts
        task = self._in_flight.get(key)
        if task is None:
            logger.debug("Cache miss for %s, starting producer", key)
            task = asyncio.create_task(
                self._refresh(key, freshness_class, producer, self._generation)
            )
            task.add_done_callback(_mark_retrieved)
            self._in_flight[key] = task
        else:
            logger.debug("Cache miss for %s, joining in-flight producer", key)

        try:
            # Shielded: an abandoned caller stops waiting, the refresh keeps running
            written = await asyncio.shield(task)
        except Exception:
            previous = self._store.get(key)
            if previous is None:
                raise
            self._stale_served += 1
            logger.warning(
                "Refresh failed for %s, serving stale data from %s",
                key,
                previous.stored_at.isoformat(),
            )
            return self._respond(previous, stale=True)

        current = self._store.get(key)
        if current is not None:
            return self._respond(current, stale=False)
        # Evicted or cleared after the write
        return self._respond(written, stale=False)

    async def _refresh(
        self,
        key: str,
        freshness_class: FreshnessClass,
        producer: Producer[T],
        generation: int,
    ) -> CacheEntry[T]:
        try:
            data = await producer()
            entry = CacheEntry.create(data, freshness_class, self._clock())
            if generation == self._generation:
                self._store.put(key, entry)
                evicted = enforce_capacity(self._store, self.max_entries, keep=key)
                if evicted:
                    self._evictions += len(evicted)
                    logger.info("Evicted %d cache entries (capacity %d)", len(evicted), self.max_entries)
            return entry
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

    def _respond(self, entry: CacheEntry[T], *, stale: bool) -> CachedResponse[T]:
        return CachedResponse(
            data=entry.data,
            meta=CacheMeta(
                last_refresh=entry.stored_at,
                stale=stale,
                freshness_class=entry.freshness_class,
            ),
        )

    def stats(self) -> CacheStats:
        """Return a snapshot of cache counters."""
        return CacheStats(
            size=len(self._store),
            max_entries=self.max_entries,
            hits=self._hits,
            misses=self._misses,
            stale_served=self._stale_served,
            evictions=self._evictions,
            in_flight=len(self._in_flight),
        )

    def clear(self) -> None:
        """Empty the store and the in-flight registry.

        Refreshes already running finish for their waiting callers but do
        not write into the reset store.
        """
        self._generation += 1
        self._store.clear()
        self._in_flight.clear()
        self._reset_counters()
        logger.info("Response cache cleared")
