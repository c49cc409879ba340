"""In-memory entry store backing the response cache."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Iterator, TypeVar

from allianceops.services.freshness import FreshnessClass

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """One cached producer result."""

    data: T
    stored_at: datetime
    freshness_class: FreshnessClass
    last_accessed_at: datetime

    @classmethod
    def create(cls, data: T, freshness_class: FreshnessClass, now: datetime) -> "CacheEntry[T]":
        """Build a freshly written entry; both timestamps start equal."""
        return cls(
            data=data,
            stored_at=now,
            freshness_class=freshness_class,
            last_accessed_at=now,
        )

    def touch(self, now: datetime) -> None:
        """Record a read for eviction ranking."""
        if now > self.last_accessed_at:
            self.last_accessed_at = now


class EntryStore:
    """Keyed mapping of opaque string keys to cache entries.

    Iteration order is write order: rewriting a key moves it to the end.
    """

    def __init__(self):
        self._entries: dict[str, CacheEntry[Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry[Any]) -> None:
        self._entries.pop(key, None)
        self._entries[key] = entry

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> list[tuple[str, CacheEntry[Any]]]:
        """Snapshot of (key, entry) pairs in write order."""
        return list(self._entries.items())

    def clear(self) -> None:
        self._entries.clear()
