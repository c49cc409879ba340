"""Cache envelope schemas shared by the server routes and the client gateway."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from allianceops.schemas.base import BaseSchema
from allianceops.services.freshness import FreshnessClass

T = TypeVar("T")


class CacheMeta(BaseSchema):
    """Freshness metadata attached to every cached response."""

    last_refresh: datetime
    stale: bool = False
    freshness_class: FreshnessClass


class CachedResponse(BaseSchema, Generic[T]):
    """Payload plus cache metadata, forwarded verbatim to HTTP callers."""

    data: T
    meta: CacheMeta


class ResourceEnvelope(BaseSchema):
    """Client-side view of a response; ``meta`` is absent for uncached endpoints."""

    data: Any = None
    meta: CacheMeta | None = None


class CacheStats(BaseSchema):
    """Point-in-time counters for the response cache."""

    size: int
    max_entries: int
    hits: int
    misses: int
    stale_served: int
    evictions: int
    in_flight: int
