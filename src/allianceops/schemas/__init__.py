"""Pydantic schemas for the AllianceOps API."""

from allianceops.schemas.cache import (
    CacheMeta,
    CachedResponse,
    CacheStats,
    ResourceEnvelope,
)
from allianceops.schemas.team import TeamSiteBatchRequest

__all__ = [
    "CacheMeta",
    "CachedResponse",
    "CacheStats",
    "ResourceEnvelope",
    "TeamSiteBatchRequest",
]
