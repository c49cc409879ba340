"""Freshness classes and the TTL policy attached to them."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from allianceops.services.store import CacheEntry


class FreshnessClass(str, Enum):
    """TTL tier assigned to a cache key at write time."""

    STATIC = "STATIC"
    SEMI_STATIC = "SEMI_STATIC"
    LIVE = "LIVE"


TTL: dict[FreshnessClass, timedelta] = {
    FreshnessClass.STATIC: timedelta(hours=1),
    FreshnessClass.SEMI_STATIC: timedelta(minutes=5),
    FreshnessClass.LIVE: timedelta(seconds=60),
}


def is_fresh(entry: CacheEntry, now: datetime) -> bool:
    """Return True while the entry is younger than its class TTL.

    The boundary itself counts as expired.
    """
    return now - entry.stored_at < TTL[entry.freshness_class]
