"""Event data endpoints backed by The Blue Alliance."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from allianceops.api.dependencies import get_cache, get_tba_client
from allianceops.api.limits import default_rate_limit, limiter
from allianceops.schemas.cache import CachedResponse
from allianceops.services.cache import ResponseCache
from allianceops.services.freshness import FreshnessClass
from allianceops.services.upstream import TBAClient

router = APIRouter(tags=["events"])


@router.get("/events", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def list_events(
    request: Request,
    year: int = Query(..., ge=1992),
    cache: ResponseCache = Depends(get_cache),
    tba: TBAClient = Depends(get_tba_client),
):
    """List all events for a season."""
    return await cache.get_or_fetch(
        f"events:{year}",
        FreshnessClass.STATIC,
        lambda: tba.get_events(year),
    )


@router.get("/event/{event_key}/matches", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def list_event_matches(
    request: Request,
    event_key: str,
    cache: ResponseCache = Depends(get_cache),
    tba: TBAClient = Depends(get_tba_client),
):
    """List matches for an event."""
    return await cache.get_or_fetch(
        f"matches:{event_key}",
        FreshnessClass.LIVE,
        lambda: tba.get_event_matches(event_key),
    )


@router.get("/event/{event_key}/teams", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def list_event_teams(
    request: Request,
    event_key: str,
    cache: ResponseCache = Depends(get_cache),
    tba: TBAClient = Depends(get_tba_client),
):
    """List teams attending an event."""
    return await cache.get_or_fetch(
        f"teams:{event_key}",
        FreshnessClass.SEMI_STATIC,
        lambda: tba.get_event_teams(event_key),
    )


@router.get("/event/{event_key}/rankings", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def get_event_rankings(
    request: Request,
    event_key: str,
    cache: ResponseCache = Depends(get_cache),
    tba: TBAClient = Depends(get_tba_client),
):
    """Get qualification rankings for an event."""
    return await cache.get_or_fetch(
        f"rankings:{event_key}",
        FreshnessClass.SEMI_STATIC,
        lambda: tba.get_event_rankings(event_key),
    )
