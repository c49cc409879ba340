"""Team performance endpoints backed by Statbotics."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from allianceops.api.dependencies import get_cache, get_statbotics_client
from allianceops.api.limits import default_rate_limit, limiter
from allianceops.schemas.cache import CachedResponse, CacheMeta
from allianceops.schemas.team import TeamSiteBatchRequest
from allianceops.services.cache import ResponseCache
from allianceops.services.freshness import FreshnessClass
from allianceops.services.upstream import StatboticsClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team", tags=["teams"])
batch_router = APIRouter(prefix="/teams", tags=["teams"])


def _team_site(
    cache: ResponseCache,
    statbotics: StatboticsClient,
    team_number: int,
    year: int,
):
    return cache.get_or_fetch(
        f"team-site:{team_number}:{year}",
        FreshnessClass.SEMI_STATIC,
        lambda: statbotics.get_team_site(team_number, year),
    )


@router.get("/{team_number}/site", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def get_team_site(
    request: Request,
    team_number: int,
    year: int = Query(..., ge=2002),
    cache: ResponseCache = Depends(get_cache),
    statbotics: StatboticsClient = Depends(get_statbotics_client),
):
    """Get a team's per-event EPA timeline for a season."""
    return await _team_site(cache, statbotics, team_number, year)


@router.get("/{team_number}/year/{year}", response_model=CachedResponse[Any])
@limiter.limit(default_rate_limit)
async def get_team_year(
    request: Request,
    team_number: int,
    year: int,
    cache: ResponseCache = Depends(get_cache),
    statbotics: StatboticsClient = Depends(get_statbotics_client),
):
    """Get a team's season summary."""
    return await cache.get_or_fetch(
        f"team-year:{team_number}:{year}",
        FreshnessClass.SEMI_STATIC,
        lambda: statbotics.get_team_year(team_number, year),
    )


@batch_router.post("/site-batch", response_model=CachedResponse[dict[int, Any]])
@limiter.limit(default_rate_limit)
async def get_team_site_batch(
    request: Request,
    body: TeamSiteBatchRequest,
    cache: ResponseCache = Depends(get_cache),
    statbotics: StatboticsClient = Depends(get_statbotics_client),
):
    """Get EPA timelines for several teams, sharing per-team cache keys.

    A team whose fetch fails maps to an empty list.
    """
    team_numbers = list(dict.fromkeys(body.team_numbers))
    results = await asyncio.gather(
        *(_team_site(cache, statbotics, team, body.year) for team in team_numbers),
        return_exceptions=True,
    )

    data: dict[int, Any] = {}
    stale = False
    for team, result in zip(team_numbers, results):
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if isinstance(result, Exception):
            logger.warning("Skipping team %s in site batch: %s", team, result)
            data[team] = []
            continue
        data[team] = result.data
        stale = stale or result.meta.stale

    return CachedResponse(
        data=data,
        meta=CacheMeta(
            last_refresh=cache.now(),
            stale=stale,
            freshness_class=FreshnessClass.SEMI_STATIC,
        ),
    )
