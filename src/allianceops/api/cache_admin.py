"""Cache administration endpoints."""

from fastapi import APIRouter, Depends, status

from allianceops.api.auth import RequireAuth
from allianceops.api.dependencies import get_cache
from allianceops.schemas.cache import CacheStats
from allianceops.services.cache import ResponseCache

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStats)
async def cache_stats(
    _: RequireAuth,
    cache: ResponseCache = Depends(get_cache),
):
    """Return cache counters."""
    return cache.stats()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(
    _: RequireAuth,
    cache: ResponseCache = Depends(get_cache),
):
    """Drop every cached entry."""
    cache.clear()
