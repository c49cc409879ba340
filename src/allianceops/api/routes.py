"""API router aggregation."""

from fastapi import APIRouter

from allianceops.api.events import router as events_router
from allianceops.api.teams import batch_router as teams_batch_router
from allianceops.api.teams import router as teams_router
from allianceops.api.cache_admin import router as cache_admin_router

router = APIRouter(prefix="/api")

router.include_router(events_router)
router.include_router(teams_router)
router.include_router(teams_batch_router)
router.include_router(cache_admin_router)
