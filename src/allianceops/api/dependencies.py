"""FastAPI dependencies resolving per-application services."""

from fastapi import HTTPException, Request, status

from allianceops.services.cache import ResponseCache
from allianceops.services.upstream import StatboticsClient, TBAClient


def get_cache(request: Request) -> ResponseCache:
    """The response cache created at application startup."""
    return request.app.state.cache


def get_tba_client(request: Request) -> TBAClient:
    client = getattr(request.app.state, "tba", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="TBA API key is not configured",
        )
    return client


def get_statbotics_client(request: Request) -> StatboticsClient:
    return request.app.state.statbotics
