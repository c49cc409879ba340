"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from allianceops import __version__
from allianceops.api import router
from allianceops.api.errors import transport_error_handler, upstream_error_handler
from allianceops.api.limits import limiter, rate_limit_exceeded_handler
from allianceops.config import configure_logging, get_settings
from allianceops.services.cache import ResponseCache
from allianceops.services.upstream import StatboticsClient, TBAClient, UpstreamError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()

    # Startup
    http = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    app.state.cache = ResponseCache(max_entries=settings.cache_max_entries)
    app.state.statbotics = StatboticsClient(http, settings.statbotics_base_url)
    app.state.tba = None
    if settings.tba_api_key:
        app.state.tba = TBAClient(http, settings.tba_api_key, settings.tba_base_url)
    else:
        logger.warning("ALLIANCEOPS_TBA_API_KEY is not set; event routes are disabled")

    yield

    # Shutdown
    app.state.cache.clear()
    await http.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Cached FRC event and team data from The Blue Alliance and Statbotics",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(httpx.TransportError, transport_error_handler)

    # Include API routes
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def run_server():
    """Run the API server."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "allianceops.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run_server()
