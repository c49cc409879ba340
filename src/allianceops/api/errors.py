"""Exception handlers translating upstream failures into HTTP responses."""

import httpx
from fastapi import Request, status
from fastapi.responses import JSONResponse

from allianceops.services.upstream import UpstreamError

# Upstream statuses reported to clients as retryable unavailability
_UNAVAILABLE = {429, 503}


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Forward upstream backpressure as 503, anything else as 502."""
    headers = {}
    if exc.status_code in _UNAVAILABLE:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        if exc.retry_after:
            headers["Retry-After"] = exc.retry_after
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
    return JSONResponse(
        {"detail": exc.message, "source": exc.source, "upstreamStatus": exc.status_code},
        status_code=status_code,
        headers=headers,
    )


async def transport_error_handler(request: Request, exc: httpx.TransportError) -> JSONResponse:
    """Network failure reaching an upstream API."""
    return JSONResponse(
        {"detail": f"Upstream unreachable: {exc}"},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
