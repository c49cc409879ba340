"""HTTP clients for The Blue Alliance and Statbotics APIs."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Non-success response from a third-party data API."""

    def __init__(
        self,
        source: str,
        status_code: int,
        message: str,
        retry_after: str | None = None,
    ):
        self.source = source
        self.status_code = status_code
        self.message = message
        self.retry_after = retry_after
        super().__init__(message)


class _JSONClient:
    """Shared request handling for the upstream API clients."""

    source = "upstream"

    def __init__(self, http: httpx.AsyncClient, base_url: str, headers: dict[str, str] | None = None):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.headers = {"Accept": "application/json", **(headers or {})}

    async def request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.http.get(
            f"{self.base_url}{path}",
            headers=self.headers,
            params=params,
        )
        if not response.is_success:
            logger.warning("%s returned HTTP %s for %s", self.source, response.status_code, path)
            raise UpstreamError(
                self.source,
                response.status_code,
                f"{self.source} API error: {response.status_code} {response.reason_phrase} for {path}",
                retry_after=response.headers.get("Retry-After"),
            )
        return response.json()


class TBAClient(_JSONClient):
    """Client for The Blue Alliance v3 API."""

    source = "tba"

    def __init__(self, http: httpx.AsyncClient, api_key: str, base_url: str):
        super().__init__(http, base_url, headers={"X-TBA-Auth-Key": api_key})

    async def get_events(self, year: int) -> list[dict[str, Any]]:
        return await self.request(f"/events/{year}")

    async def get_event(self, event_key: str) -> dict[str, Any]:
        return await self.request(f"/event/{event_key}")

    async def get_event_matches(self, event_key: str) -> list[dict[str, Any]]:
        return await self.request(f"/event/{event_key}/matches")

    async def get_event_teams(self, event_key: str) -> list[dict[str, Any]]:
        return await self.request(f"/event/{event_key}/teams")

    async def get_event_rankings(self, event_key: str) -> dict[str, Any]:
        return await self.request(f"/event/{event_key}/rankings")


class StatboticsClient(_JSONClient):
    """Client for the Statbotics v3 API."""

    source = "statbotics"

    async def get_team_year(self, team: int, year: int) -> dict[str, Any]:
        return await self.request(f"/team_year/{team}/{year}")

    async def get_team_site(self, team: int, year: int) -> list[dict[str, Any]]:
        """Per-event EPA timeline for a team."""
        payload = await self.request(f"/site/team/{team}/{year}")
        return payload.get("team_events") or []
