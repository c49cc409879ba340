"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from allianceops.api.dependencies import get_cache, get_statbotics_client, get_tba_client
from allianceops.api.limits import limiter
from allianceops.config import get_settings
from allianceops.main import create_app
from allianceops.services.cache import ResponseCache
from allianceops.services.gateway import ResourceGateway
from allianceops.services.upstream import UpstreamError


class FakeClock:
    """Manually advanced timezone-aware clock."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeTBA:
    """In-memory TBA client counting calls per method."""

    def __init__(self):
        self.calls: dict[str, int] = {}
        self.error: Exception | None = None
        self.events = [{"key": "2025miket", "name": "Kettering District"}]

    async def _serve(self, name: str, payload):
        self.calls[name] = self.calls.get(name, 0) + 1
        if self.error is not None:
            raise self.error
        return payload

    async def get_events(self, year: int):
        return await self._serve("events", self.events)

    async def get_event_matches(self, event_key: str):
        return await self._serve("matches", [{"key": f"{event_key}_qm1"}])

    async def get_event_teams(self, event_key: str):
        return await self._serve("teams", [{"key": "frc254"}])

    async def get_event_rankings(self, event_key: str):
        return await self._serve("rankings", {"rankings": []})


class FakeStatbotics:
    """In-memory Statbotics client."""

    def __init__(self):
        self.calls: dict[str, int] = {}
        self.error: Exception | None = None
        self.failing_teams: set[int] = set()

    async def _serve(self, name: str, payload):
        self.calls[name] = self.calls.get(name, 0) + 1
        if self.error is not None:
            raise self.error
        return payload

    async def get_team_year(self, team: int, year: int):
        return await self._serve("team_year", {"team": team, "year": year})

    async def get_team_site(self, team: int, year: int):
        if team in self.failing_teams:
            self.calls["team_site"] = self.calls.get("team_site", 0) + 1
            raise UpstreamError("statbotics", 404, f"statbotics API error: 404 for team {team}")
        return await self._serve("team_site", [{"event": f"{year}miket", "team": team}])


@pytest.fixture
def clock():
    """A fake clock starting at 2025-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """A small response cache driven by the fake clock."""
    return ResponseCache(max_entries=5, clock=clock)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
async def make_gateway(sleeps):
    """Factory building gateways over an httpx mock transport."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler, **kwargs) -> ResourceGateway:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ResourceGateway("http://test/api", client, sleep=sleeps, **kwargs)

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def fake_tba():
    return FakeTBA()


@pytest.fixture
def fake_statbotics():
    return FakeStatbotics()


@pytest.fixture
def upstream_rate_limited():
    return UpstreamError("tba", 429, "tba API error: 429 Too Many Requests", retry_after="30")


@pytest.fixture
def admin_key(monkeypatch):
    """Enable admin authentication for the duration of a test."""
    monkeypatch.setenv("ALLIANCEOPS_API_KEY", "secret-key")
    get_settings.cache_clear()
    yield "secret-key"
    get_settings.cache_clear()


@pytest.fixture
async def client(cache, fake_tba, fake_statbotics):
    """Create a test client with injected cache and upstream clients."""
    app = create_app()
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_tba_client] = lambda: fake_tba
    app.dependency_overrides[get_statbotics_client] = lambda: fake_statbotics
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
