"""Client-side fetch layer: coalescing, bounded retry, cancellation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

import httpx

from allianceops.config import Settings
from allianceops.schemas.cache import CacheMeta, ResourceEnvelope
from allianceops.services.retry_after import parse_retry_after_ms

logger = logging.getLogger(__name__)

# Service unavailable and rate limited
RETRYABLE_STATUS_CODES = frozenset({429, 503})
MAX_RETRIES = 3
BACKOFF_BASE_SECONDS = 1.0


class ResourceFetchError(Exception):
    """Terminal failure for one resource fetch, carrying the HTTP status."""

    def __init__(self, status_code: int, message: str, retry_after_ms: int | None = None):
        self.status_code = status_code
        self.message = message
        self.retry_after_ms = retry_after_ms
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES


class AuthenticationRequiredError(ResourceFetchError):
    """The server redirected to a login flow; never retried."""


class CancellationToken:
    """Per-caller flag marking a pending result as unwanted."""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def _mark_retrieved(task: "asyncio.Task[Any]") -> None:
    if not task.cancelled():
        task.exception()


class ResourceGateway:
    """Fetch API resources with retry on backpressure.

    Concurrent requests for the same path share one network call. Only
    429 and 503 responses are retried, waiting for the server's
    ``Retry-After`` when present and ``base * 2**attempt`` otherwise.
    Redirects are reported as :class:`AuthenticationRequiredError`.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        *,
        max_retries: int = MAX_RETRIES,
        backoff_base_seconds: float = BACKOFF_BASE_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self._client = client or httpx.AsyncClient(follow_redirects=False)
        self._owns_client = client is None
        self._sleep = sleep
        self._in_flight: dict[str, asyncio.Task[ResourceEnvelope]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> "ResourceGateway":
        """Build a gateway using the client_* settings."""
        return cls(
            settings.client_api_base,
            client,
            max_retries=settings.client_max_retries,
            backoff_base_seconds=settings.client_backoff_base_seconds,
        )

    async def __aenter__(self) -> "ResourceGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    def in_flight(self, path: str) -> bool:
        return path in self._in_flight

    async def fetch_resource(self, path: str) -> ResourceEnvelope:
        """Fetch ``path`` relative to the API base.

        Cancelling the awaiting caller does not cancel the shared request.
        """
        task = self._in_flight.get(path)
        if task is None:
            task = asyncio.create_task(self._fetch_with_retry(path))
            task.add_done_callback(_mark_retrieved)
            self._in_flight[path] = task
        return await asyncio.shield(task)

    def backoff_seconds(self, attempt: int, retry_after_ms: int | None) -> float:
        if retry_after_ms is not None:
            return retry_after_ms / 1000
        return self.backoff_base_seconds * 2**attempt

    async def _fetch_with_retry(self, path: str) -> ResourceEnvelope:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            attempt = 0
            while True:
                response = await self._client.get(url)
                if response.is_success:
                    return self._envelope(response)

                error = self._classify(response, path)
                if not error.retryable:
                    raise error
                if attempt >= self.max_retries:
                    logger.error(
                        "Giving up on %s after %d attempts (HTTP %s)",
                        path,
                        attempt + 1,
                        error.status_code,
                    )
                    raise error

                delay = self.backoff_seconds(attempt, error.retry_after_ms)
                logger.warning(
                    "HTTP %s for %s, retry %d/%d in %.2fs",
                    error.status_code,
                    path,
                    attempt + 1,
                    self.max_retries,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1
        finally:
            if self._in_flight.get(path) is asyncio.current_task():
                del self._in_flight[path]

    def _classify(self, response: httpx.Response, path: str) -> ResourceFetchError:
        if 300 <= response.status_code < 400:
            return AuthenticationRequiredError(
                response.status_code,
                f"Authentication required for {path}",
            )
        return ResourceFetchError(
            response.status_code,
            f"API error: {response.status_code} for {path}",
            retry_after_ms=parse_retry_after_ms(response.headers.get("Retry-After")),
        )

    @staticmethod
    def _envelope(response: httpx.Response) -> ResourceEnvelope:
        if not response.content:
            return ResourceEnvelope()
        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return ResourceEnvelope.model_validate(body)
        return ResourceEnvelope(data=body)


@dataclass(frozen=True)
class ResourceState:
    """Observable snapshot of one bound resource."""

    data: Any = None
    loading: bool = False
    error: Exception | None = None
    meta: CacheMeta | None = None


class ResourceBinding:
    """A caller-owned view of one resource path.

    Each load gets a fresh cancellation token and cancels the previous
    one, so results arriving for an abandoned path or after ``close()``
    are discarded without touching state.
    """

    def __init__(self, gateway: ResourceGateway):
        self.gateway = gateway
        self.path: str | None = None
        self.state = ResourceState()
        self._token = CancellationToken()
        self._listeners: list[Callable[[ResourceState], None]] = []

    def subscribe(self, listener: Callable[[ResourceState], None]) -> Callable[[], None]:
        """Register a state listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)
        for listener in list(self._listeners):
            listener(self.state)

    async def load(self, path: str | None) -> None:
        """Bind to ``path`` and fetch it; ``None`` unbinds."""
        self._token.cancel()
        token = self._token = CancellationToken()
        self.path = path
        if path is None:
            self._update(loading=False)
            return

        self._update(loading=True, error=None)
        try:
            envelope = await self.gateway.fetch_resource(path)
        except Exception as error:
            if token.cancelled:
                return
            self._update(loading=False, error=error)
            return

        if token.cancelled:
            return
        self._update(data=envelope.data, meta=envelope.meta, loading=False)

    async def retry(self) -> None:
        """Re-fetch the current path."""
        await self.load(self.path)

    def close(self) -> None:
        """Tear down: drop listeners and discard any pending result."""
        self._token.cancel()
        self._listeners.clear()
