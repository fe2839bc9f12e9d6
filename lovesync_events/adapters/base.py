"""Base adapter class for all event providers."""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from lovesync_events.config import Settings, get_settings
from lovesync_events.core.event_model import CandidateEvent
from lovesync_events.core.exceptions import HTTPError, MissingApiKeyError, RateLimitError
from lovesync_events.core.retry import RetryableHTTPError, RetryConfig, with_retry
from lovesync_events.logging import get_logger


@dataclass
class FetchRequest:
    """Where and how much to fetch."""

    country: str
    city: str | None = None
    region: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius_km: float = 25.0
    count: int = 15
    generation_batch_id: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class AdapterReport:
    """Outcome of one adapter invocation."""

    source: str
    candidates: list[CandidateEvent] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    api_calls: int = 0
    response_time_ms: int = 0


class BaseAdapter(ABC):
    """Abstract base class for all event providers.

    Subclasses implement `fetch_events`, which may raise. `run` and `fetch`
    wrap it so no provider error ever crosses the adapter boundary.
    """

    # Class-level attributes to be overridden by subclasses
    source_id: str = ""
    source_name: str = ""
    api_key_env: str | None = None  # env var holding the provider key, if paid
    request_delay: float = 0.0  # seconds between requests to the provider
    retry_config: RetryConfig = RetryConfig()

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None
        self._last_request_time: float = 0.0
        self.api_calls = 0
        self.logger = get_logger(f"adapter.{self.source_id}")

    # ==========================================
    # Configuration
    # ==========================================

    @property
    def api_key(self) -> str | None:
        """Provider key; None for free providers."""
        return None

    def is_configured(self) -> bool:
        return self.api_key_env is None or bool(self.api_key)

    def check_configuration(self) -> None:
        """Raise if a paid provider has no key."""
        if not self.is_configured():
            raise MissingApiKeyError(self.source_id, self.api_key_env or "")

    # ==========================================
    # HTTP Client Management
    # ==========================================

    async def get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.scraper_request_timeout),
                headers={"User-Agent": self.settings.scraper_user_agent},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http_client

    async def close_http_client(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
        self._http_client = None

    async def _wait_for_rate_limit(self) -> None:
        if self.request_delay <= 0 or not self._last_request_time:
            self._last_request_time = time.monotonic()
            return
        wait_time = self.request_delay - (time.monotonic() - self._last_request_time)
        if wait_time > 0:
            self.logger.debug("rate_limit_wait", wait_seconds=round(wait_time, 2))
            await asyncio.sleep(wait_time)
        self._last_request_time = time.monotonic()

    # ==========================================
    # Request Methods with Retry
    # ==========================================

    @with_retry()
    async def fetch_url(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET a URL with rate limiting and retries on transient failures.

        Raises:
            RateLimitError: provider kept answering 429
            HTTPError: non-retryable HTTP status
        """
        await self._wait_for_rate_limit()
        client = await self.get_http_client()
        self.api_calls += 1
        response = await client.get(url, **kwargs)

        if response.status_code in self.retry_config.retryable_status_codes:
            raise RetryableHTTPError(response.status_code, response.text[:200])
        if response.status_code >= 400:
            raise HTTPError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                url=str(response.url),
                source=self.source_id,
            )
        return response

    async def fetch_json(self, url: str, **kwargs: Any) -> Any:
        try:
            response = await self.fetch_url(url, **kwargs)
        except RetryableHTTPError as e:
            if e.status_code == 429:
                raise RateLimitError(self.source_id) from e
            raise HTTPError(str(e), status_code=e.status_code, url=url, source=self.source_id) from e
        return response.json()

    async def fetch_text(self, url: str, **kwargs: Any) -> str:
        try:
            response = await self.fetch_url(url, **kwargs)
        except RetryableHTTPError as e:
            raise HTTPError(str(e), status_code=e.status_code, url=url, source=self.source_id) from e
        return response.text

    # ==========================================
    # Abstract Methods (to implement per provider)
    # ==========================================

    @abstractmethod
    async def fetch_events(self, request: FetchRequest) -> list[CandidateEvent]:
        """Fetch candidates from the provider. May raise."""

    # ==========================================
    # Boundary
    # ==========================================

    async def run(self, request: FetchRequest) -> AdapterReport:
        """Fetch candidates; any provider failure becomes an unsuccessful report."""
        start = time.monotonic()
        self.api_calls = 0
        report = AdapterReport(source=self.source_id)
        try:
            self.check_configuration()
            report.candidates = list(await self.fetch_events(request))
        except Exception as e:
            report.success = False
            report.error = str(e) or type(e).__name__
            self.logger.warning(
                "adapter_failed",
                source=self.source_id,
                city=request.city,
                country=request.country,
                error=report.error,
                error_type=type(e).__name__,
            )
        finally:
            await self.close_http_client()

        report.api_calls = self.api_calls
        report.response_time_ms = int((time.monotonic() - start) * 1000)
        if report.success:
            self.logger.info(
                "adapter_done",
                source=self.source_id,
                city=request.city,
                candidates=len(report.candidates),
                api_calls=report.api_calls,
                response_time_ms=report.response_time_ms,
            )
        return report

    async def fetch(self, request: FetchRequest) -> list[CandidateEvent]:
        """Candidates for the request; empty on any provider error."""
        return (await self.run(request)).candidates
