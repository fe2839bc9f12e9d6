"""Firecrawl client.

Firecrawl renders JavaScript-heavy listing pages and returns Markdown, which
the web scraping adapter splits into candidate lines. Requests to the same
listing domain are spaced out; 429 and 5xx answers are retried by
`with_retry`.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

import httpx

from lovesync_events.core.exceptions import FirecrawlError
from lovesync_events.core.retry import RetryableHTTPError, RetryConfig, with_retry
from lovesync_events.logging import get_logger

logger = get_logger(__name__)

SCRAPE_RETRY = RetryConfig(max_attempts=3, initial_delay=2.0, max_delay=20.0)


@dataclass
class ScrapedPage:
    """Rendered page, or the reason there is none."""

    url: str
    success: bool
    markdown: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def title(self) -> str | None:
        return self.metadata.get("title")


class FirecrawlClient:
    """Async client for `POST /v1/scrape`.

    Example:
        ```python
        client = FirecrawlClient("https://api.firecrawl.dev", api_key="fc-...")
        page = await client.scrape("https://allevents.in/mumbai/all")
        await client.close()
        ```
    """

    def __init__(
        self,
        base_url: str = "https://api.firecrawl.dev",
        api_key: str | None = None,
        domain_interval: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.domain_interval = domain_interval
        self._transport = transport
        self._last_hit: dict[str, float] = {}
        self._client: httpx.AsyncClient | None = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            # rendering can take most of a minute
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _space_out(self, domain: str) -> None:
        last = self._last_hit.get(domain)
        if last is not None:
            wait = self.domain_interval - (time.monotonic() - last)
            if wait > 0:
                logger.debug("domain_wait", domain=domain, wait_seconds=round(wait, 2))
                await asyncio.sleep(wait)
        self._last_hit[domain] = time.monotonic()

    @with_retry(SCRAPE_RETRY)
    async def _post_scrape(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._http().post(f"{self.base_url}/v1/scrape", json=payload)
        if response.status_code == 429 or response.status_code >= 500:
            raise RetryableHTTPError(response.status_code, response.text[:200])
        if response.status_code >= 400:
            raise FirecrawlError(f"HTTP {response.status_code}", url=payload["url"], source="firecrawl")

        body = response.json()
        if not body.get("success") or not isinstance(body.get("data"), dict):
            raise FirecrawlError(body.get("error") or "Unexpected response", url=payload["url"], source="firecrawl")
        return body["data"]

    async def scrape(self, url: str, timeout: int = 30000, only_main_content: bool = True) -> ScrapedPage:
        """Render `url` to Markdown.

        Failures are returned as `success=False` pages so one broken listing
        does not stop the others.
        """
        await self._space_out(urlparse(url).netloc)
        payload = {
            "url": url,
            "formats": ["markdown"],
            "onlyMainContent": only_main_content,
            "timeout": timeout,
        }
        try:
            data = await self._post_scrape(payload)
        except RetryableHTTPError as e:
            logger.warning("firecrawl_gave_up", url=url, status=e.status_code)
            return ScrapedPage(url=url, success=False, error=str(e))
        except FirecrawlError as e:
            logger.warning("firecrawl_failed", url=url, error=str(e))
            return ScrapedPage(url=url, success=False, error=str(e))
        except (httpx.HTTPError, ValueError) as e:
            logger.error("firecrawl_error", url=url, error=str(e))
            return ScrapedPage(url=url, success=False, error=str(e))

        return ScrapedPage(
            url=url,
            success=True,
            markdown=data.get("markdown"),
            metadata=data.get("metadata") or {},
        )
