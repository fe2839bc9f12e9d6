"""Per-adapter scraping analytics.

Logging an analytics row must never break a pass, so `record` reports failure
through `AnalyticsResult` instead of raising.
"""

from dataclasses import asdict, dataclass

from lovesync_events.core.supabase_client import SupabaseClient
from lovesync_events.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AnalyticsEntry:
    """One adapter invocation."""

    source_platform: str
    country: str
    city: str | None
    events_scraped: int
    events_inserted: int
    api_calls_made: int
    success: bool
    response_time_ms: int
    error_message: str | None = None

    def to_params(self) -> dict:
        return {f"p_{k}": v for k, v in asdict(self).items()}


@dataclass
class AnalyticsResult:
    ok: bool
    error: str | None = None


class AnalyticsSink:
    """Writes analytics entries through the `log_scraping_analytics` RPC."""

    def __init__(self, store: SupabaseClient) -> None:
        self.store = store

    async def record(self, entry: AnalyticsEntry) -> AnalyticsResult:
        try:
            await self.store.log_analytics(entry.to_params())
        except Exception as e:
            logger.warning(
                "analytics_log_failed",
                source_platform=entry.source_platform,
                city=entry.city,
                error=str(e),
            )
            return AnalyticsResult(ok=False, error=str(e))
        return AnalyticsResult(ok=True)
