"""Region scrape scheduling backed by the `events_regional_cache` table."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from dateutil import parser as dateutil_parser

from lovesync_events.config import get_settings
from lovesync_events.core.supabase_client import SupabaseClient
from lovesync_events.logging import get_logger

logger = get_logger(__name__)


class ScrapingStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RegionKey:
    """A `(country, region?, city?)` scheduling key."""

    country: str
    region: str | None = None
    city: str | None = None

    @property
    def cache_key(self) -> str:
        return f"{self.country}_{self.region or 'all'}_{self.city or 'all'}".lower()

    def __str__(self) -> str:
        return self.cache_key


@dataclass
class RegionCacheEntry:
    """One row of the region cache."""

    cache_key: str
    country: str
    region: str | None
    city: str | None
    event_count: int
    last_scraped_at: datetime | None
    next_scrape_at: datetime | None
    scraping_status: ScrapingStatus

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RegionCacheEntry":
        return cls(
            cache_key=row["cache_key"],
            country=row.get("country", ""),
            region=row.get("region"),
            city=row.get("city"),
            event_count=int(row.get("event_count") or 0),
            last_scraped_at=_parse(row.get("last_scraped_at")),
            next_scrape_at=_parse(row.get("next_scrape_at")),
            scraping_status=ScrapingStatus(row.get("scraping_status") or ScrapingStatus.IDLE.value),
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "cache_key": self.cache_key,
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "event_count": self.event_count,
            "last_scraped_at": self.last_scraped_at.isoformat() if self.last_scraped_at else None,
            "next_scrape_at": self.next_scrape_at.isoformat() if self.next_scrape_at else None,
            "scraping_status": self.scraping_status.value,
        }


def _parse(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = dateutil_parser.isoparse(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegionScheduler:
    """Decides when a region is due and records each pass outcome.

    A region is due when it has no entry, its `next_scrape_at` has passed, or
    its last pass was thin (fewer than `min_events`) and the shorter
    thin-retry interval has elapsed since then.
    """

    def __init__(
        self,
        store: SupabaseClient,
        window: timedelta | None = None,
        thin_retry: timedelta | None = None,
        min_events: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.window = window or timedelta(hours=settings.scrape_window_hours)
        self.thin_retry = thin_retry or timedelta(minutes=settings.thin_retry_minutes)
        self.min_events = settings.min_events_per_region if min_events is None else min_events
        self.clock = clock
        self.logger = get_logger("region_scheduler")

    async def get_entry(self, key: RegionKey) -> RegionCacheEntry | None:
        row = await self.store.get_region_entry(key.cache_key)
        return RegionCacheEntry.from_row(row) if row else None

    async def should_scrape(self, key: RegionKey) -> bool:
        """True if the region is due for another pass.

        Lookup failures answer True so a broken cache never blocks scraping.
        """
        try:
            entry = await self.get_entry(key)
        except Exception as e:
            self.logger.warning("region_check_failed", region=key.cache_key, error=str(e))
            return True

        now = self.clock()
        if entry is None or entry.next_scrape_at is None:
            return True
        if entry.next_scrape_at <= now:
            return True
        if entry.event_count < self.min_events and entry.last_scraped_at is not None:
            return entry.last_scraped_at + self.thin_retry <= now
        return False

    async def mark_running(self, key: RegionKey) -> None:
        entry = await self.get_entry(key) or self._blank(key)
        entry.scraping_status = ScrapingStatus.RUNNING
        await self.store.upsert_region_entry(entry.to_row())

    async def record_outcome(
        self,
        key: RegionKey,
        event_count: int,
        status: ScrapingStatus = ScrapingStatus.COMPLETED,
    ) -> RegionCacheEntry:
        """Store the pass result and push `next_scrape_at` forward.

        `next_scrape_at` strictly increases across calls, even when the clock
        does not move between them.
        """
        now = self.clock()
        entry = await self.get_entry(key) or self._blank(key)
        next_at = now + self.window
        if entry.next_scrape_at is not None and next_at <= entry.next_scrape_at:
            next_at = entry.next_scrape_at + timedelta(microseconds=1)

        entry.event_count = event_count
        entry.last_scraped_at = now
        entry.next_scrape_at = next_at
        entry.scraping_status = status
        await self.store.upsert_region_entry(entry.to_row())

        self.logger.info(
            "region_cache_updated",
            region=key.cache_key,
            event_count=event_count,
            status=status.value,
            next_scrape_at=next_at.isoformat(),
        )
        return entry

    async def mark_failed(self, key: RegionKey, event_count: int = 0) -> RegionCacheEntry:
        return await self.record_outcome(key, event_count, ScrapingStatus.FAILED)

    async def recent_event_count(self, city: str, hours: float) -> int:
        return await self.store.count_recent_events(city, self.clock() - timedelta(hours=hours))

    async def city_needs_event_refresh(
        self,
        city: str,
        min_events: int = 5,
        hours_threshold: float = 24,
    ) -> bool:
        """AI cache check: too few fresh events for the city.

        Validated by live count rather than wall-clock age alone.
        """
        try:
            count = await self.recent_event_count(city, hours_threshold)
        except Exception as e:
            self.logger.warning("refresh_check_failed", city=city, error=str(e))
            return True
        return count < min_events

    def _blank(self, key: RegionKey) -> RegionCacheEntry:
        return RegionCacheEntry(
            cache_key=key.cache_key,
            country=key.country,
            region=key.region,
            city=key.city,
            event_count=0,
            last_scraped_at=None,
            next_scrape_at=None,
            scraping_status=ScrapingStatus.IDLE,
        )
