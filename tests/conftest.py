"""Pytest configuration and shared fixtures."""

import sys
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest
from dateutil import parser as dateutil_parser

from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.config import Settings
from lovesync_events.core.event_model import Event, PlacesCandidate, TicketingCandidate
from lovesync_events.core.supabase_client import SupabaseClient

# Fix encoding for Windows
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")


def _parse(value: Any) -> datetime:
    parsed = value if isinstance(value, datetime) else dateutil_parser.isoparse(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class FakeStore(SupabaseClient):
    """In-memory stand-in for the Supabase tables used by the pipeline.

    Mirrors the real constraints: `(source, external_id)` is unique on events,
    and only one `running` job may exist per location key.
    """

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self.region_cache: dict[str, dict[str, Any]] = {}
        self.jobs: dict[str, dict[str, Any]] = {}
        self.analytics: list[dict[str, Any]] = []
        self.fail_upserts_for: set[str] = set()
        self.bbox_queries: list[tuple[float, float, float, float]] = []

    # events

    async def upsert_event(self, event: Event) -> bool:
        if event.title in self.fail_upserts_for:
            raise RuntimeError("write failed")
        for row in self.events:
            if row["source"] == event.source.value and row["external_id"] == event.external_id:
                return False
        row = event.to_supabase_dict()
        row["id"] = str(uuid.uuid4())
        self.events.append(row)
        return True

    async def find_events_on_date(self, day: date) -> list[dict[str, Any]]:
        now = datetime.now(timezone.utc)
        return [
            row
            for row in self.events
            if _parse(row["start_date"]).astimezone(timezone.utc).date() == day
            and _parse(row["expires_at"]) > now
        ]

    async def get_live_events(self, city: str | None = None, limit: int = 1000) -> list[dict[str, Any]]:
        now = datetime.now(timezone.utc)
        rows = [row for row in self.events if _parse(row["expires_at"]) > now]
        if city:
            rows = [row for row in rows if (row.get("city_name") or "").lower() == city.lower()]
        return sorted(rows, key=lambda row: _parse(row["start_date"]))[:limit]

    async def get_events_in_bbox(
        self,
        lat_min: float,
        lat_max: float,
        lng_min: float,
        lng_max: float,
        limit: int = 1000,
    ) -> list[dict[str, Any]]:
        self.bbox_queries.append((lat_min, lat_max, lng_min, lng_max))
        rows = [
            row
            for row in await self.get_live_events(limit=len(self.events))
            if row.get("latitude") is not None
            and row.get("longitude") is not None
            and lat_min <= row["latitude"] <= lat_max
            and lng_min <= row["longitude"] <= lng_max
        ]
        return rows[:limit]

    async def count_recent_events(self, city: str, since: datetime) -> int:
        rows = await self.get_live_events(city)
        return sum(1 for row in rows if _parse(row["created_at"]) >= since)

    async def delete_expired_events(self) -> int:
        now = datetime.now(timezone.utc)
        before = len(self.events)
        self.events = [row for row in self.events if _parse(row["expires_at"]) >= now]
        return before - len(self.events)

    async def count_events(self) -> int:
        return len(self.events)

    # region cache

    async def get_region_entry(self, cache_key: str) -> dict[str, Any] | None:
        row = self.region_cache.get(cache_key)
        return dict(row) if row else None

    async def upsert_region_entry(self, row: dict[str, Any]) -> None:
        self.region_cache[row["cache_key"]] = dict(row)

    # jobs

    async def insert_job(self, row: dict[str, Any]) -> bool:
        for job in self.jobs.values():
            if job["location_key"] == row["location_key"] and job["status"] == "running":
                return False
        self.jobs[row["id"]] = dict(row)
        return True

    async def expire_stale_jobs(self, location_key: str, now: datetime) -> int:
        released = 0
        for job in self.jobs.values():
            if (
                job["location_key"] == location_key
                and job["status"] == "running"
                and _parse(job["lease_expires_at"]) < now
            ):
                job.update(status="failed", error_message="lease expired", completed_at=now.isoformat())
                released += 1
        return released

    async def update_job(self, job_id: str, updates: dict[str, Any]) -> None:
        self.jobs[job_id].update(updates)

    # analytics

    async def log_analytics(self, params: dict[str, Any]) -> None:
        self.analytics.append(params)

    def add_event(self, event: Event) -> dict[str, Any]:
        row = event.to_supabase_dict()
        row["id"] = str(uuid.uuid4())
        self.events.append(row)
        return row


class StubAdapter(BaseAdapter):
    """Adapter returning canned candidates, or raising a canned error."""

    def __init__(
        self,
        source_id: str,
        candidates: list | None = None,
        error: Exception | None = None,
        api_key_env: str | None = None,
    ) -> None:
        self.source_id = source_id
        self.source_name = source_id
        self.api_key_env = api_key_env
        super().__init__(settings=Settings())
        self.candidates = candidates or []
        self.error = error
        self.requests: list[FetchRequest] = []

    async def fetch_events(self, request: FetchRequest) -> list:
        self.requests.append(request)
        self.api_calls += 1
        if self.error:
            raise self.error
        return list(self.candidates)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def tomorrow_evening(now) -> datetime:
    return (now + timedelta(days=1)).replace(hour=19, minute=0, second=0, microsecond=0)


# Mumbai scenario: 8 ticketing + 5 places candidates, 2 of them the same events


def _ticketing_batch(start: datetime, promoter: str | None = None) -> list[TicketingCandidate]:
    return [
        TicketingCandidate(
            external_id=f"tm-{i}",
            title=f"Mumbai Live Show {i}",
            start=start + timedelta(minutes=10 * i),
            city="Mumbai",
            country="IN",
            venue_name=f"Venue {i}",
            promoter=promoter,
            latitude=19.07 + 0.005 * i,
            longitude=72.88,
        )
        for i in range(8)
    ]


def _places_batch(start: datetime) -> list[PlacesCandidate]:
    # The first two are tm-0 and tm-1, seen through their venues
    candidates = [
        PlacesCandidate(
            external_id=f"google_dup{i}_0",
            title=f"Mumbai Live Show {i}",
            start=start + timedelta(minutes=10 * i),
            city="Mumbai",
            country="IN",
            latitude=19.07 + 0.005 * i,
            longitude=72.88,
            place_id=f"dup{i}",
            venue_name=f"Club {i}",
            venue_type="night_club",
        )
        for i in range(2)
    ]
    candidates += [
        PlacesCandidate(
            external_id=f"google_p{i}_0",
            title=f"DJ Night at Club {i}",
            start=start + timedelta(hours=3),
            city="Mumbai",
            country="IN",
            latitude=19.10,
            longitude=72.85 + 0.01 * i,
            place_id=f"p{i}",
            venue_name=f"Club {i}",
            venue_type="night_club",
        )
        for i in range(2, 5)
    ]
    return candidates


@pytest.fixture
def stub_adapter() -> type[StubAdapter]:
    return StubAdapter


@pytest.fixture
def ticketing_batch():
    return _ticketing_batch


@pytest.fixture
def places_batch():
    return _places_batch
