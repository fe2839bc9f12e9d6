"""Supabase client for event, region cache, job and analytics storage."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from lovesync_events.config import get_settings
from lovesync_events.core.event_model import Event
from lovesync_events.core.exceptions import InvalidConfigError, SupabaseError
from lovesync_events.logging import get_logger

logger = get_logger(__name__)

EVENTS_TABLE = "events"
REGION_CACHE_TABLE = "events_regional_cache"
JOBS_TABLE = "fetch_jobs"

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

DEDUP_COLUMNS = (
    "id, source, external_id, title, start_date, location_name, city_name, "
    "latitude, longitude, coordinates_inferred, organizer, organizer_inferred, created_at"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SupabaseClient:
    """Storage operations against the Supabase project.

    Every method is async so callers can treat storage as a suspension point;
    the underlying supabase-py client is synchronous.
    """

    def __init__(self, client: Client | None = None) -> None:
        if client is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise InvalidConfigError(
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required",
                    field="supabase_url",
                )
            client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        self._client: Client = client
        self.logger = get_logger("supabase_client")

    @property
    def client(self) -> Client:
        """Get the Supabase client instance."""
        return self._client

    # ==========================================
    # Events
    # ==========================================

    async def upsert_event(self, event: Event) -> bool:
        """Insert an event, ignoring it if `(source, external_id)` exists.

        Returns:
            True if a new row was written, False if it already existed
        """
        try:
            response = (
                self._client.table(EVENTS_TABLE)
                .upsert(
                    event.to_supabase_dict(),
                    on_conflict="source,external_id",
                    ignore_duplicates=True,
                )
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="upsert", table=EVENTS_TABLE, source=event.source.value) from e
        return bool(response.data)

    async def find_events_on_date(self, day: date) -> list[dict[str, Any]]:
        """Live events whose start falls on the given UTC calendar day."""
        day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        day_end = day_start + timedelta(days=1)
        try:
            response = (
                self._client.table(EVENTS_TABLE)
                .select(DEDUP_COLUMNS)
                .gte("start_date", day_start.isoformat())
                .lt("start_date", day_end.isoformat())
                .gt("expires_at", _utcnow().isoformat())
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="select", table=EVENTS_TABLE) from e
        return response.data or []

    async def get_live_events(
        self,
        city: str | None = None,
        limit: int = 1000,
    ) -> list[dict[str, Any]]:
        """Unexpired events, optionally restricted to a city, soonest first."""
        query = (
            self._client.table(EVENTS_TABLE)
            .select("*")
            .gt("expires_at", _utcnow().isoformat())
        )
        if city:
            query = query.ilike("city_name", city)
        try:
            response = query.order("start_date").limit(limit).execute()
        except APIError as e:
            raise SupabaseError(str(e), operation="select", table=EVENTS_TABLE) from e
        return response.data or []

    async def get_events_in_bbox(
        self,
        lat_min: float,
        lat_max: float,
        lng_min: float,
        lng_max: float,
        limit: int = 1000,
    ) -> list[dict[str, Any]]:
        """Unexpired events with coordinates inside the box, soonest first."""
        try:
            response = (
                self._client.table(EVENTS_TABLE)
                .select("*")
                .gte("latitude", lat_min)
                .lte("latitude", lat_max)
                .gte("longitude", lng_min)
                .lte("longitude", lng_max)
                .gt("expires_at", _utcnow().isoformat())
                .order("start_date")
                .limit(limit)
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="select", table=EVENTS_TABLE) from e
        return response.data or []

    async def count_recent_events(self, city: str, since: datetime) -> int:
        """Unexpired events for a city created at or after `since`."""
        try:
            response = (
                self._client.table(EVENTS_TABLE)
                .select("id", count="exact")
                .ilike("city_name", city)
                .gte("created_at", since.isoformat())
                .gt("expires_at", _utcnow().isoformat())
                .limit(1)
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="count", table=EVENTS_TABLE) from e
        return response.count or 0

    async def delete_expired_events(self) -> int:
        """Remove events past their `expires_at`."""
        try:
            response = (
                self._client.table(EVENTS_TABLE)
                .delete()
                .lt("expires_at", _utcnow().isoformat())
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="delete", table=EVENTS_TABLE) from e
        deleted = len(response.data or [])
        self.logger.info("expired_events_deleted", count=deleted)
        return deleted

    # ==========================================
    # Region cache
    # ==========================================

    async def get_region_entry(self, cache_key: str) -> dict[str, Any] | None:
        try:
            response = (
                self._client.table(REGION_CACHE_TABLE)
                .select("*")
                .eq("cache_key", cache_key)
                .limit(1)
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="select", table=REGION_CACHE_TABLE) from e
        return response.data[0] if response.data else None

    async def upsert_region_entry(self, row: dict[str, Any]) -> None:
        try:
            self._client.table(REGION_CACHE_TABLE).upsert(row, on_conflict="cache_key").execute()
        except APIError as e:
            raise SupabaseError(str(e), operation="upsert", table=REGION_CACHE_TABLE) from e

    # ==========================================
    # Fetch / generation jobs
    # ==========================================

    async def insert_job(self, row: dict[str, Any]) -> bool:
        """Conditionally insert a running job.

        The table carries a unique partial index on `location_key` where
        `status = 'running'`, so a second running row for the same key fails.

        Returns:
            True if inserted, False if another running job holds the key
        """
        try:
            self._client.table(JOBS_TABLE).insert(row).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                return False
            raise SupabaseError(str(e), operation="insert", table=JOBS_TABLE) from e
        return True

    async def expire_stale_jobs(self, location_key: str, now: datetime) -> int:
        """Mark running jobs whose lease ran out as failed."""
        try:
            response = (
                self._client.table(JOBS_TABLE)
                .update({
                    "status": "failed",
                    "error_message": "lease expired",
                    "completed_at": now.isoformat(),
                })
                .eq("location_key", location_key)
                .eq("status", "running")
                .lt("lease_expires_at", now.isoformat())
                .execute()
            )
        except APIError as e:
            raise SupabaseError(str(e), operation="update", table=JOBS_TABLE) from e
        return len(response.data or [])

    async def update_job(self, job_id: str, updates: dict[str, Any]) -> None:
        try:
            self._client.table(JOBS_TABLE).update(updates).eq("id", job_id).execute()
        except APIError as e:
            raise SupabaseError(str(e), operation="update", table=JOBS_TABLE) from e

    # ==========================================
    # Analytics
    # ==========================================

    async def log_analytics(self, params: dict[str, Any]) -> None:
        """Call the `log_scraping_analytics` procedure."""
        try:
            self._client.rpc("log_scraping_analytics", params).execute()
        except APIError as e:
            raise SupabaseError(str(e), operation="rpc", table="log_scraping_analytics") from e

    # ==========================================
    # Health
    # ==========================================

    async def count_events(self) -> int:
        response = self._client.table(EVENTS_TABLE).select("id", count="exact").limit(1).execute()
        return response.count or 0


# Singleton instance
_store: SupabaseClient | None = None


def get_supabase_client() -> SupabaseClient:
    """Get singleton Supabase client instance."""
    global _store
    if _store is None:
        _store = SupabaseClient()
    return _store
