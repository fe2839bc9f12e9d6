"""Aggregation orchestrator.

Drives one pass per region through the adapters, the normalizer, the
duplicate detector and the store, and records the outcome in the region
cache. Also hosts the invocation modes built on top of a region pass:

- single location (`run_location`)
- targeted cities batch (`run_targeted_cities`)
- master single/batch (`run_master`)
- AI generation (`generate_ai_events`)
- expiry cleanup (`cleanup_expired`)

Usage:
    from lovesync_events.core.orchestrator import AggregationOrchestrator

    orchestrator = AggregationOrchestrator()
    result = await orchestrator.run_master(mode="batch")
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import ValidationError

from lovesync_events.adapters import create_adapter, resolve_source
from lovesync_events.adapters.base import AdapterReport, BaseAdapter, FetchRequest
from lovesync_events.config import Settings, get_settings
from lovesync_events.config.regions import (
    DEFAULT_SOURCES,
    DEFAULT_TARGET_CITIES,
    TARGET_REGIONS,
    CountryRegion,
    find_city,
    sources_for_country,
)
from lovesync_events.core.analytics import AnalyticsEntry, AnalyticsSink
from lovesync_events.core.dedup import DuplicateCheckFailurePolicy, DuplicateDetector
from lovesync_events.core.event_model import Event
from lovesync_events.core.exceptions import (
    ConfigurationError,
    InvalidConfigError,
    MissingFieldError,
    TimeoutError,
)
from lovesync_events.core.job_store import JobStore, JobType
from lovesync_events.core.normalizer import Lifetimes, RegionLocation, normalize
from lovesync_events.core.region_scheduler import RegionKey, RegionScheduler
from lovesync_events.core.supabase_client import SupabaseClient, get_supabase_client
from lovesync_events.logging import get_logger, log_region_run, log_source_call
from lovesync_events.utils.geo import bounding_box, haversine_km, location_hash

logger = get_logger(__name__)


class RunState(str, Enum):
    """Steps of a region pass."""

    CHECKING_CACHE = "checking-cache"
    SKIPPED = "skipped"
    SCRAPING = "scraping"
    NORMALIZING = "normalizing"
    DEDUPLICATING = "deduplicating"
    PERSISTING = "persisting"
    UPDATING_CACHE = "updating-cache"
    DONE = "done"
    FAILED = "failed"


# ============================================================
# CONFIGURATION
# ============================================================


@dataclass
class OrchestratorConfig:
    """Everything a run needs that is not persisted.

    Built from settings by default; tests and the CLI pass their own.
    """

    adapter_delay: float = 2.0
    provider_delays: dict[str, float] = field(default_factory=lambda: {"googleplaces": 3.0})
    adapter_timeout: float = 60.0
    region_delay: float = 5.0
    country_delay: float = 10.0
    cities_per_country: int = 3
    regions: dict[str, CountryRegion] = field(default_factory=lambda: dict(TARGET_REGIONS))
    target_cities: list[str] = field(default_factory=lambda: list(DEFAULT_TARGET_CITIES))

    # Targeted-cities skip rule
    recent_hours: float = 6.0
    recent_min_events: int = 5
    preview_size: int = 10

    # Single-location answer
    default_radius_km: float = 25.0
    max_radius_km: float = 200.0
    max_results: int = 100

    # AI generation
    ai_min_events: int = 5
    ai_hours_threshold: float = 24.0
    ai_events_per_batch: int = 15
    ai_cost_per_call: float = 0.01

    dedup_tolerance_deg: float = 0.01
    dedup_failure_policy: DuplicateCheckFailurePolicy = DuplicateCheckFailurePolicy.INSERT
    lifetimes: Lifetimes | None = None
    dry_run: bool = False

    def delay_for(self, source_id: str) -> float:
        return self.provider_delays.get(source_id, self.adapter_delay)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OrchestratorConfig":
        settings = settings or get_settings()
        return cls(
            adapter_delay=settings.adapter_delay_seconds,
            provider_delays={"googleplaces": settings.places_delay_seconds},
            adapter_timeout=settings.adapter_timeout_seconds,
            region_delay=settings.region_delay_seconds,
            country_delay=settings.country_delay_seconds,
            cities_per_country=settings.cities_per_country,
            ai_events_per_batch=settings.ai_events_per_batch,
            ai_cost_per_call=settings.ai_cost_per_call,
            dedup_tolerance_deg=settings.dedup_tolerance_deg,
            dedup_failure_policy=DuplicateCheckFailurePolicy(settings.dedup_failure_policy),
            dry_run=settings.dry_run,
        )


# ============================================================
# RESULTS
# ============================================================


@dataclass
class SourceOutcome:
    """What one adapter contributed to a pass."""

    source: str
    success: bool
    candidates: int = 0
    inserted: int = 0
    error: str | None = None


@dataclass
class RegionResult:
    """Result of one region pass, with its state history."""

    key: RegionKey
    state: RunState = RunState.CHECKING_CACHE
    history: list[RunState] = field(default_factory=lambda: [RunState.CHECKING_CACHE])
    success: bool = True
    skipped: bool = False
    locked: bool = False
    events_found: int = 0
    events_inserted: int = 0
    duplicates: int = 0
    invalid: int = 0
    failed_writes: int = 0
    sources: list[SourceOutcome] = field(default_factory=list)
    inserted_events: list[Event] = field(default_factory=list)
    error: str | None = None

    def transition(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)


@dataclass
class LocationResult:
    """Answer to a single-location or AI generation request."""

    success: bool
    source: str  # "cache" or "fresh"
    events: list[dict[str, Any]] = field(default_factory=list)
    new_events_fetched: int = 0
    radius_km: float | None = None
    generation_batch_id: str | None = None
    error: str | None = None


@dataclass
class BatchResult:
    """Summary of a multi-region run."""

    total_events: int = 0
    cities_processed: int = 0
    cities_failed: int = 0
    events_preview: list[dict[str, Any]] = field(default_factory=list)
    results: list[RegionResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.cities_failed == 0 or self.cities_processed > 0


@dataclass
class LocationRequest:
    """Single-location request."""

    latitude: float
    longitude: float
    radius_km: float = 25.0
    city: str | None = None
    country: str | None = None
    sources: list[str] | None = None
    force: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# ORCHESTRATOR
# ============================================================


class AggregationOrchestrator:
    """Runs region passes and the invocation modes built on them.

    Holds no state across invocations; everything durable lives in the store
    (events, region cache, job leases).
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        store: SupabaseClient | None = None,
        *,
        detector: DuplicateDetector | None = None,
        scheduler: RegionScheduler | None = None,
        jobs: JobStore | None = None,
        analytics: AnalyticsSink | None = None,
        adapter_factory: Callable[[str], BaseAdapter | None] = create_adapter,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or OrchestratorConfig.from_settings()
        self.store = store or get_supabase_client()
        self.detector = detector or DuplicateDetector(
            self.store,
            tolerance_deg=self.config.dedup_tolerance_deg,
            failure_policy=self.config.dedup_failure_policy,
        )
        self.scheduler = scheduler or RegionScheduler(self.store, clock=clock)
        self.jobs = jobs or JobStore(self.store, clock=clock)
        self.analytics = analytics or AnalyticsSink(self.store)
        self.adapter_factory = adapter_factory
        self.sleep = sleep
        self.clock = clock

    # ==========================================
    # Configuration
    # ==========================================

    def prepare_adapters(self, sources: list[str]) -> list[BaseAdapter]:
        """Resolve and instantiate the adapters for a run.

        Unconfigured paid providers are dropped with a warning.

        Raises:
            AdapterNotFoundError: unknown source name
            ConfigurationError: none of the requested providers is usable
        """
        source_ids = list(dict.fromkeys(resolve_source(name) for name in sources))
        adapters: list[BaseAdapter] = []
        missing: list[str] = []
        for source_id in source_ids:
            adapter = self.adapter_factory(source_id)
            if adapter is None:
                continue
            if adapter.is_configured():
                adapters.append(adapter)
            else:
                missing.append(adapter.api_key_env or source_id)
                logger.warning("adapter_unconfigured", source=source_id, env_var=adapter.api_key_env)

        if not adapters:
            raise ConfigurationError(
                f"No configured provider among {', '.join(source_ids)}",
                details={"missing": missing},
            )
        return adapters

    def configuration_status(self) -> dict[str, bool]:
        """Which registered providers are usable right now."""
        from lovesync_events.adapters import list_adapters

        status = {}
        for source_id in list_adapters():
            adapter = self.adapter_factory(source_id)
            status[source_id] = bool(adapter and adapter.is_configured())
        return status

    # ==========================================
    # Region pass
    # ==========================================

    async def run_region(
        self,
        key: RegionKey,
        sources: list[str] | None = None,
        location: RegionLocation | None = None,
        *,
        force: bool = False,
        radius_km: float | None = None,
    ) -> RegionResult:
        """One pass for a region: cache check, scrape, ingest, cache update.

        Raises:
            ConfigurationError: no requested provider is configured
        """
        adapters = self.prepare_adapters(sources or sources_for_country(key.country))
        location = location or _location_for(key)
        result = RegionResult(key=key)

        with log_region_run(key.cache_key, key.country, key.city):
            try:
                if not force and not await self.scheduler.should_scrape(key):
                    result.skipped = True
                    result.transition(RunState.SKIPPED)
                    logger.info("region_skipped", region=key.cache_key)
                    return result

                await self.scheduler.mark_running(key)
                result.transition(RunState.SCRAPING)
                request = FetchRequest(
                    country=key.country,
                    city=key.city,
                    region=key.region,
                    latitude=location.latitude,
                    longitude=location.longitude,
                    radius_km=radius_km or self.config.default_radius_km,
                )
                reports = await self._scrape(adapters, request)

                await self._ingest(reports, location, result)

                result.success = any(report.success for report in reports)
                if not result.success:
                    result.error = "All providers failed"

                result.transition(RunState.UPDATING_CACHE)
                if result.success:
                    await self.scheduler.record_outcome(key, result.events_found)
                else:
                    await self.scheduler.mark_failed(key, result.events_found)

                result.transition(RunState.DONE if result.success else RunState.FAILED)

            except Exception as e:
                result.success = False
                result.error = str(e)
                result.transition(RunState.FAILED)
                logger.error("region_failed", region=key.cache_key, error=str(e), error_type=type(e).__name__)
                await self._mark_failed_quietly(key)
                return result

            logger.info(
                "region_done",
                region=key.cache_key,
                success=result.success,
                events_found=result.events_found,
                events_inserted=result.events_inserted,
                duplicates=result.duplicates,
                invalid=result.invalid,
                failed_writes=result.failed_writes,
            )
            return result

    async def _scrape(self, adapters: list[BaseAdapter], request: FetchRequest) -> list[AdapterReport]:
        """Call adapters one after another, pausing between providers."""
        reports: list[AdapterReport] = []
        for i, adapter in enumerate(adapters):
            with log_source_call(adapter.source_id):
                try:
                    report = await asyncio.wait_for(adapter.run(request), timeout=self.config.adapter_timeout)
                except asyncio.TimeoutError:
                    error = TimeoutError(self.config.adapter_timeout, source=adapter.source_id)
                    logger.warning("adapter_timeout", timeout=self.config.adapter_timeout)
                    report = AdapterReport(
                        source=adapter.source_id,
                        success=False,
                        error=str(error),
                        response_time_ms=int(self.config.adapter_timeout * 1000),
                    )
            reports.append(report)

            if i < len(adapters) - 1:
                await self.sleep(self.config.delay_for(adapter.source_id))
        return reports

    async def _ingest(
        self,
        reports: list[AdapterReport],
        location: RegionLocation,
        result: RegionResult,
    ) -> None:
        """Normalize, deduplicate and persist, candidate by candidate."""
        result.transition(RunState.NORMALIZING)
        now = self.clock()
        lifetimes = self.config.lifetimes or Lifetimes.from_settings()

        batches: list[tuple[AdapterReport, list[Event]]] = []
        for report in reports:
            events = []
            total = len(report.candidates)
            for index, candidate in enumerate(report.candidates):
                try:
                    events.append(
                        normalize(candidate, location, index=index, total=total, now=now, lifetimes=lifetimes)
                    )
                except (MissingFieldError, ValidationError) as e:
                    result.invalid += 1
                    logger.debug("candidate_rejected", source=report.source, title=candidate.title, error=str(e))
            result.events_found += len(events)
            batches.append((report, events))

        result.transition(RunState.DEDUPLICATING)
        for report, events in batches:
            inserted = 0
            for event in events:
                insert, existing_id = await self.detector.should_insert(event)
                if not insert:
                    result.duplicates += 1
                    continue
                if result.state is not RunState.PERSISTING:
                    result.transition(RunState.PERSISTING)
                if await self._persist(event, result):
                    inserted += 1

            result.sources.append(
                SourceOutcome(
                    source=report.source,
                    success=report.success,
                    candidates=len(report.candidates),
                    inserted=inserted,
                    error=report.error,
                )
            )
            await self.analytics.record(
                AnalyticsEntry(
                    source_platform=report.source,
                    country=result.key.country,
                    city=result.key.city,
                    events_scraped=len(report.candidates),
                    events_inserted=inserted,
                    api_calls_made=report.api_calls,
                    success=report.success,
                    response_time_ms=report.response_time_ms,
                    error_message=report.error,
                )
            )

        if result.state is not RunState.PERSISTING:
            result.transition(RunState.PERSISTING)

    async def _persist(self, event: Event, result: RegionResult) -> bool:
        """Write one event; a failed write skips the candidate."""
        if self.config.dry_run:
            logger.info("dry_run_skip_write", title=event.title, source=event.source.value)
            return False
        try:
            written = await self.store.upsert_event(event)
        except Exception as e:
            result.failed_writes += 1
            logger.warning("persist_failed", title=event.title, source=event.source.value, error=str(e))
            return False
        if not written:
            result.duplicates += 1
            return False
        result.events_inserted += 1
        result.inserted_events.append(event)
        return True

    async def _mark_failed_quietly(self, key: RegionKey) -> None:
        try:
            await self.scheduler.mark_failed(key)
        except Exception as e:
            logger.error("region_cache_update_failed", region=key.cache_key, error=str(e))

    async def _run_claimed_region(
        self,
        key: RegionKey,
        sources: list[str],
        location: RegionLocation | None = None,
        *,
        force: bool = False,
    ) -> RegionResult:
        """Region pass under the job lease for its cache key."""
        job = await self.jobs.claim(key.cache_key, JobType.FETCH)
        if job is None:
            result = RegionResult(key=key, skipped=True, locked=True)
            result.transition(RunState.SKIPPED)
            return result

        try:
            result = await self.run_region(key, sources, location, force=force)
        except Exception as e:
            await self.jobs.fail(job, str(e))
            raise
        if result.success:
            await self.jobs.complete(job, result.events_found, result.events_inserted)
        else:
            await self.jobs.fail(job, result.error or "region failed")
        return result

    # ==========================================
    # Single location
    # ==========================================

    async def run_location(self, request: LocationRequest) -> LocationResult:
        """Fetch for one point and answer with the events around it.

        When another run holds the lease for this location, answers from the
        store without scraping.

        Raises:
            InvalidConfigError: coordinates or radius out of range
            ConfigurationError: no requested provider is configured
        """
        _validate_point(request.latitude, request.longitude)
        if request.radius_km <= 0:
            raise InvalidConfigError("radiusKm must be positive", field="radiusKm")

        known = find_city(request.city)
        country = (request.country or (known.country if known else "")).upper()
        sources = request.sources or (sources_for_country(country) if country else list(DEFAULT_SOURCES))
        location_key = location_hash(request.latitude, request.longitude, request.radius_km)
        self.prepare_adapters(sources)

        job = await self.jobs.claim(location_key, JobType.FETCH)
        if job is None:
            events, radius = await self._events_near(request.latitude, request.longitude, request.radius_km)
            return LocationResult(success=True, source="cache", events=events, radius_km=radius)

        key = RegionKey(country=country or "geo", city=request.city or location_key)
        location = RegionLocation(
            country=country,
            city=request.city,
            latitude=request.latitude,
            longitude=request.longitude,
        )
        try:
            region = await self.run_region(
                key, sources, location, force=request.force, radius_km=request.radius_km
            )
        except Exception as e:
            await self.jobs.fail(job, str(e))
            raise

        if region.success:
            await self.jobs.complete(job, region.events_found, region.events_inserted)
        else:
            await self.jobs.fail(job, region.error or "region failed")

        events, radius = await self._events_near(request.latitude, request.longitude, request.radius_km)
        return LocationResult(
            success=region.success,
            source="cache" if region.skipped else "fresh",
            events=events,
            new_events_fetched=region.events_inserted,
            radius_km=radius,
            error=region.error,
        )

    async def _events_near(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> tuple[list[dict[str, Any]], float]:
        """Live events within the radius, doubling it up to the cap when empty.

        Each step queries the store for the enclosing box; the haversine
        distance then trims the box corners.
        """
        radius = radius_km
        while True:
            rows = await self.store.get_events_in_bbox(*bounding_box(latitude, longitude, radius))
            matches = [
                row
                for row in rows
                if row.get("latitude") is not None
                and row.get("longitude") is not None
                and haversine_km(latitude, longitude, float(row["latitude"]), float(row["longitude"])) <= radius
            ]
            if matches or radius >= self.config.max_radius_km:
                break
            radius = min(radius * 2, self.config.max_radius_km)
            logger.info("expanding_search_radius", radius_km=radius)
        return matches[: self.config.max_results], radius

    # ==========================================
    # Targeted cities
    # ==========================================

    async def run_targeted_cities(
        self,
        cities: list[str] | None = None,
        force_refresh: bool = False,
    ) -> BatchResult:
        """Batch over target cities, skipping the ones with fresh events.

        A skipped city counts as processed.
        """
        batch = BatchResult()
        names = cities or self.config.target_cities
        logger.info("targeted_batch_start", cities=len(names), force_refresh=force_refresh)

        for i, name in enumerate(names):
            if i:
                await self.sleep(self.config.region_delay)

            target = find_city(name)
            if target is None:
                batch.cities_failed += 1
                logger.warning("unknown_city", city=name)
                continue

            if not force_refresh:
                try:
                    recent = await self.scheduler.recent_event_count(
                        target.name, self.config.recent_hours
                    )
                except Exception as e:
                    logger.warning("recent_count_failed", city=target.name, error=str(e))
                    recent = 0
                if recent >= self.config.recent_min_events:
                    batch.cities_processed += 1
                    logger.info("city_skipped", city=target.name, recent_events=recent)
                    continue

            key = RegionKey(country=target.country, city=target.name)
            try:
                region = await self._run_claimed_region(
                    key, sources_for_country(target.country), _location_for(key), force=True
                )
            except Exception as e:
                batch.cities_failed += 1
                logger.error("city_failed", city=target.name, error=str(e))
                continue
            self._accumulate(batch, region)

        logger.info(
            "targeted_batch_done",
            total_events=batch.total_events,
            cities_processed=batch.cities_processed,
            cities_failed=batch.cities_failed,
        )
        return batch

    def _accumulate(self, batch: BatchResult, region: RegionResult) -> None:
        batch.results.append(region)
        if region.success:
            batch.cities_processed += 1
        else:
            batch.cities_failed += 1
        batch.total_events += region.events_inserted
        room = self.config.preview_size - len(batch.events_preview)
        if room > 0:
            batch.events_preview.extend(e.to_supabase_dict() for e in region.inserted_events[:room])

    # ==========================================
    # Master
    # ==========================================

    async def run_master(
        self,
        country: str | None = None,
        region: str | None = None,
        city: str | None = None,
        mode: str = "single",
    ) -> BatchResult:
        """Single region pass, or the batch walk over the target regions.

        Raises:
            InvalidConfigError: unknown mode, or single mode without a country
        """
        if mode == "single":
            if not country:
                raise InvalidConfigError("country is required for single mode", field="country")
            key = RegionKey(country=country.upper(), region=region, city=city)
            batch = BatchResult()
            result = await self._run_claimed_region(key, sources_for_country(key.country), _location_for(key))
            self._accumulate(batch, result)
            return batch

        if mode != "batch":
            raise InvalidConfigError(f"Unknown mode: {mode}", field="mode")

        batch = BatchResult()
        for c, (code, target) in enumerate(self.config.regions.items()):
            if c:
                await self.sleep(self.config.country_delay)
            for j, city_name in enumerate(target.cities[: self.config.cities_per_country]):
                if j:
                    await self.sleep(self.config.region_delay)
                key = RegionKey(country=code, city=city_name)
                try:
                    result = await self._run_claimed_region(key, sources_for_country(code), _location_for(key))
                except Exception as e:
                    batch.cities_failed += 1
                    logger.error("region_failed", region=key.cache_key, error=str(e))
                    continue
                self._accumulate(batch, result)

        logger.info(
            "master_batch_done",
            total_events=batch.total_events,
            regions_processed=batch.cities_processed,
            regions_failed=batch.cities_failed,
        )
        return batch

    # ==========================================
    # AI generation
    # ==========================================

    async def generate_ai_events(
        self,
        city: str,
        latitude: float | None = None,
        longitude: float | None = None,
        country: str | None = None,
        count: int | None = None,
        force_refresh: bool = False,
    ) -> LocationResult:
        """Generate synthetic events for a city that lacks fresh ones.

        Raises:
            InvalidConfigError: no city given
            ConfigurationError: the LLM key is not configured
        """
        if not city:
            raise InvalidConfigError("city is required", field="city")
        if latitude is not None and longitude is not None:
            _validate_point(latitude, longitude)

        adapter = self.prepare_adapters(["ai_generated"])[0]
        known = find_city(city)
        country = (country or (known.country if known else "")).upper()

        if not force_refresh:
            needs_refresh = await self.scheduler.city_needs_event_refresh(
                city, self.config.ai_min_events, self.config.ai_hours_threshold
            )
            if not needs_refresh:
                return LocationResult(success=True, source="cache", events=await self._city_events(city))

        batch_id = str(uuid.uuid4())
        job = await self.jobs.claim(f"ai_{city.strip().lower()}", JobType.GENERATE, batch_id)
        if job is None:
            return LocationResult(success=True, source="cache", events=await self._city_events(city))

        key = RegionKey(country=country or "ai", city=city)
        location = RegionLocation(
            country=country,
            city=city,
            latitude=latitude if latitude is not None else (known.latitude if known else None),
            longitude=longitude if longitude is not None else (known.longitude if known else None),
        )
        result = RegionResult(key=key)
        request = FetchRequest(
            country=country,
            city=city,
            latitude=location.latitude,
            longitude=location.longitude,
            count=count or self.config.ai_events_per_batch,
            generation_batch_id=batch_id,
        )

        with log_region_run(key.cache_key, key.country, city):
            try:
                result.transition(RunState.SCRAPING)
                reports = await self._scrape([adapter], request)
                await self._ingest(reports, location, result)
            except Exception as e:
                await self.jobs.fail(job, str(e))
                raise

            report = reports[0]
            if not report.success:
                await self.jobs.fail(job, report.error or "generation failed")
                return LocationResult(
                    success=False,
                    source="fresh",
                    generation_batch_id=batch_id,
                    error=report.error,
                )

            await self.jobs.complete(
                job,
                result.events_found,
                result.events_inserted,
                cost_estimate=self.config.ai_cost_per_call,
            )
            result.transition(RunState.DONE)
            logger.info(
                "ai_generation_done",
                city=city,
                batch_id=batch_id,
                events_inserted=result.events_inserted,
                duplicates=result.duplicates,
            )
            return LocationResult(
                success=True,
                source="fresh",
                events=[e.to_supabase_dict() for e in result.inserted_events],
                new_events_fetched=result.events_inserted,
                generation_batch_id=batch_id,
            )

    async def _city_events(self, city: str) -> list[dict[str, Any]]:
        return await self.store.get_live_events(city=city, limit=self.config.ai_events_per_batch)

    # ==========================================
    # Maintenance
    # ==========================================

    async def cleanup_expired(self) -> int:
        """Delete events whose `expires_at` has passed."""
        deleted = await self.store.delete_expired_events()
        logger.info("cleanup_done", deleted=deleted)
        return deleted


def _validate_point(latitude: float, longitude: float) -> None:
    if not -90 <= latitude <= 90:
        raise InvalidConfigError(f"latitude out of range: {latitude}", field="latitude")
    if not -180 <= longitude <= 180:
        raise InvalidConfigError(f"longitude out of range: {longitude}", field="longitude")


def _location_for(key: RegionKey) -> RegionLocation:
    """Fallbacks and city center for a region key."""
    known = find_city(key.city)
    return RegionLocation(
        country=key.country,
        city=key.city,
        region=key.region,
        latitude=known.latitude if known else None,
        longitude=known.longitude if known else None,
    )
