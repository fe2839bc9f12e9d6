"""Tests for the aggregation orchestrator.

Adapters are replaced by stub adapters and storage by the in-memory
`FakeStore`, so every run exercises the real normalizer, duplicate detector,
region scheduler, job lease and analytics sink.
"""

import asyncio
import json
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from lovesync_events.adapters.ai_generator import AiGeneratorAdapter
from lovesync_events.config import Settings
from lovesync_events.config.regions import TARGET_REGIONS
from lovesync_events.core.event_model import (
    CountryScrapeCandidate,
    Event,
    SourceKind,
    WebScrapeCandidate,
)
from lovesync_events.core.exceptions import (
    AdapterNotFoundError,
    ConfigurationError,
    FetchError,
    InvalidConfigError,
)
from lovesync_events.core.job_store import JobStore
from lovesync_events.core.orchestrator import (
    AggregationOrchestrator,
    LocationRequest,
    OrchestratorConfig,
    RunState,
)
from lovesync_events.core.region_scheduler import RegionKey
from lovesync_events.utils.geo import location_hash

MUMBAI_LAT, MUMBAI_LNG = 19.0760, 72.8777
MUMBAI_KEY = RegionKey(country="IN", city="Mumbai")


# =============================================================================
# Fixtures
# =============================================================================


def make_orchestrator(store, factory, **config):
    sleep = AsyncMock()
    orchestrator = AggregationOrchestrator(
        OrchestratorConfig(**config),
        store,
        adapter_factory=factory,
        sleep=sleep,
    )
    return orchestrator, sleep


@pytest.fixture
def generic_factory(tomorrow_evening, stub_adapter):
    """One scrape-style candidate per adapter call, titled after the source."""

    def factory(source_id: str):
        return stub_adapter(
            source_id,
            [WebScrapeCandidate(title=f"{source_id} pick of the week", start=tomorrow_evening)],
        )

    return factory


def recent_event(city: str, title: str, start: datetime, now: datetime) -> Event:
    return Event(
        external_id=f"seed-{title}",
        source=SourceKind.TICKETMASTER,
        title=title,
        start_date=start,
        city_name=city,
        location_name=city,
        latitude=MUMBAI_LAT,
        longitude=MUMBAI_LNG,
        price="Free",
        created_at=now,
        expires_at=now + timedelta(days=7),
    )


@pytest.fixture
def mumbai_adapters(tomorrow_evening, stub_adapter, ticketing_batch, places_batch):
    return {
        "ticketmaster": stub_adapter("ticketmaster", ticketing_batch(tomorrow_evening)),
        "googleplaces": stub_adapter("googleplaces", places_batch(tomorrow_evening)),
    }


# =============================================================================
# Tests: single location
# =============================================================================


class TestMumbaiScenario:
    """8 ticketing + 5 places candidates, 2 cross-source duplicates."""

    @pytest.mark.asyncio
    async def test_fresh_fetch_persists_eleven(self, store, mumbai_adapters):
        orchestrator, sleep = make_orchestrator(store, mumbai_adapters.get)

        result = await orchestrator.run_location(
            LocationRequest(
                latitude=MUMBAI_LAT,
                longitude=MUMBAI_LNG,
                city="Mumbai",
                sources=["ticketing", "places"],
            )
        )

        assert result.success
        assert result.source == "fresh"
        assert result.new_events_fetched == 11
        assert len(store.events) == 11
        assert len(result.events) == 11
        assert result.radius_km == 25.0

    @pytest.mark.asyncio
    async def test_named_promoter_still_deduplicates(
        self, store, tomorrow_evening, stub_adapter, ticketing_batch, places_batch
    ):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", ticketing_batch(tomorrow_evening, promoter="Live Nation")),
            "googleplaces": stub_adapter("googleplaces", places_batch(tomorrow_evening)),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        assert result.duplicates == 2
        assert len(store.events) == 11

    @pytest.mark.asyncio
    async def test_delay_between_adapters_only(self, store, mumbai_adapters):
        orchestrator, sleep = make_orchestrator(store, mumbai_adapters.get)

        await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_region_result_and_analytics(self, store, mumbai_adapters):
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        assert result.events_found == 13
        assert result.events_inserted == 11
        assert result.duplicates == 2
        assert result.history == [
            RunState.CHECKING_CACHE,
            RunState.SCRAPING,
            RunState.NORMALIZING,
            RunState.DEDUPLICATING,
            RunState.PERSISTING,
            RunState.UPDATING_CACHE,
            RunState.DONE,
        ]
        inserted = {row["p_source_platform"]: row["p_events_inserted"] for row in store.analytics}
        assert inserted == {"ticketmaster": 8, "googleplaces": 3}
        assert store.region_cache["in_all_mumbai"]["event_count"] == 13

    @pytest.mark.asyncio
    async def test_reingestion_is_idempotent(self, store, mumbai_adapters):
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"], force=True)
        again = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"], force=True)

        assert again.events_inserted == 0
        assert again.duplicates == 13
        assert len(store.events) == 11

    @pytest.mark.asyncio
    async def test_job_completed(self, store, mumbai_adapters):
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        await orchestrator.run_location(
            LocationRequest(latitude=MUMBAI_LAT, longitude=MUMBAI_LNG, city="Mumbai", sources=["ticketing"])
        )

        (job,) = store.jobs.values()
        assert job["status"] == "completed"
        assert job["events_inserted"] == 8


class TestCrossSourceDuplicates:
    """Listing sites report the same event under their own names."""

    @pytest.mark.asyncio
    async def test_same_event_from_two_listing_sites(self, store, tomorrow_evening, stub_adapter):
        adapters = {
            "india-events": stub_adapter(
                "india-events",
                [
                    CountryScrapeCandidate(
                        title="Arijit Singh Live Concert",
                        start=tomorrow_evening,
                        site="BookMyShow",
                        venue_name="NSCI Dome",
                    )
                ],
            ),
            "firecrawl": stub_adapter(
                "firecrawl",
                [
                    WebScrapeCandidate(
                        title="Arijit Singh Live Concert",
                        start=tomorrow_evening,
                        organizer="AllEvents",
                        venue_name="NSCI Dome",
                    )
                ],
            ),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["india", "web"])

        assert result.events_inserted == 1
        assert result.duplicates == 1
        assert len(store.events) == 1

    @pytest.mark.asyncio
    async def test_city_only_venues_are_kept_apart(self, store, tomorrow_evening, stub_adapter):
        adapters = {
            "india-events": stub_adapter(
                "india-events",
                [CountryScrapeCandidate(title="Weekend Flea Market", start=tomorrow_evening, site="Insider")],
            ),
            "firecrawl": stub_adapter(
                "firecrawl",
                [WebScrapeCandidate(title="Weekend Flea Market", start=tomorrow_evening, organizer="AllEvents")],
            ),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["india", "web"])

        assert result.events_inserted == 2
        assert all(row["coordinates_inferred"] for row in store.events)


class TestLocationMode:
    """Lock, radius expansion and validation."""

    @pytest.mark.asyncio
    async def test_locked_location_returns_cache(self, store, mumbai_adapters, now, tomorrow_evening):
        store.add_event(recent_event("Mumbai", "Cached Gig", tomorrow_evening, now))
        await JobStore(store).claim(location_hash(MUMBAI_LAT, MUMBAI_LNG, 25.0))
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        result = await orchestrator.run_location(
            LocationRequest(latitude=MUMBAI_LAT, longitude=MUMBAI_LNG, city="Mumbai", sources=["ticketing"])
        )

        assert result.source == "cache"
        assert [e["title"] for e in result.events] == ["Cached Gig"]
        assert mumbai_adapters["ticketmaster"].requests == []

    @pytest.mark.asyncio
    async def test_radius_expands_when_empty(self, store, now, tomorrow_evening, stub_adapter):
        far = recent_event("Lonavala", "Hill Trek", tomorrow_evening, now).model_copy(
            update={"latitude": MUMBAI_LAT + 0.55}
        )
        store.add_event(far)
        orchestrator, _ = make_orchestrator(store, {"ticketmaster": stub_adapter("ticketmaster")}.get)

        result = await orchestrator.run_location(
            LocationRequest(latitude=MUMBAI_LAT, longitude=MUMBAI_LNG, city="Mumbai", sources=["ticketing"])
        )

        assert result.radius_km == 100.0
        assert [e["title"] for e in result.events] == ["Hill Trek"]

    @pytest.mark.asyncio
    async def test_radius_capped(self, store, stub_adapter):
        orchestrator, _ = make_orchestrator(store, {"ticketmaster": stub_adapter("ticketmaster")}.get)

        result = await orchestrator.run_location(
            LocationRequest(latitude=MUMBAI_LAT, longitude=MUMBAI_LNG, sources=["ticketing"])
        )

        assert result.events == []
        assert result.radius_km == 200.0

    @pytest.mark.asyncio
    async def test_nearby_events_found_behind_a_full_page(self, store, now, tomorrow_evening):
        soon = now + timedelta(hours=2)
        for i in range(1000):
            store.add_event(
                recent_event("New York", f"Broadway Night {i}", soon, now).model_copy(
                    update={"latitude": 40.71, "longitude": -74.0}
                )
            )
        store.add_event(recent_event("Mumbai", "Marine Drive Run", tomorrow_evening, now))
        orchestrator, _ = make_orchestrator(store, {}.get)

        events, radius = await orchestrator._events_near(MUMBAI_LAT, MUMBAI_LNG, 25.0)

        assert [e["title"] for e in events] == ["Marine Drive Run"]
        assert radius == 25.0
        lat_min, lat_max, lng_min, lng_max = store.bbox_queries[0]
        assert lat_min < MUMBAI_LAT < lat_max
        assert lng_min < MUMBAI_LNG < lng_max

    @pytest.mark.asyncio
    async def test_invalid_latitude(self, store, mumbai_adapters):
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        with pytest.raises(InvalidConfigError):
            await orchestrator.run_location(LocationRequest(latitude=95.0, longitude=MUMBAI_LNG))


# =============================================================================
# Tests: degradation and configuration
# =============================================================================


class TestDegradation:
    """Provider failures never abort a pass."""

    @pytest.mark.asyncio
    async def test_failed_adapter_is_skipped(self, store, tomorrow_evening, stub_adapter, places_batch):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", error=FetchError("HTTP 503", source="ticketmaster")),
            "googleplaces": stub_adapter("googleplaces", places_batch(tomorrow_evening)),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        assert result.success
        assert result.events_inserted == 5
        outcomes = {o.source: o.success for o in result.sources}
        assert outcomes == {"ticketmaster": False, "googleplaces": True}
        failed = [row for row in store.analytics if not row["p_success"]]
        assert failed[0]["p_source_platform"] == "ticketmaster"

    @pytest.mark.asyncio
    async def test_every_adapter_failed(self, store, stub_adapter):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", error=FetchError("down")),
            "googleplaces": stub_adapter("googleplaces", error=RuntimeError("boom")),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        assert not result.success
        assert result.state is RunState.FAILED
        assert RunState.UPDATING_CACHE in result.history
        assert store.region_cache["in_all_mumbai"]["scraping_status"] == "failed"

    @pytest.mark.asyncio
    async def test_adapter_timeout(self, store, tomorrow_evening, stub_adapter, places_batch):
        class SlowAdapter(stub_adapter):
            async def fetch_events(self, request):
                await asyncio.sleep(5)
                return []

        adapters = {
            "ticketmaster": SlowAdapter("ticketmaster"),
            "googleplaces": stub_adapter("googleplaces", places_batch(tomorrow_evening)),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get, adapter_timeout=0.05)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

        assert result.success
        timed_out = next(o for o in result.sources if o.source == "ticketmaster")
        assert not timed_out.success
        assert "Timed out" in timed_out.error

    @pytest.mark.asyncio
    async def test_mixed_failures_keep_healthy_sources(self, store, tomorrow_evening, stub_adapter):
        class SlowAdapter(stub_adapter):
            async def fetch_events(self, request):
                await asyncio.sleep(5)
                return []

        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", error=RuntimeError("boom")),
            "googleplaces": SlowAdapter("googleplaces"),
            "india-events": stub_adapter(
                "india-events",
                [CountryScrapeCandidate(title="Kala Ghoda Walk", start=tomorrow_evening, site="Insider")],
            ),
            "firecrawl": stub_adapter(
                "firecrawl",
                [WebScrapeCandidate(title="Prithvi Theatre Matinee", start=tomorrow_evening)],
            ),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get, adapter_timeout=0.05)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places", "india", "web"])

        assert result.success
        assert result.events_inserted == 2
        assert sorted(row["title"] for row in store.events) == ["Kala Ghoda Walk", "Prithvi Theatre Matinee"]
        failed = sorted(row["p_source_platform"] for row in store.analytics if not row["p_success"])
        assert failed == ["googleplaces", "ticketmaster"]
        healthy = {row["p_source_platform"]: row["p_events_inserted"] for row in store.analytics if row["p_success"]}
        assert healthy == {"india-events": 1, "firecrawl": 1}

    @pytest.mark.asyncio
    async def test_invalid_candidates_counted(self, store, tomorrow_evening, stub_adapter):
        adapters = {
            "firecrawl": stub_adapter(
                "firecrawl",
                [
                    WebScrapeCandidate(title="   ", start=tomorrow_evening),
                    WebScrapeCandidate(title="Undated Jam"),
                    WebScrapeCandidate(title="Open Mic Night", start=tomorrow_evening),
                ],
            )
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["web"])

        assert result.invalid == 2
        assert result.events_inserted == 1

    @pytest.mark.asyncio
    async def test_write_failure_skips_candidate(self, store, mumbai_adapters):
        store.fail_upserts_for = {"Mumbai Live Show 3"}
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing"])

        assert result.failed_writes == 1
        assert result.events_inserted == 7

    @pytest.mark.asyncio
    async def test_region_not_due_is_skipped(self, store, mumbai_adapters):
        orchestrator, _ = make_orchestrator(store, mumbai_adapters.get)
        await orchestrator.scheduler.record_outcome(MUMBAI_KEY, 20)

        result = await orchestrator.run_region(MUMBAI_KEY, ["ticketing"])

        assert result.skipped
        assert result.history == [RunState.CHECKING_CACHE, RunState.SKIPPED]
        assert mumbai_adapters["ticketmaster"].requests == []


class TestConfiguration:
    """Unconfigured and unknown providers."""

    @pytest.mark.asyncio
    async def test_all_unconfigured_raises(self, store, stub_adapter):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", api_key_env="TICKETMASTER_API_KEY"),
            "googleplaces": stub_adapter("googleplaces", api_key_env="GOOGLE_PLACES_API_KEY"),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        with pytest.raises(ConfigurationError):
            await orchestrator.run_region(MUMBAI_KEY, ["ticketing", "places"])

    def test_unconfigured_provider_dropped(self, store, stub_adapter):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", api_key_env="TICKETMASTER_API_KEY"),
            "googleplaces": stub_adapter("googleplaces"),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        prepared = orchestrator.prepare_adapters(["ticketing", "places", "google"])

        assert [a.source_id for a in prepared] == ["googleplaces"]

    def test_unknown_source(self, store):
        orchestrator, _ = make_orchestrator(store, {}.get)

        with pytest.raises(AdapterNotFoundError):
            orchestrator.prepare_adapters(["myspace"])

    def test_configuration_status(self, store, stub_adapter):
        adapters = {
            "ticketmaster": stub_adapter("ticketmaster", api_key_env="TICKETMASTER_API_KEY"),
            "firecrawl": stub_adapter("firecrawl"),
        }
        orchestrator, _ = make_orchestrator(store, adapters.get)

        status = orchestrator.configuration_status()

        assert status["ticketmaster"] is False
        assert status["firecrawl"] is True
        assert status["ai_generated"] is False


# =============================================================================
# Tests: batch modes
# =============================================================================


class TestTargetedCities:
    """Targeted-cities batch summary."""

    @pytest.mark.asyncio
    async def test_summary_counts(self, store, generic_factory):
        orchestrator, sleep = make_orchestrator(store, generic_factory)

        batch = await orchestrator.run_targeted_cities(["Mumbai", "Delhi", "Atlantis"])

        assert batch.cities_processed == 2
        assert batch.cities_failed == 1
        assert batch.total_events == 6
        assert len(batch.events_preview) == 6
        assert [call.args[0] for call in sleep.await_args_list].count(5.0) == 2

    @pytest.mark.asyncio
    async def test_preview_is_capped(self, store, generic_factory):
        orchestrator, _ = make_orchestrator(store, generic_factory, preview_size=4)

        batch = await orchestrator.run_targeted_cities(["Mumbai", "Delhi"])

        assert batch.total_events == 6
        assert len(batch.events_preview) == 4

    @pytest.mark.asyncio
    async def test_city_with_recent_events_skipped(self, store, now, tomorrow_evening, generic_factory):
        for i in range(5):
            store.add_event(recent_event("Mumbai", f"Seeded {i}", tomorrow_evening, now))
        orchestrator, _ = make_orchestrator(store, generic_factory)

        batch = await orchestrator.run_targeted_cities(["Mumbai"])

        assert batch.cities_processed == 1
        assert batch.total_events == 0
        assert batch.results == []

    @pytest.mark.asyncio
    async def test_force_refresh_scrapes_anyway(self, store, now, tomorrow_evening, generic_factory):
        for i in range(5):
            store.add_event(recent_event("Mumbai", f"Seeded {i}", tomorrow_evening, now))
        orchestrator, _ = make_orchestrator(store, generic_factory)

        batch = await orchestrator.run_targeted_cities(["Mumbai"], force_refresh=True)

        assert batch.total_events == 3


class TestMaster:
    """Master single and batch modes."""

    @pytest.mark.asyncio
    async def test_single_requires_country(self, store, generic_factory):
        orchestrator, _ = make_orchestrator(store, generic_factory)

        with pytest.raises(InvalidConfigError):
            await orchestrator.run_master(mode="single")

    @pytest.mark.asyncio
    async def test_unknown_mode(self, store, generic_factory):
        orchestrator, _ = make_orchestrator(store, generic_factory)

        with pytest.raises(InvalidConfigError):
            await orchestrator.run_master(country="IN", mode="everything")

    @pytest.mark.asyncio
    async def test_single_region(self, store, generic_factory):
        orchestrator, _ = make_orchestrator(store, generic_factory)

        batch = await orchestrator.run_master(country="in", city="Pune")

        assert batch.cities_processed == 1
        assert batch.total_events == 3
        assert "in_all_pune" in store.region_cache

    @pytest.mark.asyncio
    async def test_batch_walks_regions_with_pacing(self, store, generic_factory):
        regions = {"IN": TARGET_REGIONS["IN"], "GB": TARGET_REGIONS["GB"]}
        orchestrator, sleep = make_orchestrator(
            store,
            generic_factory,
            regions=regions,
            cities_per_country=2,
        )

        batch = await orchestrator.run_master(mode="batch")

        assert [r.key.cache_key for r in batch.results] == [
            "in_all_mumbai",
            "in_all_delhi",
            "gb_all_london",
            "gb_all_birmingham",
        ]
        assert batch.total_events == 12
        delays = [call.args[0] for call in sleep.await_args_list]
        assert delays.count(10.0) == 1
        assert delays.count(5.0) == 2

    @pytest.mark.asyncio
    async def test_batch_skips_regions_not_due(self, store, generic_factory):
        regions = {"IN": TARGET_REGIONS["IN"]}
        orchestrator, _ = make_orchestrator(
            store, generic_factory, regions=regions, cities_per_country=1
        )
        await orchestrator.scheduler.record_outcome(MUMBAI_KEY, 30)

        batch = await orchestrator.run_master(mode="batch")

        assert batch.results[0].skipped
        assert batch.total_events == 0


# =============================================================================
# Tests: AI generation and maintenance
# =============================================================================


def fake_llm(content: str) -> MagicMock:
    llm = MagicMock()
    llm.api_key = "gsk-test"
    llm.complete = AsyncMock(return_value=content)
    return llm


def generated_batch(count: int = 3) -> str:
    start = (datetime.now() + timedelta(days=3)).replace(microsecond=0)
    return json.dumps([
        {
            "title": f"Riverside Open Mic {i}",
            "description": "Bring a song or a poem.",
            "start_date": (start + timedelta(hours=i)).isoformat(),
            "location_name": "Koregaon Park",
            "category": "music",
            "price": "Free",
            "organizer": "Pune Collective",
        }
        for i in range(count)
    ])


class TestAiGeneration:
    """Generation guarded by the refresh check and a generate job."""

    @pytest.mark.asyncio
    async def test_generates_and_records_cost(self, store):
        llm = fake_llm(generated_batch())
        adapter = AiGeneratorAdapter(settings=Settings(), llm=llm)
        orchestrator, _ = make_orchestrator(store, {"ai_generated": adapter}.get)

        result = await orchestrator.generate_ai_events("Pune")

        assert result.success
        assert result.source == "fresh"
        assert result.new_events_fetched == 3
        assert {e["generation_batch_id"] for e in result.events} == {result.generation_batch_id}
        assert all(e["ai_generated"] and e["provenance"] == "ai_generated" for e in result.events)
        (job,) = store.jobs.values()
        assert job["job_type"] == "generate"
        assert job["cost_estimate"] == 0.01
        assert job["generation_batch_id"] == result.generation_batch_id

    @pytest.mark.asyncio
    async def test_fresh_city_served_from_cache(self, store, now, tomorrow_evening):
        for i in range(5):
            store.add_event(recent_event("Pune", f"Seeded {i}", tomorrow_evening, now))
        llm = fake_llm(generated_batch())
        orchestrator, _ = make_orchestrator(
            store, {"ai_generated": AiGeneratorAdapter(settings=Settings(), llm=llm)}.get
        )

        result = await orchestrator.generate_ai_events("Pune")

        assert result.source == "cache"
        assert len(result.events) == 5
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_batch_rejected_whole(self, store):
        llm = fake_llm('{"events": []}')
        orchestrator, _ = make_orchestrator(
            store, {"ai_generated": AiGeneratorAdapter(settings=Settings(), llm=llm)}.get
        )

        result = await orchestrator.generate_ai_events("Pune", force_refresh=True)

        assert not result.success
        assert store.events == []
        (job,) = store.jobs.values()
        assert job["status"] == "failed"

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self, store):
        llm = fake_llm("[]")
        llm.api_key = None
        orchestrator, _ = make_orchestrator(
            store, {"ai_generated": AiGeneratorAdapter(settings=Settings(), llm=llm)}.get
        )

        with pytest.raises(ConfigurationError):
            await orchestrator.generate_ai_events("Pune")


class TestCleanup:
    @pytest.mark.asyncio
    async def test_deletes_expired(self, store, now, tomorrow_evening):
        store.add_event(recent_event("Mumbai", "Live", tomorrow_evening, now))
        expired = recent_event("Mumbai", "Gone", now - timedelta(days=3), now - timedelta(days=10))
        store.add_event(expired)
        orchestrator, _ = make_orchestrator(store, {}.get)

        assert await orchestrator.cleanup_expired() == 1
        assert [row["title"] for row in store.events] == ["Live"]
