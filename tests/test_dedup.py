"""Tests for content-based duplicate detection.

Tests:
1. compare() - individual match signals
2. pick_duplicate() - choosing among several stored rows
3. DuplicateDetector - store lookups and failure policy
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from lovesync_events.core.dedup import (
    DuplicateCheckFailurePolicy,
    DuplicateDetector,
    compare,
    pick_duplicate,
)
from lovesync_events.core.event_model import Event, SourceKind

NOW = datetime.now(timezone.utc)
START = (NOW + timedelta(days=1)).replace(hour=19, minute=0, second=0, microsecond=0)


def make_event(**overrides) -> Event:
    fields = dict(
        external_id="tm-1",
        source=SourceKind.TICKETMASTER,
        title="Sunburn Arena",
        start_date=START,
        location_name="Jio World Garden",
        city_name="Mumbai",
        latitude=19.0650,
        longitude=72.8650,
        price="Check website",
        organizer=None,
        created_at=NOW,
        expires_at=NOW + timedelta(days=30),
    )
    fields.update(overrides)
    return Event(**fields)


def stored_row(event: Event, row_id: str = "row-1", **overrides) -> dict:
    row = event.to_supabase_dict()
    row["id"] = row_id
    row.update(overrides)
    return row


# =============================================================================
# Tests: compare()
# =============================================================================


class TestCompare:
    """Match signals between a candidate and a stored row."""

    def test_same_event_other_source(self):
        existing = stored_row(make_event())
        candidate = make_event(
            external_id="google_x_0",
            source=SourceKind.GOOGLE_PLACES,
            title="  SUNBURN   arena ",
        )

        assert compare(candidate, existing).is_duplicate

    def test_title_alone_is_not_enough(self):
        existing = stored_row(
            make_event(),
            location_name="Somewhere Else",
            latitude=18.5,
            longitude=73.8,
        )
        assert not compare(make_event(), existing).is_duplicate

    def test_different_day(self):
        existing = stored_row(make_event(start_date=START + timedelta(days=1)))
        assert not compare(make_event(), existing).is_duplicate

    def test_calendar_day_is_utc(self):
        # 23:30 at UTC-5 is the next UTC day
        late = datetime(2026, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        existing = stored_row(make_event(start_date=datetime(2026, 5, 2, 8, 0, tzinfo=timezone.utc)))
        assert compare(make_event(start_date=late), existing).date

    def test_coordinates_within_tolerance(self):
        existing = stored_row(make_event(location_name="NSCI Dome"))
        candidate = make_event(location_name="Dome, Worli", latitude=19.0700, longitude=72.8700)

        signals = compare(candidate, existing)
        assert signals.location
        assert signals.is_duplicate

    def test_coordinates_outside_tolerance(self):
        existing = stored_row(make_event(location_name="NSCI Dome"))
        candidate = make_event(location_name="Dome, Worli", latitude=19.0900, longitude=72.8650)
        assert not compare(candidate, existing).location

    def test_conflicting_organizers(self):
        existing = stored_row(make_event(organizer="Percept Live"))
        candidate = make_event(organizer="BookMyShow Live")

        signals = compare(candidate, existing)
        assert signals.organizer_conflict
        assert not signals.is_duplicate

    def test_missing_organizer_is_ignored(self):
        existing = stored_row(make_event(organizer="Percept Live"))
        assert compare(make_event(organizer=None), existing).is_duplicate

    def test_matching_organizer_corroborates(self):
        existing = stored_row(
            make_event(organizer="Percept Live"),
            location_name=None,
            latitude=None,
            longitude=None,
        )
        candidate = make_event(organizer="percept live")
        assert compare(candidate, existing).is_duplicate

    def test_string_coordinates_from_store(self):
        existing = stored_row(make_event(location_name="A"), latitude="19.0650", longitude="72.8650")
        assert compare(make_event(location_name="B"), existing).location

    def test_inferred_organizer_does_not_conflict(self):
        existing = stored_row(
            make_event(source=SourceKind.INDIA_EVENTS, organizer="BookMyShow", organizer_inferred=True),
        )
        candidate = make_event(
            external_id="firecrawl_x",
            source=SourceKind.FIRECRAWL,
            organizer="AllEvents",
            organizer_inferred=True,
        )

        signals = compare(candidate, existing)
        assert not signals.organizer_conflict
        assert signals.is_duplicate

    def test_inferred_organizer_does_not_corroborate(self):
        existing = stored_row(
            make_event(organizer="Kitty Su", organizer_inferred=True),
            location_name=None,
            latitude=None,
            longitude=None,
        )
        assert not compare(make_event(organizer="Kitty Su"), existing).is_duplicate

    def test_named_organizer_against_inferred_one(self):
        existing = stored_row(make_event(organizer="Club 0", organizer_inferred=True))
        candidate = make_event(organizer="Live Nation")
        assert compare(candidate, existing).is_duplicate

    def test_inferred_coordinates_do_not_match(self):
        existing = stored_row(make_event(location_name="Bandra Fort"), coordinates_inferred=True)
        candidate = make_event(location_name="Carter Road")
        assert not compare(candidate, existing).location

    def test_city_name_venue_does_not_match(self):
        existing = stored_row(make_event(location_name="Mumbai", latitude=None, longitude=None))
        candidate = make_event(location_name="mumbai", latitude=None, longitude=None)
        assert not compare(candidate, existing).location

    def test_placeholder_venue_does_not_match(self):
        existing = stored_row(make_event(location_name="TBD", latitude=None, longitude=None))
        candidate = make_event(location_name="TBD", latitude=None, longitude=None)
        assert not compare(candidate, existing).location


# =============================================================================
# Tests: pick_duplicate()
# =============================================================================


class TestPickDuplicate:
    """Choosing the stored row a candidate duplicates."""

    def test_no_rows(self):
        assert pick_duplicate(make_event(), []) is None

    def test_most_recent_match_wins(self):
        event = make_event()
        older = stored_row(event, "old", created_at="2026-04-01T00:00:00+00:00")
        newer = stored_row(event, "new", created_at="2026-04-20T00:00:00+00:00")
        unrelated = stored_row(make_event(title="Other Show"), "other")

        assert pick_duplicate(event, [older, unrelated, newer])["id"] == "new"


# =============================================================================
# Tests: DuplicateDetector
# =============================================================================


class TestDuplicateDetector:
    """Per-candidate lookups against the store."""

    @pytest.mark.asyncio
    async def test_finds_stored_duplicate(self, store):
        row = store.add_event(make_event())
        detector = DuplicateDetector(store)

        candidate = make_event(external_id="google_x_0", source=SourceKind.GOOGLE_PLACES)
        assert await detector.find_duplicate(candidate) == row["id"]
        assert await detector.should_insert(candidate) == (False, row["id"])

    @pytest.mark.asyncio
    async def test_new_event_is_inserted(self, store):
        store.add_event(make_event())
        detector = DuplicateDetector(store)

        insert, existing = await detector.should_insert(make_event(title="Lollapalooza India"))
        assert insert is True
        assert existing is None

    @pytest.mark.asyncio
    async def test_lookup_failure_inserts_by_default(self):
        failing = AsyncMock()
        failing.find_events_on_date.side_effect = RuntimeError("connection reset")
        detector = DuplicateDetector(failing)

        assert await detector.should_insert(make_event()) == (True, None)

    @pytest.mark.asyncio
    async def test_lookup_failure_skip_policy(self):
        failing = AsyncMock()
        failing.find_events_on_date.side_effect = RuntimeError("connection reset")
        detector = DuplicateDetector(failing, failure_policy=DuplicateCheckFailurePolicy.SKIP)

        assert await detector.should_insert(make_event()) == (False, None)
