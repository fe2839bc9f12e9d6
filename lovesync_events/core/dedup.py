"""Content-based duplicate detection across sources.

The `(source, external_id)` constraint only stops a provider from re-inserting
its own record. The same real-world event reported by two providers has two
identities, so before every insert the candidate is compared by content
against the live events stored for the same calendar day.

Match policy:
    title      normalized titles equal (required)
    date       same UTC calendar day (required)
    location   equal venue name, or both coordinates within tolerance
    organizer  both present and different -> never a duplicate;
               both present and equal -> corroborates
Venue names that are only the city or a placeholder, organizers filled from
a site or venue name, and coordinates placed around the city center are
not evidence either way.
A duplicate needs title + date + at least one of {location, organizer}.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from dateutil import parser as dateutil_parser

from lovesync_events.core.event_model import Event
from lovesync_events.core.supabase_client import SupabaseClient
from lovesync_events.logging import get_logger
from lovesync_events.utils.text import normalize_title

logger = get_logger(__name__)

PLACEHOLDER_VENUES = {"", "tbd", "tba", "online", "various venues"}


class DuplicateCheckFailurePolicy(str, Enum):
    """What to do with a candidate when the lookup itself fails."""

    INSERT = "insert"  # availability: may leak a duplicate
    SKIP = "skip"  # strictness: candidate is re-offered on the next pass


@dataclass
class MatchSignals:
    """Outcome of comparing one candidate with one stored event."""

    title: bool
    date: bool
    location: bool
    organizer_match: bool
    organizer_conflict: bool

    @property
    def is_duplicate(self) -> bool:
        if not (self.title and self.date) or self.organizer_conflict:
            return False
        return self.location or self.organizer_match


def _parse_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dateutil_parser.isoparse(str(value))
        except (ValueError, TypeError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _same_day(a: datetime, b: datetime | None) -> bool:
    if b is None:
        return False
    return a.astimezone(timezone.utc).date() == b.astimezone(timezone.utc).date()


def _coords_close(
    lat1: float | None,
    lng1: float | None,
    lat2: Any,
    lng2: Any,
    tolerance: float,
) -> bool:
    if None in (lat1, lng1, lat2, lng2):
        return False
    return abs(lat1 - float(lat2)) <= tolerance and abs(lng1 - float(lng2)) <= tolerance


def _venue(location_name: Any, city_name: Any) -> str:
    """Normalized venue name; empty when it is only the city or a placeholder."""
    venue = normalize_title(location_name)
    if venue in PLACEHOLDER_VENUES or venue == normalize_title(city_name):
        return ""
    return venue


def compare(event: Event, existing: dict[str, Any], tolerance_deg: float = 0.01) -> MatchSignals:
    """Compare a normalized candidate against a stored row.

    Inferred organizers and coordinates are display fallbacks, so they
    neither corroborate nor conflict.
    """
    own_location = _venue(event.location_name, event.city_name)
    other_location = _venue(existing.get("location_name"), existing.get("city_name"))

    own_organizer = "" if event.organizer_inferred else normalize_title(event.organizer)
    other_organizer = "" if existing.get("organizer_inferred") else normalize_title(existing.get("organizer"))
    both_organizers = bool(own_organizer and other_organizer)

    location = bool(own_location and own_location == other_location)
    if not location and not (event.coordinates_inferred or existing.get("coordinates_inferred")):
        location = _coords_close(
            event.latitude,
            event.longitude,
            existing.get("latitude"),
            existing.get("longitude"),
            tolerance_deg,
        )

    return MatchSignals(
        title=normalize_title(event.title) == normalize_title(existing.get("title")),
        date=_same_day(event.start_date, _parse_datetime(existing.get("start_date"))),
        location=location,
        organizer_match=both_organizers and own_organizer == other_organizer,
        organizer_conflict=both_organizers and own_organizer != other_organizer,
    )


def pick_duplicate(
    event: Event,
    candidates: list[dict[str, Any]],
    tolerance_deg: float = 0.01,
) -> dict[str, Any] | None:
    """Best matching stored row, ties broken by most recent `created_at`."""
    matches = [row for row in candidates if compare(event, row, tolerance_deg).is_duplicate]
    if not matches:
        return None
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return max(matches, key=lambda row: _parse_datetime(row.get("created_at")) or oldest)


class DuplicateDetector:
    """Per-candidate duplicate lookup against the persistent store."""

    def __init__(
        self,
        store: SupabaseClient,
        tolerance_deg: float = 0.01,
        failure_policy: DuplicateCheckFailurePolicy = DuplicateCheckFailurePolicy.INSERT,
    ) -> None:
        self.store = store
        self.tolerance_deg = tolerance_deg
        self.failure_policy = failure_policy
        self.logger = get_logger("dedup")

    async def find_duplicate(self, event: Event) -> str | None:
        """Return the id of the stored event this candidate duplicates, if any."""
        day = event.start_date.astimezone(timezone.utc).date()
        candidates = await self.store.find_events_on_date(day)
        match = pick_duplicate(event, candidates, self.tolerance_deg)
        if match is None:
            return None
        self.logger.debug(
            "duplicate_found",
            title=event.title,
            source=event.source.value,
            existing_id=match.get("id"),
            existing_source=match.get("source"),
        )
        return str(match.get("id"))

    async def should_insert(self, event: Event) -> tuple[bool, str | None]:
        """Decide whether to insert, applying the failure policy on lookup errors.

        Returns:
            (insert?, existing_id)
        """
        try:
            existing_id = await self.find_duplicate(event)
        except Exception as e:
            insert = self.failure_policy is DuplicateCheckFailurePolicy.INSERT
            self.logger.warning(
                "duplicate_check_failed",
                title=event.title,
                source=event.source.value,
                error=str(e),
                policy=self.failure_policy.value,
            )
            return insert, None
        return existing_id is None, existing_id
