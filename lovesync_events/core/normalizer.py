"""Event normalizer: candidate variants to canonical `Event`.

`normalize` is a pure function over the closed set of candidate variants. It
fills source-specific defaults, derives coordinates around a known city center
when a provider gives none, and assigns each event its lifetime.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from lovesync_events.config import get_settings
from lovesync_events.core.event_model import (
    SOURCE_CLASSES,
    AiCandidate,
    CandidateEvent,
    CountryScrapeCandidate,
    Event,
    PlacesCandidate,
    Provenance,
    SourceClass,
    SourceKind,
    TicketingCandidate,
    WebScrapeCandidate,
    generate_external_id,
)
from lovesync_events.core.exceptions import MissingFieldError
from lovesync_events.utils.geo import point_on_circle
from lovesync_events.utils.text import clean_text, truncate

FREE_PRICE = "Free"
CHECK_WEBSITE_PRICE = "Check website"
SPREAD_RADIUS_KM = 5.0


@dataclass(frozen=True)
class RegionLocation:
    """Where a pass is running; used for fallbacks and coordinate spreading."""

    country: str
    city: str | None = None
    region: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class Lifetimes:
    """Event lifetime per source class."""

    scrape: timedelta
    api: timedelta
    ai: timedelta

    @classmethod
    def from_settings(cls) -> "Lifetimes":
        settings = get_settings()
        return cls(
            scrape=timedelta(hours=settings.scrape_ttl_hours),
            api=timedelta(days=settings.api_ttl_days),
            ai=timedelta(days=settings.ai_ttl_days),
        )


def _expires_at(
    source: SourceKind,
    start: datetime,
    end: datetime | None,
    now: datetime,
    lifetimes: Lifetimes,
) -> datetime:
    source_class = SOURCE_CLASSES[source]
    if source_class is SourceClass.SCRAPE:
        return now + lifetimes.scrape
    if source_class is SourceClass.AI:
        return now + lifetimes.ai
    # Listed events stay at least until they are over
    return max(now + lifetimes.api, (end or start) + timedelta(days=1))


def _ticketing_price(candidate: TicketingCandidate) -> str | None:
    if candidate.price_min is None and candidate.price_max is None:
        return None
    low = candidate.price_min if candidate.price_min is not None else candidate.price_max
    high = candidate.price_max if candidate.price_max is not None else candidate.price_min
    currency = candidate.currency or ""
    if low == 0 and high == 0:
        return FREE_PRICE
    return f"{currency} {low:g}-{high:g}".strip()


def _source_fields(candidate: CandidateEvent) -> dict:
    """Per-variant mapping; raises TypeError on anything outside the union."""
    if isinstance(candidate, TicketingCandidate):
        return {
            "location_name": candidate.venue_name or "TBD",
            "price": _ticketing_price(candidate) or CHECK_WEBSITE_PRICE,
            "organizer": candidate.promoter,
            "organizer_inferred": False,
            "category": candidate.segment.lower() if candidate.segment else "entertainment",
            "provenance": Provenance.LIVE,
        }
    if isinstance(candidate, PlacesCandidate):
        return {
            "location_name": candidate.venue_name,
            "price": candidate.price or CHECK_WEBSITE_PRICE,
            "organizer": candidate.venue_name,
            "organizer_inferred": True,
            "category": candidate.category or candidate.venue_type.replace("_", " "),
            "provenance": Provenance.LIVE,
        }
    if isinstance(candidate, CountryScrapeCandidate):
        return {
            "location_name": candidate.venue_name,
            "price": candidate.price or CHECK_WEBSITE_PRICE,
            "organizer": candidate.site,
            "organizer_inferred": True,
            "category": candidate.category or "entertainment",
            "provenance": candidate.provenance,
        }
    if isinstance(candidate, WebScrapeCandidate):
        return {
            "location_name": candidate.venue_name,
            "price": candidate.price or CHECK_WEBSITE_PRICE,
            # listing-site name
            "organizer": candidate.organizer,
            "organizer_inferred": True,
            "category": candidate.category or "entertainment",
            "provenance": candidate.provenance,
        }
    if isinstance(candidate, AiCandidate):
        return {
            "location_name": candidate.location_name,
            "price": candidate.price or FREE_PRICE,
            "organizer": candidate.organizer or "Local Organization",
            "organizer_inferred": True,
            "category": candidate.category or "social",
            "provenance": Provenance.AI_GENERATED,
            "ai_generated": True,
            "generation_batch_id": candidate.generation_batch_id,
        }
    raise TypeError(f"Unsupported candidate type: {type(candidate).__name__}")


def normalize(
    candidate: CandidateEvent,
    location: RegionLocation | None = None,
    *,
    index: int = 0,
    total: int = 1,
    now: datetime | None = None,
    lifetimes: Lifetimes | None = None,
) -> Event:
    """Map one candidate to the canonical schema.

    Args:
        candidate: Adapter output
        location: Region the pass runs for (fallback city/country and center)
        index: Position of the candidate in its adapter batch
        total: Size of that batch (spreads derived coordinates)
        now: Clock override
        lifetimes: Expiry table override

    Returns:
        Event ready for duplicate detection and persistence

    Raises:
        MissingFieldError: title, start, or both location fields are missing
        TypeError: candidate is not one of the known variants
    """
    now = now or datetime.now(timezone.utc)
    lifetimes = lifetimes or Lifetimes.from_settings()
    fields = _source_fields(candidate)
    source = SourceKind(candidate.source)

    title = clean_text(candidate.title)
    if not title:
        raise MissingFieldError("title", candidate.external_id, source=source.value)
    if candidate.start is None:
        raise MissingFieldError("start_date", candidate.external_id, source=source.value)

    city = candidate.city or (location.city if location else None)
    country = candidate.country or (location.country if location else None)
    region = candidate.region or (location.region if location else None)
    location_name = clean_text(fields.pop("location_name"))
    if not location_name and not city:
        raise MissingFieldError("location_name", candidate.external_id, source=source.value)

    latitude, longitude = candidate.latitude, candidate.longitude
    coordinates_inferred = False
    has_center = location is not None and None not in (location.latitude, location.longitude)
    if (latitude is None or longitude is None) and has_center:
        coordinates_inferred = True
        latitude, longitude = point_on_circle(
            location.latitude,
            location.longitude,
            SPREAD_RADIUS_KM,
            index,
            total,
        )

    end = candidate.end if candidate.end and candidate.end >= candidate.start else None
    external_id = candidate.external_id or generate_external_id(
        source.value, title, candidate.start, location_name or city
    )

    return Event(
        external_id=external_id,
        source=source,
        title=truncate(title, 500),
        description=truncate(clean_text(candidate.description), 2000),
        start_date=candidate.start,
        end_date=end,
        location_name=location_name or city,
        city_name=city,
        region=region,
        country=country,
        latitude=latitude,
        longitude=longitude,
        coordinates_inferred=coordinates_inferred,
        website_url=candidate.website_url,
        image_url=candidate.image_url,
        created_at=now,
        expires_at=_expires_at(source, candidate.start, end, now, lifetimes),
        **fields,
    )
