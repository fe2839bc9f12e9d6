"""Pydantic models for candidate and canonical events.

Adapters emit `CandidateEvent` variants (tagged on `source`); the normalizer
turns them into `Event`, which maps to the Supabase `events` table.
"""

import hashlib
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceKind(str, Enum):
    """Adapter that produced an event."""

    TICKETMASTER = "ticketmaster"
    GOOGLE_PLACES = "googleplaces"
    INDIA_EVENTS = "india-events"
    FIRECRAWL = "firecrawl"
    AI_GENERATED = "ai_generated"


class Provenance(str, Enum):
    """How trustworthy a stored record is."""

    LIVE = "live"
    TEMPLATE_FALLBACK = "template_fallback"
    AI_GENERATED = "ai_generated"


class SourceClass(str, Enum):
    """Lifetime class used to compute `expires_at`."""

    API = "api"
    SCRAPE = "scrape"
    AI = "ai"


SOURCE_CLASSES: dict[SourceKind, SourceClass] = {
    SourceKind.TICKETMASTER: SourceClass.API,
    SourceKind.GOOGLE_PLACES: SourceClass.API,
    SourceKind.INDIA_EVENTS: SourceClass.SCRAPE,
    SourceKind.FIRECRAWL: SourceClass.SCRAPE,
    SourceKind.AI_GENERATED: SourceClass.AI,
}


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================
# CANDIDATE EVENTS (adapter output)
# ============================================================


class _CandidateBase(BaseModel):
    """Fields every provider can report."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    external_id: str | None = None
    title: str
    description: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    image_url: str | None = None
    website_url: str | None = None

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return _ensure_aware(v)


class TicketingCandidate(_CandidateBase):
    """Listing from the ticketing API."""

    source: Literal["ticketmaster"] = "ticketmaster"
    venue_name: str | None = None
    venue_address: str | None = None
    segment: str | None = None
    promoter: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    currency: str | None = None


class PlacesCandidate(_CandidateBase):
    """Event synthesized from a qualifying venue."""

    source: Literal["googleplaces"] = "googleplaces"
    place_id: str
    sequence: int = 0
    venue_name: str
    venue_type: str
    venue_address: str | None = None
    rating: float | None = None
    price: str | None = None
    category: str | None = None


class CountryScrapeCandidate(_CandidateBase):
    """Line extracted from a country-specific listing site, or a template."""

    source: Literal["india-events"] = "india-events"
    site: str
    venue_name: str | None = None
    price: str | None = None
    category: str | None = None
    provenance: Provenance = Provenance.LIVE


class WebScrapeCandidate(_CandidateBase):
    """Line extracted from a rendered listing page, or a template."""

    source: Literal["firecrawl"] = "firecrawl"
    page_url: str | None = None
    venue_name: str | None = None
    price: str | None = None
    organizer: str | None = None
    category: str | None = None
    provenance: Provenance = Provenance.LIVE


class AiCandidate(_CandidateBase):
    """Synthetic event from one LLM generation call."""

    source: Literal["ai_generated"] = "ai_generated"
    location_name: str | None = None
    category: str | None = None
    price: str | None = None
    organizer: str | None = None
    generation_batch_id: str


CandidateEvent = Annotated[
    Union[
        TicketingCandidate,
        PlacesCandidate,
        CountryScrapeCandidate,
        WebScrapeCandidate,
        AiCandidate,
    ],
    Field(discriminator="source"),
]


# ============================================================
# CANONICAL EVENT
# ============================================================


class Event(BaseModel):
    """Normalized event as stored in the `events` table."""

    model_config = ConfigDict(str_strip_whitespace=True)

    external_id: str
    source: SourceKind
    title: Annotated[str, Field(min_length=1, max_length=500)]
    description: str | None = None
    start_date: datetime
    end_date: datetime | None = None

    location_name: str | None = None
    city_name: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    # placed around the city center, not reported by the provider
    coordinates_inferred: bool = False

    price: str
    organizer: str | None = None
    # filled from the site, venue or a placeholder rather than named by the provider
    organizer_inferred: bool = False
    category: str | None = None
    website_url: str | None = None
    image_url: str | None = None

    ai_generated: bool = False
    generation_batch_id: str | None = None
    provenance: Provenance = Provenance.LIVE

    created_at: datetime
    expires_at: datetime

    @field_validator("start_date", "end_date", "created_at", "expires_at")
    @classmethod
    def _aware(cls, v: datetime | None) -> datetime | None:
        return _ensure_aware(v)

    @field_validator("latitude")
    @classmethod
    def _lat_range(cls, v: float | None) -> float | None:
        if v is not None and not -90 <= v <= 90:
            raise ValueError(f"latitude out of range: {v}")
        return v

    @field_validator("longitude")
    @classmethod
    def _lng_range(cls, v: float | None) -> float | None:
        if v is not None and not -180 <= v <= 180:
            raise ValueError(f"longitude out of range: {v}")
        return v

    @property
    def event_date(self) -> str:
        """Calendar day of the start, in UTC."""
        return self.start_date.astimezone(timezone.utc).date().isoformat()

    def to_supabase_dict(self) -> dict[str, Any]:
        """Convert to the row shape of the `events` table."""
        data = self.model_dump(mode="json")
        data["event_date"] = self.event_date
        return data


def generate_external_id(
    source: str,
    title: str,
    start: datetime | None,
    location: str | None,
) -> str:
    """Derive a stable external id when the provider gives none."""
    content = "|".join([
        source,
        title.strip().lower(),
        start.isoformat() if start else "",
        (location or "").strip().lower(),
    ])
    digest = hashlib.sha256(content.encode()).hexdigest()[:16]
    return f"{source}_{digest}"
