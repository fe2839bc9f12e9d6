"""Google Places adapter.

Places has no event listings. This adapter searches well-rated venues that
usually host events and synthesizes a few plausible events per venue. It is a
documented approximation, not event discovery. Synthesis is seeded by place id
so repeated runs produce the same external ids.
"""

import random
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from lovesync_events.adapters import register_adapter
from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.config.regions import currency_for_country, find_city
from lovesync_events.core.event_model import PlacesCandidate
from lovesync_events.core.exceptions import FetchError, InvalidConfigError

API_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
SEARCH_KEYWORD = "events concerts shows performances"
SEARCH_RADIUS_M = 25_000
VENUE_TYPES = ["night_club", "amusement_park", "art_gallery"]
VENUES_PER_TYPE = 5
MIN_RATING = 4.0
MAX_DAYS_AHEAD = 60

# kind -> (titles, category, (low, high) price band)
VENUE_PROFILES: dict[str, tuple[list[str], str, tuple[int, int]]] = {
    "stadium": (
        ["Football Match", "Basketball Game", "Cricket Match", "Tennis Tournament", "Soccer Game"],
        "sports",
        (30, 150),
    ),
    "night_club": (
        ["DJ Night", "Live Music", "Dance Party", "Theme Night", "Weekend Bash"],
        "nightlife",
        (15, 40),
    ),
    "art_gallery": (
        ["Art Exhibition", "Gallery Opening", "Cultural Show", "Artist Talk", "Museum Night"],
        "arts",
        (10, 25),
    ),
    "movie_theater": (
        ["Movie Premiere", "Film Festival", "Classic Movie Night", "Documentary Screening"],
        "entertainment",
        (8, 18),
    ),
    "default": (
        ["Live Performance", "Community Event", "Special Show", "Entertainment Night"],
        "entertainment",
        (20, 50),
    ),
}


def venue_kind(types: list[str]) -> str:
    """Collapse a place's type list to the profile used for synthesis."""
    for kind in ("stadium", "night_club", "art_gallery", "movie_theater"):
        if kind in types:
            return kind
    if "museum" in types:
        return "art_gallery"
    return "default"


def events_per_venue(kind: str) -> int:
    if kind == "stadium":
        return 3
    if kind == "night_club":
        return 2
    return 1


def event_time(kind: str, rng: random.Random) -> time:
    if kind == "night_club":
        return time(22, 0)
    if kind == "movie_theater":
        return rng.choice([time(14, 0), time(17, 0), time(20, 0)])
    if kind == "stadium":
        return time(19, 0)
    return time(19, 30)


def is_quality_venue(place: dict[str, Any]) -> bool:
    return place.get("business_status") == "OPERATIONAL" and (place.get("rating") or 0) > MIN_RATING


@register_adapter("googleplaces")
class GooglePlacesAdapter(BaseAdapter):
    """Venue-based events from the Places Nearby Search API."""

    source_id = "googleplaces"
    source_name = "Google Places"
    api_key_env = "GOOGLE_PLACES_API_KEY"
    request_delay = 1.0

    @property
    def api_key(self) -> str | None:
        return self.settings.google_places_api_key

    def _center(self, request: FetchRequest) -> tuple[float, float]:
        if request.has_coordinates:
            return request.latitude, request.longitude
        city = find_city(request.city)
        if city is None:
            raise InvalidConfigError(
                f"No coordinates known for city {request.city!r}", field="latitude"
            )
        return city.latitude, city.longitude

    async def fetch_events(self, request: FetchRequest) -> list[PlacesCandidate]:
        lat, lng = self._center(request)
        city = find_city(request.city)
        tz = ZoneInfo(city.timezone) if city else timezone.utc
        today = datetime.now(tz).date()

        candidates: list[PlacesCandidate] = []
        for venue_type in VENUE_TYPES:
            data = await self.fetch_json(
                API_URL,
                params={
                    "key": self.api_key,
                    "location": f"{lat},{lng}",
                    "radius": SEARCH_RADIUS_M,
                    "type": venue_type,
                    "keyword": SEARCH_KEYWORD,
                },
            )
            status = data.get("status")
            if status in ("REQUEST_DENIED", "OVER_QUERY_LIMIT", "INVALID_REQUEST"):
                raise FetchError(data.get("error_message") or status, source=self.source_id)
            if status != "OK":
                self.logger.info("no_venues", venue_type=venue_type, city=request.city, status=status)
                continue

            for place in (data.get("results") or [])[:VENUES_PER_TYPE]:
                if is_quality_venue(place):
                    candidates.extend(self.synthesize(place, request, today, tz))

        self.logger.info("fetched_events", source=self.source_id, city=request.city, count=len(candidates))
        return candidates

    def synthesize(
        self,
        place: dict[str, Any],
        request: FetchRequest,
        today: date,
        tz: tzinfo,
    ) -> list[PlacesCandidate]:
        """Build the events for one venue."""
        place_id = place["place_id"]
        rng = random.Random(place_id)
        kind = venue_kind(place.get("types") or [])
        titles, category, (low, high) = VENUE_PROFILES[kind]
        location = (place.get("geometry") or {}).get("location") or {}
        currency = currency_for_country(request.country)
        maps_url = f"https://maps.google.com/place?q=place_id:{place_id}"

        events = []
        for i in range(events_per_venue(kind)):
            day = today + timedelta(days=rng.randint(1, MAX_DAYS_AHEAD))
            start = datetime.combine(day, event_time(kind, rng), tzinfo=tz)
            events.append(
                PlacesCandidate(
                    external_id=f"google_{place_id}_{i}",
                    title=f"{rng.choice(titles)} at {place['name']}",
                    description=(
                        f"Join us for an amazing {category} experience at {place['name']}. "
                        f"Located in the heart of {request.city or 'the city'}."
                    ),
                    start=start,
                    city=request.city,
                    region=request.region,
                    country=request.country,
                    latitude=location.get("lat"),
                    longitude=location.get("lng"),
                    website_url=maps_url,
                    place_id=place_id,
                    sequence=i,
                    venue_name=place["name"],
                    venue_type=kind,
                    venue_address=place.get("vicinity") or place.get("formatted_address"),
                    rating=place.get("rating"),
                    price=f"{currency}{low}-{high}",
                    category=category,
                )
            )
        return events
