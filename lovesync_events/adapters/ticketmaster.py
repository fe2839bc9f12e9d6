"""Ticketmaster Discovery API adapter."""

import asyncio
from datetime import datetime, time, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dateutil_parser

from lovesync_events.adapters import register_adapter
from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.config.regions import find_city
from lovesync_events.core.event_model import TicketingCandidate

API_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
PAGE_SIZE = 200
MAX_PAGES = 5
PAGE_DELAY_SECONDS = 0.2
MIN_IMAGE_WIDTH = 400


@register_adapter("ticketmaster")
class TicketmasterAdapter(BaseAdapter):
    """Listings from the Ticketmaster Discovery API, paged by date."""

    source_id = "ticketmaster"
    source_name = "Ticketmaster"
    api_key_env = "TICKETMASTER_API_KEY"

    @property
    def api_key(self) -> str | None:
        return self.settings.ticketmaster_api_key

    def _params(self, request: FetchRequest, page: int) -> dict[str, Any]:
        today = datetime.now(timezone.utc).date().isoformat()
        params: dict[str, Any] = {
            "apikey": self.api_key,
            "page": page,
            "size": PAGE_SIZE,
            "sort": "date,asc",
            "startDateTime": f"{today}T00:00:00Z",
        }
        if request.country:
            params["countryCode"] = request.country.upper()
        if request.city:
            params["city"] = request.city
        elif request.has_coordinates:
            params["latlong"] = f"{request.latitude},{request.longitude}"
            params["radius"] = int(request.radius_km)
            params["unit"] = "km"
        return params

    async def fetch_events(self, request: FetchRequest) -> list[TicketingCandidate]:
        candidates: list[TicketingCandidate] = []

        for page in range(MAX_PAGES):
            if page:
                await asyncio.sleep(PAGE_DELAY_SECONDS)
            data = await self.fetch_json(API_URL, params=self._params(request, page))
            items = (data.get("_embedded") or {}).get("events") or []
            if not items:
                break

            for item in items:
                candidate = self.parse_event(item, request)
                if candidate:
                    candidates.append(candidate)

            total_pages = (data.get("page") or {}).get("totalPages") or 0
            if page + 1 >= total_pages:
                break

        self.logger.info("fetched_events", source=self.source_id, city=request.city, count=len(candidates))
        return candidates

    def parse_event(self, item: dict[str, Any], request: FetchRequest) -> TicketingCandidate | None:
        """Map one Discovery API event; None when it has no name or start."""
        dates = item.get("dates") or {}
        venue = ((item.get("_embedded") or {}).get("venues") or [{}])[0]
        tz = _zone(dates.get("timezone") or venue.get("timezone"), request.city)
        start = self._parse_start(dates, tz)
        if not item.get("name") or start is None:
            return None

        location = venue.get("location") or {}
        price_range = (item.get("priceRanges") or [{}])[0]
        classification = (item.get("classifications") or [{}])[0]
        image = next(
            (img for img in item.get("images") or [] if (img.get("width") or 0) >= MIN_IMAGE_WIDTH),
            None,
        )

        return TicketingCandidate(
            external_id=item.get("id"),
            title=item["name"],
            description=item.get("description") or item.get("info"),
            start=start,
            city=(venue.get("city") or {}).get("name") or request.city,
            region=(venue.get("state") or {}).get("name") or request.region,
            country=request.country,
            latitude=_to_float(location.get("latitude")),
            longitude=_to_float(location.get("longitude")),
            image_url=image.get("url") if image else None,
            website_url=item.get("url"),
            venue_name=venue.get("name"),
            venue_address=(venue.get("address") or {}).get("line1"),
            segment=(classification.get("segment") or {}).get("name"),
            promoter=(item.get("promoter") or {}).get("name"),
            price_min=price_range.get("min"),
            price_max=price_range.get("max"),
            currency=price_range.get("currency"),
        )

    @staticmethod
    def _parse_start(dates: dict[str, Any], tz: tzinfo = timezone.utc) -> datetime | None:
        """Exact instant when given, else the local date and time at the venue."""
        start = dates.get("start") or {}
        if start.get("dateTime"):
            return dateutil_parser.isoparse(start["dateTime"])
        if not start.get("localDate"):
            return None
        day = dateutil_parser.isoparse(start["localDate"]).date()
        clock = time.fromisoformat(start["localTime"]) if start.get("localTime") else time(19, 0)
        return datetime.combine(day, clock, tzinfo=tz)


def _zone(name: str | None, city: str | None) -> tzinfo:
    """Venue time zone, else the requested city's, else UTC."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    known = find_city(city)
    return ZoneInfo(known.timezone) if known else timezone.utc


def _to_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None
