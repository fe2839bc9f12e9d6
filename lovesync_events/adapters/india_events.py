"""Country scrape adapter for Indian listing sites (BookMyShow, Insider)."""

from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from lovesync_events.adapters import register_adapter
from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.adapters.listing_parser import extract_listings
from lovesync_events.adapters.templates import INDIA_TEMPLATES, render_templates
from lovesync_events.core.event_model import CountryScrapeCandidate, Provenance
from lovesync_events.core.exceptions import FetchError

INDIA_TZ = ZoneInfo("Asia/Kolkata")

# site -> city page pattern
LISTING_SITES: dict[str, str] = {
    "BookMyShow": "https://in.bookmyshow.com/{city}/events",
    "Insider": "https://insider.in/{city}",
}


@register_adapter("india-events")
class IndiaEventsAdapter(BaseAdapter):
    """Scrapes city listing pages; falls back to templates when nothing parses."""

    source_id = "india-events"
    source_name = "India listing sites"
    request_delay = 1.0

    async def fetch_events(self, request: FetchRequest) -> list[CountryScrapeCandidate]:
        if not request.city:
            raise FetchError("City is required for country scraping", source=self.source_id)

        today = datetime.now(INDIA_TZ).date()
        slug = request.city.strip().lower().replace(" ", "-")
        candidates: list[CountryScrapeCandidate] = []

        for site, pattern in LISTING_SITES.items():
            url = pattern.format(city=slug)
            try:
                html = await self.fetch_text(url)
            except (FetchError, httpx.HTTPError) as e:
                self.logger.warning("site_unavailable", site=site, url=url, error=str(e))
                continue

            listings = extract_listings(html, today, INDIA_TZ, is_html=True)
            self.logger.debug("site_parsed", site=site, url=url, listings=len(listings))
            for listing in listings:
                candidates.append(
                    CountryScrapeCandidate(
                        title=listing.title,
                        start=listing.start,
                        city=request.city,
                        region=request.region,
                        country="IN",
                        website_url=url,
                        site=site,
                        price=listing.price,
                    )
                )

        if candidates:
            return candidates

        self.logger.info("using_template_fallback", source=self.source_id, city=request.city)
        return [
            CountryScrapeCandidate(
                title=event.title,
                description=event.description,
                start=event.start,
                city=request.city,
                region=request.region,
                country="IN",
                site=event.organizer,
                venue_name=event.venue_name,
                price=event.price,
                category=event.category,
                provenance=Provenance.TEMPLATE_FALLBACK,
            )
            for event in render_templates(INDIA_TEMPLATES, request.city, today, INDIA_TZ)
        ]
