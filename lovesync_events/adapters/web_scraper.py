"""Web scrape adapter: listing pages rendered to Markdown by Firecrawl."""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lovesync_events.adapters import register_adapter
from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.adapters.listing_parser import extract_listings
from lovesync_events.adapters.templates import GENERIC_TEMPLATES, render_templates
from lovesync_events.config.regions import find_city
from lovesync_events.core.event_model import Provenance, WebScrapeCandidate
from lovesync_events.core.exceptions import FetchError
from lovesync_events.core.firecrawl_client import FirecrawlClient
from lovesync_events.utils.text import is_blacklisted

# organizer -> city listing page
LISTING_PAGES: dict[str, str] = {
    "Eventbrite": "https://www.eventbrite.com/d/{city}/events/",
    "AllEvents": "https://allevents.in/{city}/all",
}


def _city_timezone(city_name: str | None) -> ZoneInfo:
    city = find_city(city_name)
    try:
        return ZoneInfo(city.timezone) if city else ZoneInfo("UTC")
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


@register_adapter("firecrawl")
class WebScraperAdapter(BaseAdapter):
    """Renders configured listing pages and extracts event lines."""

    source_id = "firecrawl"
    source_name = "Web listings (Firecrawl)"

    def make_client(self) -> FirecrawlClient:
        return FirecrawlClient(
            base_url=self.settings.firecrawl_url,
            api_key=self.settings.firecrawl_api_key,
            transport=self._transport,
        )

    async def fetch_events(self, request: FetchRequest) -> list[WebScrapeCandidate]:
        if not request.city:
            raise FetchError("City is required for web scraping", source=self.source_id)

        tz = _city_timezone(request.city)
        today = datetime.now(tz).date()
        slug = request.city.strip().lower().replace(" ", "-")
        candidates: list[WebScrapeCandidate] = []

        client = self.make_client()
        try:
            for organizer, pattern in LISTING_PAGES.items():
                url = pattern.format(city=slug)
                self.api_calls += 1
                page = await client.scrape(url, timeout=self.settings.scraper_request_timeout * 1000)
                if not page.success or not page.markdown:
                    self.logger.warning("page_unavailable", url=url, error=page.error)
                    continue
                if page.title and is_blacklisted(page.title):
                    self.logger.warning("placeholder_page", url=url, title=page.title)
                    continue

                for listing in extract_listings(page.markdown, today, tz):
                    candidates.append(
                        WebScrapeCandidate(
                            title=listing.title,
                            start=listing.start,
                            city=request.city,
                            region=request.region,
                            country=request.country,
                            website_url=url,
                            page_url=url,
                            price=listing.price,
                            organizer=organizer,
                        )
                    )
        finally:
            await client.close()

        if candidates:
            return candidates

        self.logger.info("using_template_fallback", source=self.source_id, city=request.city)
        return [
            WebScrapeCandidate(
                title=event.title,
                description=event.description,
                start=event.start,
                city=request.city,
                region=request.region,
                country=request.country,
                venue_name=event.venue_name,
                price=event.price,
                organizer=event.organizer,
                category=event.category,
                provenance=Provenance.TEMPLATE_FALLBACK,
            )
            for event in render_templates(GENERIC_TEMPLATES, request.city, today, tz)
        ]
