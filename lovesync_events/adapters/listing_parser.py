"""Turn a cleaned listing page into event-shaped lines."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from lovesync_events.utils.date_parser import parse_datetime
from lovesync_events.utils.text import (
    extract_price,
    is_valid_title,
    looks_like_event,
    normalize_whitespace,
    split_candidate_lines,
    strip_currency,
)

# Lines after a title searched for its date ("Sat, 15 Mar | 7 PM")
DATE_LOOKAHEAD = 2
MAX_LISTINGS_PER_PAGE = 20


@dataclass(frozen=True)
class Listing:
    title: str
    start: datetime
    price: str | None = None


def clean_title(line: str) -> str:
    title = normalize_whitespace(strip_currency(line), preserve_newlines=False)
    return title.strip(" -|:·•,")


def extract_listings(
    raw: str,
    today: date,
    tz: tzinfo,
    *,
    is_html: bool = False,
    limit: int = MAX_LISTINGS_PER_PAGE,
) -> list[Listing]:
    """Pick listing lines that read like events and carry a date nearby.

    Lines without an upcoming date within the lookahead window are dropped.
    """
    lines = split_candidate_lines(raw, is_html=is_html)
    listings: list[Listing] = []
    seen: set[str] = set()

    for i, line in enumerate(lines):
        title = clean_title(line)
        if not is_valid_title(title) or not looks_like_event(title):
            continue
        if title.lower() in seen:
            continue

        context = " ".join(lines[i : i + 1 + DATE_LOOKAHEAD])
        start = parse_datetime(context, today, tz)
        if start is None or start.date() < today:
            continue

        seen.add(title.lower())
        listings.append(Listing(title=title, start=start, price=extract_price(context)))
        if len(listings) >= limit:
            break

    return listings
