"""Date extraction from free-form listing text."""

import re
from datetime import date, datetime, time, timedelta, tzinfo

from dateutil import parser as dateutil_parser

MONTHS = (
    "january|february|march|april|may|june|july|august|september|october|november|december"
    "|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec"
)

DATE_PATTERNS = [
    # "2025-03-15"
    r"\b\d{4}[/\-]\d{1,2}[/\-]\d{1,2}\b",
    # "15/03/2025" (day first, as listed on Indian and European sites)
    r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b",
    # "March 15, 2025" / "Mar 15"
    rf"\b(?:{MONTHS})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s*\d{{4}})?\b",
    # "15th March 2025" / "15 Mar"
    rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+(?:{MONTHS})\.?(?:,?\s*\d{{4}})?\b",
]

RELATIVE_PATTERNS = {
    "today": 0,
    "tonight": 0,
    "tomorrow": 1,
    "next week": 7,
}

TIME_PATTERN = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b|\b([01]?\d|2[0-3]):([0-5]\d)\b", re.IGNORECASE)


def parse_time(text: str) -> time | None:
    """First clock time in the text ("7:30 PM", "19:30", "8pm")."""
    match = TIME_PATTERN.search(text)
    if not match:
        return None
    if match.group(3):
        hour = int(match.group(1)) % 12
        minute = int(match.group(2) or 0)
        if match.group(3).lower() == "pm":
            hour += 12
    else:
        hour = int(match.group(4))
        minute = int(match.group(5))
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return time(hour, minute)
    return None


def parse_date(text: str, today: date) -> date | None:
    """First date mentioned in the text.

    Dates without a year, or that already passed this year, roll forward to
    the next occurrence.
    """
    lowered = text.lower()
    for phrase, offset in RELATIVE_PATTERNS.items():
        if re.search(rf"\b{phrase}\b", lowered):
            return today + timedelta(days=offset)
    if re.search(r"\bthis weekend\b", lowered):
        return today + timedelta(days=(5 - today.weekday()) % 7)

    default = datetime.combine(today, time.min)
    # "14 Mar 8 PM" must read as the 14th, not "Mar 8": earliest match wins
    matches = [re.search(pattern, text, re.IGNORECASE) for pattern in DATE_PATTERNS]
    for match in sorted(filter(None, matches), key=lambda m: (m.start(), -len(m.group(0)))):
        raw = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", match.group(0), flags=re.IGNORECASE)
        day_first = bool(re.match(r"^\d{1,2}[/\-]", raw))
        try:
            parsed = dateutil_parser.parse(raw, default=default, dayfirst=day_first).date()
        except (ValueError, OverflowError):
            continue
        if parsed < today and not re.search(r"\d{4}", raw):
            parsed = parsed.replace(year=parsed.year + 1)
        return parsed
    return None


def parse_datetime(
    text: str,
    today: date,
    tz: tzinfo,
    default_time: time = time(19, 0),
) -> datetime | None:
    """Date plus time found in the text, localized to `tz`."""
    found = parse_date(text, today)
    if found is None:
        return None
    return datetime.combine(found, parse_time(text) or default_time, tzinfo=tz)
