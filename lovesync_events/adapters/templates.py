"""Fallback event templates for scrape adapters.

When a listing page yields nothing usable, scrape adapters emit these instead
and tag them `template_fallback` so consumers can tell them from live data.
"""

import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo


@dataclass(frozen=True)
class EventTemplate:
    title: str
    description: str
    category: str
    price: str
    organizer: str


@dataclass(frozen=True)
class TemplateEvent:
    """A template placed in a city on a concrete day."""

    title: str
    description: str
    category: str
    price: str
    organizer: str
    venue_name: str
    start: datetime


INDIA_TEMPLATES = [
    EventTemplate(
        "Bollywood Night Live Concert",
        "Experience the magic of Bollywood with live performances from top artists",
        "music", "₹500 - ₹2000", "Music Events India",
    ),
    EventTemplate(
        "Stand-up Comedy Show",
        "Hilarious stand-up comedy featuring local and national comedians",
        "comedy", "₹300 - ₹800", "Comedy Central India",
    ),
    EventTemplate(
        "Food Festival - Taste of India",
        "Explore diverse Indian cuisines from different regions",
        "food", "₹200 - ₹500", "Food Festivals India",
    ),
    EventTemplate(
        "Art Exhibition - Contemporary Indian Art",
        "Showcase of contemporary Indian artists and their work",
        "art", "₹100 - ₹300", "Art Gallery India",
    ),
    EventTemplate(
        "Tech Conference - Future of AI in India",
        "Leading tech experts discuss AI trends and innovations",
        "learning", "₹1000 - ₹5000", "Tech Events India",
    ),
    EventTemplate(
        "Weekend Yoga Retreat",
        "Rejuvenate your mind and body with a peaceful yoga session",
        "outdoor", "₹800 - ₹1500", "Wellness India",
    ),
    EventTemplate(
        "Photography Workshop",
        "Learn professional photography techniques from experts",
        "learning", "₹1200 - ₹2500", "Photo Academy India",
    ),
    EventTemplate(
        "Cultural Dance Performance",
        "Traditional Indian dance forms by renowned performers",
        "entertainment", "₹400 - ₹1000", "Cultural Society India",
    ),
]

GENERIC_TEMPLATES = [
    EventTemplate(
        "Live Music Night",
        "Local bands and singer-songwriters play an evening set",
        "music", "Check website", "Local Venues",
    ),
    EventTemplate(
        "Comedy Night",
        "An evening of stand-up from touring and local comedians",
        "entertainment", "Check website", "Local Venues",
    ),
    EventTemplate(
        "Weekend Farmers Market",
        "Fresh produce, street food and local makers",
        "food", "Free", "City Markets",
    ),
    EventTemplate(
        "Gallery Walk",
        "Guided walk through the city's independent galleries",
        "art", "Free", "Arts Council",
    ),
    EventTemplate(
        "Community Fun Run",
        "A relaxed 5k around the park, all paces welcome",
        "sports", "Free", "Parkrun Volunteers",
    ),
    EventTemplate(
        "Wine and Paint Workshop",
        "Paint a canvas step by step with a glass in hand",
        "learning", "Check website", "Creative Studio",
    ),
]

VENUE_PATTERNS = [
    "{city} Convention Center",
    "Phoenix Mall {city}",
    "Cultural Center {city}",
    "Hotel Grand {city}",
    "{city} Auditorium",
    "Park Plaza {city}",
    "Entertainment Hub {city}",
]


def render_templates(
    templates: list[EventTemplate],
    city: str,
    today: date,
    tz: tzinfo,
    days_ahead: int = 30,
) -> list[TemplateEvent]:
    """Place every template in `city` on a day within `days_ahead`.

    Placement is seeded by city and day, so a rerun on the same day yields the
    same events.
    """
    rng = random.Random(f"{city.lower()}|{today.isoformat()}")
    events = []
    for template in templates:
        day = today + timedelta(days=rng.randint(1, days_ahead))
        clock = time(rng.randint(10, 20), rng.choice([0, 30]))
        events.append(
            TemplateEvent(
                title=f"{template.title} - {city}",
                description=template.description,
                category=template.category,
                price=template.price,
                organizer=template.organizer,
                venue_name=rng.choice(VENUE_PATTERNS).format(city=city),
                start=datetime.combine(day, clock, tzinfo=tz),
            )
        )
    return events
