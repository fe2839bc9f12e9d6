"""Static region tables: target countries, city centers and timezones.

These tables feed the orchestrator config; nothing here is mutated at runtime.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TargetCity:
    """A city the aggregator knows how to locate."""

    name: str
    country: str  # ISO 3166-1 alpha-2
    latitude: float
    longitude: float
    timezone: str = "UTC"


@dataclass(frozen=True)
class CountryRegion:
    """A country in the master batch rotation."""

    code: str
    name: str
    currency: str
    cities: list[str] = field(default_factory=list)


# ============================================================
# CITY CATALOG
# ============================================================

_CITIES: list[TargetCity] = [
    # India
    TargetCity("Mumbai", "IN", 19.0760, 72.8777, "Asia/Kolkata"),
    TargetCity("Delhi", "IN", 28.6139, 77.2090, "Asia/Kolkata"),
    TargetCity("Bangalore", "IN", 12.9716, 77.5946, "Asia/Kolkata"),
    TargetCity("Chennai", "IN", 13.0827, 80.2707, "Asia/Kolkata"),
    TargetCity("Kolkata", "IN", 22.5726, 88.3639, "Asia/Kolkata"),
    TargetCity("Hyderabad", "IN", 17.3850, 78.4867, "Asia/Kolkata"),
    TargetCity("Pune", "IN", 18.5204, 73.8567, "Asia/Kolkata"),
    # United States
    TargetCity("New York", "US", 40.7128, -74.0060, "America/New_York"),
    TargetCity("Los Angeles", "US", 34.0522, -118.2437, "America/Los_Angeles"),
    TargetCity("Chicago", "US", 41.8781, -87.6298, "America/Chicago"),
    TargetCity("Houston", "US", 29.7604, -95.3698, "America/Chicago"),
    TargetCity("Phoenix", "US", 33.4484, -112.0740, "America/Phoenix"),
    TargetCity("Philadelphia", "US", 39.9526, -75.1652, "America/New_York"),
    TargetCity("San Antonio", "US", 29.4241, -98.4936, "America/Chicago"),
    TargetCity("Dallas", "US", 32.7767, -96.7970, "America/Chicago"),
    TargetCity("Miami", "US", 25.7617, -80.1918, "America/New_York"),
    TargetCity("San Francisco", "US", 37.7749, -122.4194, "America/Los_Angeles"),
    TargetCity("Boston", "US", 42.3601, -71.0589, "America/New_York"),
    TargetCity("Seattle", "US", 47.6062, -122.3321, "America/Los_Angeles"),
    # United Kingdom
    TargetCity("London", "GB", 51.5074, -0.1278, "Europe/London"),
    TargetCity("Birmingham", "GB", 52.4862, -1.8904, "Europe/London"),
    TargetCity("Manchester", "GB", 53.4808, -2.2426, "Europe/London"),
    TargetCity("Glasgow", "GB", 55.8642, -4.2518, "Europe/London"),
    TargetCity("Leeds", "GB", 53.8008, -1.5491, "Europe/London"),
    TargetCity("Liverpool", "GB", 53.4084, -2.9916, "Europe/London"),
    TargetCity("Edinburgh", "GB", 55.9533, -3.1883, "Europe/London"),
    TargetCity("Bristol", "GB", 51.4545, -2.5879, "Europe/London"),
    # Australia
    TargetCity("Sydney", "AU", -33.8688, 151.2093, "Australia/Sydney"),
    TargetCity("Melbourne", "AU", -37.8136, 144.9631, "Australia/Melbourne"),
    TargetCity("Brisbane", "AU", -27.4698, 153.0251, "Australia/Brisbane"),
    TargetCity("Perth", "AU", -31.9505, 115.8605, "Australia/Perth"),
    TargetCity("Adelaide", "AU", -34.9285, 138.6007, "Australia/Adelaide"),
    # Europe
    TargetCity("Paris", "FR", 48.8566, 2.3522, "Europe/Paris"),
    TargetCity("Lyon", "FR", 45.7640, 4.8357, "Europe/Paris"),
    TargetCity("Marseille", "FR", 43.2965, 5.3698, "Europe/Paris"),
    TargetCity("Berlin", "DE", 52.5200, 13.4050, "Europe/Berlin"),
    TargetCity("Munich", "DE", 48.1351, 11.5820, "Europe/Berlin"),
    TargetCity("Hamburg", "DE", 53.5511, 9.9937, "Europe/Berlin"),
    TargetCity("Madrid", "ES", 40.4168, -3.7038, "Europe/Madrid"),
    TargetCity("Barcelona", "ES", 41.3874, 2.1686, "Europe/Madrid"),
    TargetCity("Valencia", "ES", 39.4699, -0.3763, "Europe/Madrid"),
    TargetCity("Rome", "IT", 41.9028, 12.4964, "Europe/Rome"),
    TargetCity("Milan", "IT", 45.4642, 9.1900, "Europe/Rome"),
    TargetCity("Naples", "IT", 40.8518, 14.2681, "Europe/Rome"),
    TargetCity("Amsterdam", "NL", 52.3676, 4.9041, "Europe/Amsterdam"),
    TargetCity("Rotterdam", "NL", 51.9244, 4.4777, "Europe/Amsterdam"),
    # Canada
    TargetCity("Toronto", "CA", 43.6532, -79.3832, "America/Toronto"),
    TargetCity("Vancouver", "CA", 49.2827, -123.1207, "America/Vancouver"),
    TargetCity("Montreal", "CA", 45.5017, -73.5673, "America/Toronto"),
    TargetCity("Calgary", "CA", 51.0447, -114.0719, "America/Edmonton"),
    TargetCity("Ottawa", "CA", 45.4215, -75.6972, "America/Toronto"),
    TargetCity("Edmonton", "CA", 53.5461, -113.4938, "America/Edmonton"),
]

CITY_CATALOG: dict[str, TargetCity] = {city.name.lower(): city for city in _CITIES}

# Cities walked by the targeted-cities batch when the request names none
DEFAULT_TARGET_CITIES: list[str] = [
    "New York", "Los Angeles", "Chicago", "Houston", "Miami", "San Francisco",
    "Boston", "Seattle", "London", "Manchester", "Birmingham", "Edinburgh",
    "Glasgow", "Bristol", "Mumbai", "Delhi", "Bangalore", "Hyderabad",
    "Chennai", "Kolkata", "Pune", "Toronto", "Vancouver", "Montreal",
    "Calgary", "Ottawa", "Edmonton",
]


# ============================================================
# MASTER BATCH ROTATION
# ============================================================

TARGET_REGIONS: dict[str, CountryRegion] = {
    "IN": CountryRegion(
        "IN", "India", "₹",
        ["Mumbai", "Delhi", "Bangalore", "Chennai", "Kolkata", "Hyderabad", "Pune"],
    ),
    "US": CountryRegion(
        "US", "United States", "$",
        ["New York", "Los Angeles", "Chicago", "Houston", "Phoenix",
         "Philadelphia", "San Antonio", "Dallas"],
    ),
    "GB": CountryRegion(
        "GB", "United Kingdom", "£",
        ["London", "Birmingham", "Manchester", "Glasgow", "Leeds", "Liverpool"],
    ),
    "AU": CountryRegion("AU", "Australia", "$", ["Sydney", "Melbourne", "Brisbane", "Perth", "Adelaide"]),
    "FR": CountryRegion("FR", "France", "€", ["Paris", "Lyon", "Marseille"]),
    "DE": CountryRegion("DE", "Germany", "€", ["Berlin", "Munich", "Hamburg"]),
    "ES": CountryRegion("ES", "Spain", "€", ["Madrid", "Barcelona", "Valencia"]),
    "IT": CountryRegion("IT", "Italy", "€", ["Rome", "Milan", "Naples"]),
    "NL": CountryRegion("NL", "Netherlands", "€", ["Amsterdam", "Rotterdam"]),
}

# Adapter rotation per country; India has a dedicated local scraper
COUNTRY_SOURCES: dict[str, list[str]] = {
    "IN": ["india-events", "ticketmaster", "googleplaces"],
}
DEFAULT_SOURCES: list[str] = ["ticketmaster", "googleplaces", "firecrawl"]


def find_city(name: str | None) -> TargetCity | None:
    """Look up a city by name (case-insensitive)."""
    if not name:
        return None
    return CITY_CATALOG.get(name.strip().lower())


def sources_for_country(country: str) -> list[str]:
    """Get the ordered adapter list for a country code."""
    return list(COUNTRY_SOURCES.get(country.upper(), DEFAULT_SOURCES))


def currency_for_country(country: str | None) -> str:
    """Currency symbol used in synthesized price strings."""
    if country and country.upper() in TARGET_REGIONS:
        return TARGET_REGIONS[country.upper()].currency
    return "$"
