"""Adapters for the event providers (one per source)."""

from typing import TYPE_CHECKING, Callable

from lovesync_events.core.exceptions import AdapterNotFoundError

if TYPE_CHECKING:
    from lovesync_events.adapters.base import BaseAdapter

# Registry of all available adapters
ADAPTER_REGISTRY: dict[str, type["BaseAdapter"]] = {}

# Request-facing names accepted in `sources[]`
SOURCE_ALIASES: dict[str, str] = {
    "ticketing": "ticketmaster",
    "places": "googleplaces",
    "google": "googleplaces",
    "google_places": "googleplaces",
    "scraping": "firecrawl",
    "web": "firecrawl",
    "india": "india-events",
    "local": "india-events",
    "ai": "ai_generated",
    "ai-generator": "ai_generated",
}

_adapters_loaded = False


def register_adapter(source_id: str) -> Callable[[type["BaseAdapter"]], type["BaseAdapter"]]:
    """Decorator to register an adapter in the registry.

    Usage:
        @register_adapter("ticketmaster")
        class TicketmasterAdapter(BaseAdapter):
            ...
    """

    def decorator(adapter_class: type["BaseAdapter"]) -> type["BaseAdapter"]:
        ADAPTER_REGISTRY[source_id] = adapter_class
        return adapter_class

    return decorator


def resolve_source(name: str) -> str:
    """Map a request alias or id to a registered source id.

    Raises:
        AdapterNotFoundError: unknown name
    """
    _ensure_adapters_loaded()
    key = name.strip().lower()
    source_id = SOURCE_ALIASES.get(key, key)
    if source_id not in ADAPTER_REGISTRY:
        raise AdapterNotFoundError(name, available=list_adapters())
    return source_id


def get_adapter(source_id: str) -> type["BaseAdapter"] | None:
    """Get an adapter class by its source_id."""
    _ensure_adapters_loaded()
    return ADAPTER_REGISTRY.get(source_id)


def create_adapter(source_id: str) -> "BaseAdapter | None":
    """Instantiate the adapter registered for a source id."""
    adapter_class = get_adapter(source_id)
    return adapter_class() if adapter_class else None


def list_adapters() -> list[str]:
    """List all registered adapter source_ids."""
    _ensure_adapters_loaded()
    return list(ADAPTER_REGISTRY.keys())


def _ensure_adapters_loaded() -> None:
    """Import adapter modules so their decorators run."""
    global _adapters_loaded
    if _adapters_loaded:
        return
    _adapters_loaded = True

    from lovesync_events.adapters import ticketmaster  # noqa: F401
    from lovesync_events.adapters import google_places  # noqa: F401
    from lovesync_events.adapters import india_events  # noqa: F401
    from lovesync_events.adapters import web_scraper  # noqa: F401
    from lovesync_events.adapters import ai_generator  # noqa: F401
