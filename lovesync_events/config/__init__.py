"""Configuration: environment settings and static region tables."""

from lovesync_events.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
