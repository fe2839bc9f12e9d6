"""Command line interface.

Usage:
    python -m lovesync_events.cli [command] [options]

Commands:
    fetch       Fetch events around a point
    batch       Refresh targeted cities
    master      Run the master scraper
    generate    Generate AI events for a city
    cleanup     Delete expired events
    regions     List target regions
    serve       Start the HTTP API
"""

from lovesync_events.cli.main import app

__all__ = ["app"]
