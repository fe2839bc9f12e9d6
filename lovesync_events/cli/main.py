"""Command line interface for the event aggregator.

Usage:
    lovesync-events fetch --lat 19.076 --lng 72.8777 --city Mumbai
    lovesync-events batch --city Mumbai --city Delhi --force
    lovesync-events master --mode batch
    lovesync-events master --country IN --city Mumbai
    lovesync-events generate Pune --count 10
    lovesync-events cleanup
    lovesync-events regions
    lovesync-events serve --port 8000
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lovesync_events import __version__
from lovesync_events.config import get_settings
from lovesync_events.config.regions import TARGET_REGIONS, sources_for_country
from lovesync_events.core.exceptions import EventHubError
from lovesync_events.core.orchestrator import (
    AggregationOrchestrator,
    BatchResult,
    LocationRequest,
    LocationResult,
    OrchestratorConfig,
)
from lovesync_events.logging import setup_logging

app = typer.Typer(
    name="lovesync-events",
    help="Multi-source local event aggregation",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Set up logging before any command runs."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format, settings.log_file)


def build_orchestrator(dry_run: bool = False) -> AggregationOrchestrator:
    config = OrchestratorConfig.from_settings()
    config.dry_run = config.dry_run or dry_run
    return AggregationOrchestrator(config)


def run_or_exit(coro):
    """Run a coroutine; known errors end the command with status 1."""
    try:
        return asyncio.run(coro)
    except EventHubError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def print_location(result: LocationResult) -> None:
    status = "[green]OK[/green]" if result.success else f"[red]ERROR[/red]: {result.error}"
    console.print(f"{status} - source: {result.source}, new events: {result.new_events_fetched}")
    if result.radius_km is not None:
        console.print(f"  Radius: {result.radius_km:g} km")
    if result.generation_batch_id:
        console.print(f"  Batch: {result.generation_batch_id}")

    if not result.events:
        console.print("[yellow]No events[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Title")
    table.add_column("Start")
    table.add_column("City")
    table.add_column("Source")
    table.add_column("Price")
    for event in result.events[:25]:
        table.add_row(
            str(event.get("title", ""))[:50],
            str(event.get("start_date", ""))[:16],
            str(event.get("city_name") or ""),
            str(event.get("source", "")),
            str(event.get("price") or ""),
        )
    console.print(table)
    if len(result.events) > 25:
        console.print(f"  ... and {len(result.events) - 25} more")


def print_batch(batch: BatchResult) -> None:
    """Print the per-region summary table."""
    console.print()
    table = Table(show_header=True, header_style="bold")
    table.add_column("Region")
    table.add_column("Found", justify="right")
    table.add_column("Inserted", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Invalid", justify="right")
    table.add_column("Status")

    for r in batch.results:
        if r.skipped:
            status = "[yellow]LOCKED[/yellow]" if r.locked else "[yellow]NOT DUE[/yellow]"
        elif r.success:
            status = "[green]OK[/green]"
        else:
            status = "[red]ERR[/red]"
        table.add_row(
            r.key.cache_key,
            str(r.events_found),
            str(r.events_inserted),
            str(r.duplicates),
            str(r.invalid),
            status,
        )

    console.print(table)
    console.print()
    console.print(
        f"[bold]TOTALS:[/bold] Inserted: {batch.total_events}, "
        f"Processed: {batch.cities_processed}, Failed: {batch.cities_failed}"
    )


@app.command()
def fetch(
    latitude: float = typer.Option(..., "--lat", help="Latitude of the search center"),
    longitude: float = typer.Option(..., "--lng", help="Longitude of the search center"),
    radius: float = typer.Option(25.0, "--radius", "-r", help="Search radius in km"),
    city: Optional[str] = typer.Option(None, "--city", "-c", help="City name"),
    country: Optional[str] = typer.Option(None, "--country", help="ISO country code"),
    source: Optional[list[str]] = typer.Option(None, "--source", "-s", help="Source (repeatable)"),
    force: bool = typer.Option(False, "--force", help="Ignore the region schedule"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to the database"),
):
    """Fetch events around a point and list what is nearby."""
    orchestrator = build_orchestrator(dry_run)
    result = run_or_exit(
        orchestrator.run_location(
            LocationRequest(
                latitude=latitude,
                longitude=longitude,
                radius_km=radius,
                city=city,
                country=country,
                sources=source or None,
                force=force,
            )
        )
    )
    print_location(result)


@app.command()
def batch(
    city: Optional[list[str]] = typer.Option(None, "--city", "-c", help="City (repeatable); defaults to targets"),
    force: bool = typer.Option(False, "--force", help="Scrape even cities with recent events"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to the database"),
):
    """Refresh the targeted cities."""
    orchestrator = build_orchestrator(dry_run)
    console.print("[bold blue]TARGETED CITIES[/bold blue]")
    result = run_or_exit(orchestrator.run_targeted_cities(city or None, force))
    print_batch(result)


@app.command()
def master(
    mode: str = typer.Option("single", "--mode", "-m", help="single or batch"),
    country: Optional[str] = typer.Option(None, "--country", help="ISO country code (single mode)"),
    region: Optional[str] = typer.Option(None, "--region", help="Region or state"),
    city: Optional[str] = typer.Option(None, "--city", "-c", help="City name"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to the database"),
):
    """Run one region, or walk every target region."""
    if mode not in ("single", "batch"):
        raise typer.BadParameter("mode must be 'single' or 'batch'")
    orchestrator = build_orchestrator(dry_run)
    console.print(f"[bold blue]MASTER ({mode.upper()})[/bold blue]")
    result = run_or_exit(orchestrator.run_master(country, region, city, mode))
    print_batch(result)


@app.command()
def generate(
    city: str = typer.Argument(..., help="City to generate events for"),
    country: Optional[str] = typer.Option(None, "--country", help="ISO country code"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Events per batch"),
    force: bool = typer.Option(False, "--force", help="Generate even if the city has fresh events"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to the database"),
):
    """Generate AI events for a city."""
    orchestrator = build_orchestrator(dry_run)
    result = run_or_exit(orchestrator.generate_ai_events(city, country=country, count=count, force_refresh=force))
    print_location(result)


@app.command()
def cleanup():
    """Delete expired events."""
    deleted = run_or_exit(build_orchestrator().cleanup_expired())
    console.print(f"[green]OK[/green] - Deleted {deleted} expired events")


@app.command()
def regions():
    """List the target regions, their cities and adapter rotation."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Code")
    table.add_column("Country")
    table.add_column("Cities")
    table.add_column("Sources")
    for code, target in TARGET_REGIONS.items():
        table.add_row(code, target.name, ", ".join(target.cities), ", ".join(sources_for_country(code)))
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host"),
    port: int = typer.Option(8000, "--port", "-p"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Start the HTTP API."""
    import uvicorn

    console.print(f"[bold]LoveSync Events API[/bold] {__version__} on {host}:{port}")
    uvicorn.run("lovesync_events.api.main:app", host=host, port=port, reload=reload)


@app.command()
def version():
    """Show version information."""
    console.print("[bold]LoveSync Events[/bold]")
    console.print(f"Version: {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
