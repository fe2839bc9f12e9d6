"""Batch routes: targeted cities and the master scraper."""

from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from lovesync_events.api.dependencies import get_orchestrator
from lovesync_events.core.orchestrator import AggregationOrchestrator, BatchResult
from lovesync_events.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class TargetedCitiesRequest(BaseModel):
    """Request to refresh a list of cities."""

    model_config = ConfigDict(populate_by_name=True)

    cities: list[str] | None = Field(None, description="City names; defaults to the target list")
    force_refresh: bool = Field(False, alias="forceRefresh")


class MasterRequest(BaseModel):
    """Request to run the master scraper."""

    country: str | None = Field(None, min_length=2, max_length=2)
    region: str | None = None
    city: str | None = None
    mode: Literal["single", "batch"] = "single"


def batch_response(batch: BatchResult) -> dict[str, Any]:
    return {
        "success": batch.success,
        "totalEvents": batch.total_events,
        "citiesProcessed": batch.cities_processed,
        "citiesFailed": batch.cities_failed,
        "events": batch.events_preview,
        "regions": [
            {
                "key": result.key.cache_key,
                "state": result.state.value,
                "skipped": result.skipped,
                "eventsFound": result.events_found,
                "eventsInserted": result.events_inserted,
                "duplicates": result.duplicates,
                "error": result.error,
            }
            for result in batch.results
        ],
    }


@router.post("/scrape-targeted-cities")
async def scrape_targeted_cities(
    request: TargetedCitiesRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Refresh target cities that lack recent events."""
    logger.info("targeted_cities_requested", cities=request.cities, force_refresh=request.force_refresh)
    batch = await orchestrator.run_targeted_cities(request.cities, request.force_refresh)
    return batch_response(batch)


@router.post("/event-scraper-master")
async def event_scraper_master(
    request: MasterRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Run one region, or the batch walk over all target regions."""
    logger.info("master_requested", mode=request.mode, country=request.country, city=request.city)
    batch = await orchestrator.run_master(
        country=request.country,
        region=request.region,
        city=request.city,
        mode=request.mode,
    )
    return batch_response(batch)
