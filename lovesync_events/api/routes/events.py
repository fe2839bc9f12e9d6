"""Single-location, AI generation and maintenance routes."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from lovesync_events.api.dependencies import get_orchestrator
from lovesync_events.core.orchestrator import AggregationOrchestrator, LocationRequest, LocationResult
from lovesync_events.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class FetchEventsRequest(BaseModel):
    """Request to fetch events around a point."""

    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius_km: float = Field(25.0, gt=0, le=200, alias="radiusKm")
    city: str | None = None
    country: str | None = Field(None, min_length=2, max_length=2)
    sources: list[str] | None = Field(None, description="Source names or aliases; defaults per country")
    force: bool = False


class GenerateEventsRequest(BaseModel):
    """Request to generate synthetic events for a city."""

    model_config = ConfigDict(populate_by_name=True)

    city: str = Field(..., min_length=1)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    country: str | None = Field(None, min_length=2, max_length=2)
    count: int | None = Field(None, ge=1, le=50)
    force_refresh: bool = Field(False, alias="forceRefresh")


def location_response(result: LocationResult) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": result.success,
        "source": result.source,
        "events": result.events,
        "count": len(result.events),
        "newEventsFetched": result.new_events_fetched,
        "totalEvents": result.new_events_fetched,
    }
    if result.radius_km is not None:
        body["radiusKm"] = result.radius_km
    if result.generation_batch_id:
        body["generationBatchId"] = result.generation_batch_id
    if result.error:
        body["error"] = result.error
    return body


@router.post("/fetch-events")
async def fetch_events(
    request: FetchEventsRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Fetch, deduplicate and store events for one location, then return nearby events."""
    logger.info("fetch_events_requested", latitude=request.latitude, longitude=request.longitude, city=request.city)
    result = await orchestrator.run_location(
        LocationRequest(
            latitude=request.latitude,
            longitude=request.longitude,
            radius_km=request.radius_km,
            city=request.city,
            country=request.country,
            sources=request.sources,
            force=request.force,
        )
    )
    return location_response(result)


@router.post("/generate-ai-events")
async def generate_ai_events(
    request: GenerateEventsRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Generate AI events for a city that has too few fresh ones."""
    result = await orchestrator.generate_ai_events(
        city=request.city,
        latitude=request.latitude,
        longitude=request.longitude,
        country=request.country,
        count=request.count,
        force_refresh=request.force_refresh,
    )
    return location_response(result)


@router.post("/cleanup-expired-events")
async def cleanup_expired_events(orchestrator: AggregationOrchestrator = Depends(get_orchestrator)):
    """Delete events whose expiry has passed."""
    deleted = await orchestrator.cleanup_expired()
    return {"success": True, "deleted": deleted}
