"""FastAPI application for the event aggregator.

Run with:
    uvicorn lovesync_events.api.main:app --reload --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lovesync_events import __version__
from lovesync_events.api.routes import batch, events
from lovesync_events.config import get_settings
from lovesync_events.core.exceptions import ConfigurationError, EventHubError
from lovesync_events.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    if settings.scheduler_enabled:
        from lovesync_events.scheduler import init_scheduler

        init_scheduler()
    yield
    if settings.scheduler_enabled:
        from lovesync_events.scheduler import shutdown_scheduler

        shutdown_scheduler()


app = FastAPI(
    title="LoveSync Events API",
    description="Aggregates, deduplicates and stores local events from several providers",
    version=__version__,
    lifespan=lifespan,
)

# CORS for the mobile/web clients, preflight included
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(events.router, tags=["Events"])
app.include_router(batch.router, tags=["Batch"])


# ============================================================
# ERROR HANDLERS
# ============================================================


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    logger.warning("invalid_request", path=request.url.path, error=message)
    return _error(400, message)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.warning("configuration_error", path=request.url.path, error=str(exc))
    return _error(400, str(exc))


@app.exception_handler(EventHubError)
async def eventhub_error_handler(request: Request, exc: EventHubError):
    logger.error("request_failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return _error(500, str(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path)
    return _error(500, str(exc) or type(exc).__name__)


# ============================================================
# HEALTH
# ============================================================


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "LoveSync Events API",
        "version": __version__,
    }


@app.get("/health", tags=["Health"])
async def health():
    """Detailed health check: database, providers and scheduler."""
    from lovesync_events.core.orchestrator import AggregationOrchestrator
    from lovesync_events.core.supabase_client import get_supabase_client
    from lovesync_events.scheduler import get_scheduler_status

    try:
        store = get_supabase_client()
        event_count = await store.count_events()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"
        event_count = 0
        providers = {}
    else:
        providers = AggregationOrchestrator(store=store).configuration_status()

    return {
        "status": "ok",
        "database": db_status,
        "events_in_db": event_count,
        "providers": providers,
        "scheduler": get_scheduler_status()["status"],
    }
