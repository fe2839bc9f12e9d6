"""Scheduled tasks for automatic aggregation.

This module provides:
1. Master batch run over the target regions every 4 hours
2. Daily cleanup of expired events (03:00 UTC)
3. Status helpers used by the API health check and the CLI
"""

from datetime import datetime, timezone
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from lovesync_events.core.orchestrator import AggregationOrchestrator
from lovesync_events.logging import get_logger

logger = get_logger(__name__)

MASTER_JOB_ID = "master_batch"
CLEANUP_JOB_ID = "cleanup_expired"

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None

# Last run info per job
_last_runs: dict[str, dict[str, Any]] = {}


def _start_run(job_id: str) -> dict[str, Any]:
    run = {
        "started_at": datetime.now(timezone.utc).isoformat(),
        "completed_at": None,
        "status": "running",
    }
    _last_runs[job_id] = run
    return run


async def run_master_batch(orchestrator: AggregationOrchestrator | None = None) -> dict[str, Any]:
    """Walk the target regions once; regions not due are skipped."""
    run = _start_run(MASTER_JOB_ID)
    logger.info("scheduled_master_started", time=run["started_at"])

    try:
        orchestrator = orchestrator or AggregationOrchestrator()
        batch = await orchestrator.run_master(mode="batch")
    except Exception as e:
        run.update(status="failed", error=str(e), completed_at=datetime.now(timezone.utc).isoformat())
        logger.error("scheduled_master_failed", error=str(e))
        return run

    run.update(
        status="completed" if not batch.cities_failed else "completed_with_errors",
        completed_at=datetime.now(timezone.utc).isoformat(),
        total_events=batch.total_events,
        regions_processed=batch.cities_processed,
        regions_failed=batch.cities_failed,
    )
    logger.info(
        "scheduled_master_completed",
        total_events=batch.total_events,
        regions_processed=batch.cities_processed,
        regions_failed=batch.cities_failed,
    )
    return run


async def run_cleanup(orchestrator: AggregationOrchestrator | None = None) -> dict[str, Any]:
    """Delete expired events."""
    run = _start_run(CLEANUP_JOB_ID)
    try:
        orchestrator = orchestrator or AggregationOrchestrator()
        deleted = await orchestrator.cleanup_expired()
    except Exception as e:
        run.update(status="failed", error=str(e), completed_at=datetime.now(timezone.utc).isoformat())
        logger.error("scheduled_cleanup_failed", error=str(e))
        return run

    run.update(status="completed", deleted=deleted, completed_at=datetime.now(timezone.utc).isoformat())
    return run


def init_scheduler(master_interval_hours: float = 4) -> AsyncIOScheduler:
    """Initialize and start the scheduler (needs a running event loop)."""
    global scheduler

    if scheduler is not None:
        return scheduler

    scheduler = AsyncIOScheduler(timezone=timezone.utc)

    scheduler.add_job(
        run_master_batch,
        IntervalTrigger(hours=master_interval_hours),
        id=MASTER_JOB_ID,
        name=f"Master batch (every {master_interval_hours:g}h)",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        run_cleanup,
        CronTrigger(hour=3, minute=0, timezone=timezone.utc),
        id=CLEANUP_JOB_ID,
        name="Expired events cleanup (daily 03:00 UTC)",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("scheduler_started", next_run=get_next_run())

    return scheduler


def shutdown_scheduler() -> None:
    global scheduler
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
    scheduler = None


def get_next_run(job_id: str = MASTER_JOB_ID) -> str | None:
    """Get the next scheduled run time of a job."""
    if scheduler is None:
        return None

    job = scheduler.get_job(job_id)
    if job and job.next_run_time:
        return job.next_run_time.isoformat()
    return None


def get_scheduler_status() -> dict[str, Any]:
    """Get current scheduler status."""
    if scheduler is None:
        return {
            "status": "not_initialized",
            "jobs": [],
            "last_runs": _last_runs,
        }

    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        }
        for job in scheduler.get_jobs()
    ]
    return {
        "status": "running" if scheduler.running else "paused",
        "jobs": jobs,
        "last_runs": _last_runs,
    }
