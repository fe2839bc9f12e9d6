"""Fetch/generation job rows, used as short-lived per-location locks.

A job is claimed by inserting a `running` row for its location key. The
`fetch_jobs` table has a unique partial index on `location_key` where
`status = 'running'`, so the insert itself is the atomic check: a second
claimant gets a unique violation and backs off. Leases that outlive
`lease_expires_at` are released before each claim so a crashed run cannot hold
a key forever.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from lovesync_events.config import get_settings
from lovesync_events.core.supabase_client import SupabaseClient
from lovesync_events.logging import get_logger

logger = get_logger(__name__)


class JobStatus(str, Enum):
    """Job status enum."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobType(str, Enum):
    FETCH = "fetch"
    GENERATE = "generate"


@dataclass
class FetchJob:
    """A claimed job."""

    id: str
    location_key: str
    job_type: JobType
    started_at: datetime
    lease_expires_at: datetime
    generation_batch_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStore:
    """Claim and close fetch/generation jobs."""

    def __init__(
        self,
        store: SupabaseClient,
        lease: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.lease = lease or timedelta(seconds=get_settings().job_lease_seconds)
        self.clock = clock

    async def claim(
        self,
        location_key: str,
        job_type: JobType = JobType.FETCH,
        generation_batch_id: str | None = None,
    ) -> FetchJob | None:
        """Atomically take the lock for a location key.

        Returns:
            The claimed job, or None if another run holds a live lease
        """
        now = self.clock()
        released = await self.store.expire_stale_jobs(location_key, now)
        if released:
            logger.warning("job_lease_expired", location_key=location_key, released=released)

        job = FetchJob(
            id=str(uuid4()),
            location_key=location_key,
            job_type=job_type,
            started_at=now,
            lease_expires_at=now + self.lease,
            generation_batch_id=generation_batch_id,
        )
        inserted = await self.store.insert_job({
            "id": job.id,
            "location_key": location_key,
            "job_type": job_type.value,
            "status": JobStatus.RUNNING.value,
            "started_at": now.isoformat(),
            "lease_expires_at": job.lease_expires_at.isoformat(),
            "generation_batch_id": generation_batch_id,
        })
        if not inserted:
            logger.info("job_locked", location_key=location_key, job_type=job_type.value)
            return None

        logger.info("job_claimed", job_id=job.id, location_key=location_key, job_type=job_type.value)
        return job

    async def complete(
        self,
        job: FetchJob,
        events_found: int,
        events_inserted: int,
        cost_estimate: float | None = None,
    ) -> None:
        now = self.clock()
        updates: dict[str, Any] = {
            "status": JobStatus.COMPLETED.value,
            "completed_at": now.isoformat(),
            "events_found": events_found,
            "events_inserted": events_inserted,
        }
        if cost_estimate is not None:
            updates["cost_estimate"] = cost_estimate
        await self.store.update_job(job.id, updates)
        logger.info(
            "job_completed",
            job_id=job.id,
            location_key=job.location_key,
            events_found=events_found,
            events_inserted=events_inserted,
            duration_seconds=round((now - job.started_at).total_seconds(), 2),
        )

    async def fail(self, job: FetchJob, error: str) -> None:
        """Close a job as failed; errors here are logged, never raised."""
        try:
            await self.store.update_job(job.id, {
                "status": JobStatus.FAILED.value,
                "completed_at": self.clock().isoformat(),
                "error_message": error[:500],
            })
        except Exception as e:
            logger.error("job_fail_update_failed", job_id=job.id, error=str(e))
        logger.warning("job_failed", job_id=job.id, location_key=job.location_key, error=error)
