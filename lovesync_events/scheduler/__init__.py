"""Scheduler module for periodic aggregation jobs."""

from lovesync_events.scheduler.cron import (
    get_next_run,
    get_scheduler_status,
    init_scheduler,
    run_cleanup,
    run_master_batch,
    shutdown_scheduler,
)

__all__ = [
    "get_next_run",
    "get_scheduler_status",
    "init_scheduler",
    "run_cleanup",
    "run_master_batch",
    "shutdown_scheduler",
]
