"""Scheduler module for periodic pipeline runs."""

from eventhub.scheduler.cron import (
    build_trigger,
    get_next_run,
    get_scheduler_status,
    init_scheduler,
    run_scheduled_scrape,
    shutdown_scheduler,
)

__all__ = [
    "build_trigger",
    "get_next_run",
    "get_scheduler_status",
    "init_scheduler",
    "run_scheduled_scrape",
    "shutdown_scheduler",
]
