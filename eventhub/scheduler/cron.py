"""Scheduled pipeline runs.

One cron job runs the full pipeline (default: daily at 06:00 Sydney time).
The scheduler must be started from inside a running event loop.
"""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from eventhub.config import Settings, get_settings
from eventhub.core.exceptions import EventHubError
from eventhub.core.pipeline import run_all
from eventhub.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "scrape_all"

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None

# Last run info
_last_run: dict[str, Any] = {
    "started_at": None,
    "completed_at": None,
    "status": "never_run",
    "total_records": 0,
    "successful_adapters": 0,
    "swept": 0,
    "error": None,
}


async def run_scheduled_scrape(settings: Settings | None = None) -> dict[str, Any]:
    """Execute one pipeline run and record its outcome."""
    global _last_run

    settings = settings or get_settings()
    tz = ZoneInfo(settings.schedule_timezone)
    _last_run = {
        "started_at": datetime.now(tz).isoformat(),
        "completed_at": None,
        "status": "running",
        "total_records": 0,
        "successful_adapters": 0,
        "swept": 0,
        "error": None,
    }
    logger.info("scheduled_scrape_started", time=_last_run["started_at"])

    try:
        summary = await run_all(settings)
    except EventHubError as e:
        _last_run["status"] = "failed"
        _last_run["error"] = str(e)
        logger.error("scheduled_scrape_failed", error=str(e))
    else:
        _last_run["status"] = "completed" if summary.success else "failed"
        _last_run["total_records"] = summary.total_records
        _last_run["successful_adapters"] = summary.successful_adapters
        _last_run["swept"] = summary.swept
        logger.info("scheduled_scrape_completed", **{k: v for k, v in _last_run.items() if k != "error"})

    _last_run["completed_at"] = datetime.now(tz).isoformat()
    return _last_run


def build_trigger(cron: str, timezone: str) -> CronTrigger:
    """Build a trigger from a standard 5-field crontab expression.

    Raises:
        ValueError: the expression or timezone is invalid
    """
    return CronTrigger.from_crontab(cron, timezone=ZoneInfo(timezone))


def init_scheduler(settings: Settings | None = None, cron: str | None = None) -> AsyncIOScheduler:
    """Initialize and start the scheduler."""
    global scheduler

    settings = settings or get_settings()
    cron = cron or settings.schedule_cron
    tz = ZoneInfo(settings.schedule_timezone)

    scheduler = AsyncIOScheduler(timezone=tz)
    scheduler.add_job(
        run_scheduled_scrape,
        build_trigger(cron, settings.schedule_timezone),
        kwargs={"settings": settings},
        id=JOB_ID,
        name=f"Full scrape ({cron} {settings.schedule_timezone})",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info("scheduler_started", cron=cron, next_run=get_next_run())

    return scheduler


def get_next_run() -> str | None:
    """Get the next scheduled run time."""
    if scheduler is None:
        return None

    job = scheduler.get_job(JOB_ID)
    if job and job.next_run_time:
        return job.next_run_time.isoformat()
    return None


def get_scheduler_status() -> dict[str, Any]:
    """Get current scheduler status."""
    if scheduler is None:
        return {"status": "not_initialized", "next_run": None, "last_run": _last_run}

    return {
        "status": "running" if scheduler.running else "stopped",
        "next_run": get_next_run(),
        "last_run": _last_run,
    }


def shutdown_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
    scheduler = None
