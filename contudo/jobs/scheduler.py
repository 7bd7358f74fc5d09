"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from contudo.config import settings
from contudo.jobs.scheduled_rollover import scheduled_rollover
from contudo.services.common import LedgerStore
from contudo.utils.time import Clock

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs(store: LedgerStore, clock: Clock) -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("scheduled_rollover") is None:
        scheduler.add_job(
            scheduled_rollover,
            IntervalTrigger(
                seconds=max(1, settings.scheduler_interval_seconds),
                timezone=settings.timezone,
            ),
            kwargs={"store": store, "clock": clock},
            id="scheduled_rollover",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
