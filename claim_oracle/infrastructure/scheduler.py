"""APScheduler wiring for periodic fact-check cycles and the price-claim workflow."""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


def cron_trigger(expression: str, tz: str = "UTC") -> CronTrigger:
    """Build a trigger from a 5-field crontab or a 6-field one with leading seconds."""
    fields = expression.split()
    if len(fields) == 5:
        return CronTrigger.from_crontab(expression, timezone=tz)
    if len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=tz,
        )
    raise ValueError(f"Expected 5 or 6 cron fields, got {len(fields)}: {expression!r}")


class CycleScheduler:
    """Runs async jobs on an asyncio scheduler.

    Jobs never overlap: a firing that comes due while the previous run is
    still going is dropped, and missed firings are coalesced into one.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    def add_interval_job(self, job: Callable[[], Awaitable[object]], minutes: float, job_id: str, run_now: bool = True):
        """Schedule ``job`` every ``minutes``, optionally firing once immediately."""
        kwargs = {}
        if run_now:
            kwargs["next_run_time"] = datetime.now(timezone.utc)
        self._scheduler.add_job(
            job,
            IntervalTrigger(minutes=minutes),
            id=job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **kwargs,
        )
        logger.info(f"⏰ Scheduled {job_id} every {minutes:g} minutes")

    def add_cron_job(self, job: Callable[[], Awaitable[object]], expression: str, job_id: str):
        """Schedule ``job`` on a cron expression."""
        self._scheduler.add_job(
            job,
            cron_trigger(expression),
            id=job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(f"⏰ Scheduled {job_id} on cron '{expression}'")

    def start(self) -> None:
        self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    @property
    def jobs(self):
        return self._scheduler.get_jobs()
