"""Tests for scheduler wiring."""

from datetime import timedelta

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from claim_oracle.infrastructure.scheduler import CycleScheduler, cron_trigger


def fields(trigger: CronTrigger) -> dict:
    return {field.name: str(field) for field in trigger.fields}


async def job():
    return None


def test_six_field_cron_has_leading_seconds():
    trigger = cron_trigger("0 */10 * * * *")

    assert fields(trigger)["second"] == "0"
    assert fields(trigger)["minute"] == "*/10"


def test_five_field_cron():
    trigger = cron_trigger("*/10 * * * *")

    assert fields(trigger)["minute"] == "*/10"
    assert fields(trigger)["second"] == "0"


@pytest.mark.parametrize("expression", ["* * * *", "0 0 * * * * *", ""])
def test_wrong_field_count(expression):
    with pytest.raises(ValueError):
        cron_trigger(expression)


def test_jobs_do_not_overlap():
    scheduler = CycleScheduler()

    scheduler.add_interval_job(job, minutes=10, job_id="fact-check-cycle")
    scheduler.add_cron_job(job, "0 */10 * * * *", job_id="price-claim-workflow")

    jobs = {j.id: j for j in scheduler.jobs}
    assert set(jobs) == {"fact-check-cycle", "price-claim-workflow"}
    for scheduled in jobs.values():
        assert scheduled.max_instances == 1
        assert scheduled.coalesce is True
    assert isinstance(jobs["fact-check-cycle"].trigger, IntervalTrigger)
    assert jobs["fact-check-cycle"].trigger.interval == timedelta(minutes=10)
