"""
tests/unit/test_scheduler.py

Unit tests for scheduler.py.
The scheduler is never started; the job coroutine is awaited directly.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from scheduler import JOB_ID, _ddns_check_job, create_scheduler
from services.dns_service import CycleReport


def test_create_scheduler_registers_interval_job(app_config):
    scheduler = create_scheduler(AsyncMock(), app_config)

    job = scheduler.get_job(JOB_ID)
    assert job is not None
    assert job.trigger.interval.total_seconds() == app_config.interval
    assert job.max_instances == 1
    assert job.kwargs["config"] is app_config


@pytest.mark.asyncio
async def test_job_runs_one_cycle(app_config):
    dns_service = AsyncMock()
    dns_service.run_check_cycle.return_value = CycleReport(ipv4="1.2.3.4")

    report = await _ddns_check_job(dns_service, app_config)

    dns_service.run_check_cycle.assert_awaited_once_with(app_config)
    assert report.ipv4 == "1.2.3.4"


@pytest.mark.asyncio
async def test_job_contains_unexpected_errors(app_config):
    """An unexpected exception is logged, not propagated to the scheduler."""
    dns_service = AsyncMock()
    dns_service.run_check_cycle.side_effect = RuntimeError("boom")

    assert await _ddns_check_job(dns_service, app_config) is None
