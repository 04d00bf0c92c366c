"""
scheduler.py

Responsibility: Sets up the APScheduler AsyncIOScheduler and registers the
DDNS reconciliation job.
Does NOT: contain DNS business logic or HTTP calls — those are delegated
entirely to DnsService and its collaborators.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import AppConfig
from services.dns_service import CycleReport, DnsService

logger = logging.getLogger(__name__)

# Job ID used to identify the DDNS job in APScheduler
JOB_ID = "ddns_reconcile"


# ---------------------------------------------------------------------------
# Scheduler job
# ---------------------------------------------------------------------------


async def _ddns_check_job(dns_service: DnsService, config: AppConfig) -> CycleReport | None:
    """
    APScheduler job: runs one reconciliation cycle.

    Expected failures are already handled inside the cycle. Anything else is
    logged here so the next tick still runs.

    Args:
        dns_service: The wired DnsService.
        config: The immutable process configuration.

    Returns:
        The cycle's report, or None if the cycle crashed.
    """
    logger.debug("DDNS job triggered.")
    try:
        return await dns_service.run_check_cycle(config)
    except Exception:
        logger.exception("Unexpected error during DDNS cycle; retrying in %ds.", config.interval)
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_scheduler(dns_service: DnsService, config: AppConfig) -> AsyncIOScheduler:
    """
    Creates and returns a configured AsyncIOScheduler with the DDNS job.

    The job runs immediately on startup (next_run_time=now) and then every
    `config.interval` seconds, whatever the previous cycle's outcome.

    Args:
        dns_service: The DnsService the job drives.
        config: The immutable process configuration.

    Returns:
        A configured but not yet started AsyncIOScheduler.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _ddns_check_job,
        trigger="interval",
        seconds=config.interval,
        id=JOB_ID,
        kwargs={"dns_service": dns_service, "config": config},
        # NOTE: next_run_time=now triggers the first cycle immediately on
        # startup rather than waiting a full interval.
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,  # Cycles never overlap
        coalesce=True,
    )
    logger.info("DDNS job scheduled — interval: %ds.", config.interval)
    return scheduler
