"""
app.py

Responsibility: Process entry point. Configures logging, loads the config,
wires the collaborators and runs the scheduler until the process is stopped.
Does NOT: contain DNS or IP business logic.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import httpx

from config import AppConfig, load_config
from exceptions import ConfigError
from infomaniak.infomaniak_client import InfomaniakClient
from scheduler import create_scheduler
from services.dns_service import DnsService
from services.ip_service import IpService
from services.reconciler import Reconciler

logger = logging.getLogger(__name__)

_HTTP_TIMEOUT = httpx.Timeout(30.0)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_http_client(api_token: str) -> httpx.AsyncClient:
    """
    Returns the client used for every zone API call, with the bearer token
    attached as a default header.
    """
    return httpx.AsyncClient(
        headers={
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        },
        timeout=_HTTP_TIMEOUT,
    )


async def run(config: AppConfig) -> None:
    """
    Runs the scheduler forever.

    Two HTTP clients are used so the API token is never sent to the IP echo
    endpoints.
    """
    async with create_http_client(config.api_token) as api_client, httpx.AsyncClient(
        timeout=_HTTP_TIMEOUT
    ) as ip_client:
        store = InfomaniakClient(api_client, base_url=config.api_url)
        ip_service = IpService(ip_client, ipv4_url=config.ipv4_url, ipv6_url=config.ipv6_url)
        dns_service = DnsService(store, ip_service, Reconciler(store))

        scheduler = create_scheduler(dns_service, config)
        scheduler.start()
        logger.info(
            "DDNS updater started for zone %s: %s",
            config.zone_id, ", ".join(config.record_names),
        )
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)


def main() -> None:
    configure_logging()
    try:
        config = load_config()
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("DDNS updater stopped.")


if __name__ == "__main__":
    main()
