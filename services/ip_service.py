"""
services/ip_service.py

Responsibility: Fetches the current public IPv4 / IPv6 address of the host machine.
Does NOT: read DNS records, talk to the zone API, or read configuration.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Protocol, runtime_checkable

import httpx

from exceptions import IpSourceError

logger = logging.getLogger(__name__)

# NOTE: Both endpoints return the caller's address as plain text. api64 answers
# over IPv6 when the host has IPv6 connectivity.
IPV4_URL = "https://api.ipify.org/"
IPV6_URL = "https://api64.ipify.org/"


@runtime_checkable
class IpSource(Protocol):
    """
    Anything that can report the host's public addresses.

    IPv4 is load-bearing for a cycle; IPv6 is only asked for when enabled
    and its failure is tolerated by the caller.
    """

    async def get_public_ipv4(self) -> str:
        ...

    async def get_public_ipv6(self) -> str:
        ...


class IpService:
    """
    Fetches the host machine's public addresses from plain-text echo endpoints.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests).

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        ipv4_url: str = IPV4_URL,
        ipv6_url: str = IPV6_URL,
    ) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            ipv4_url: Endpoint answering with the caller's IPv4 address.
            ipv6_url: Endpoint answering with the caller's IPv6 address.
        """
        self._client = http_client
        self._ipv4_url = ipv4_url
        self._ipv6_url = ipv6_url

    async def get_public_ipv4(self) -> str:
        """
        Returns the current public IPv4 address, e.g. "1.2.3.4".

        Raises:
            IpSourceError: If the endpoint is unreachable, returns a non-2xx
                           response, or the body is not an IPv4 address.
        """
        return await self._fetch(self._ipv4_url, ipaddress.IPv4Address)

    async def get_public_ipv6(self) -> str:
        """
        Returns the current public IPv6 address in compressed form.

        Raises:
            IpSourceError: If the endpoint is unreachable, returns a non-2xx
                           response, or the body is not an IPv6 address.
        """
        return await self._fetch(self._ipv6_url, ipaddress.IPv6Address)

    async def _fetch(self, url: str, family: type[ipaddress.IPv4Address] | type[ipaddress.IPv6Address]) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IpSourceError(
                f"IP provider {url} returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise IpSourceError(f"Could not reach IP provider ({url}): {exc}") from exc

        text = response.text.strip()
        try:
            ip = str(family(text))
        except ValueError as exc:
            raise IpSourceError(f"IP provider {url} returned an invalid address: {text!r}") from exc

        logger.debug("Current public IP from %s: %s", url, ip)
        return ip
