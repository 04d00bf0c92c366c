"""
infomaniak/infomaniak_client.py

Responsibility: Implements the ZoneRecordStore protocol using the Infomaniak
zones REST API. All Infomaniak HTTP calls are concentrated here — no other
file may call the zone API directly.
Does NOT: attach credentials, retry failed calls, or decide what to change.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import ApiError, MalformedResponseError, TransportError
from infomaniak.zone_store import DEFAULT_TTL, RECORD_TYPES, ZoneRecord

logger = logging.getLogger(__name__)

INFOMANIAK_ZONES_API_URL = "https://api.infomaniak.com/2/zones"


class InfomaniakClient:
    """
    Implements ZoneRecordStore for the Infomaniak DNS zones API (v2).

    The injected httpx.AsyncClient is expected to already carry the bearer
    token (see app.create_http_client), which keeps this class testable with
    respx.mock and free of credential handling.

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - ZoneRecordStore: this class satisfies the protocol contract
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = INFOMANIAK_ZONES_API_URL) -> None:
        """
        Initialises the client.

        Args:
            http_client: A long-lived httpx.AsyncClient with auth headers set.
            base_url: Root of the zones API, without trailing slash.
        """
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    # ---------------------------------------------------------------------------
    # ZoneRecordStore implementation
    # ---------------------------------------------------------------------------

    async def list_records(
        self, zone_id: str, types: tuple[str, ...] = RECORD_TYPES
    ) -> list[ZoneRecord]:
        """
        Returns the zone's records of the given types.

        Args:
            zone_id: The Infomaniak zone identifier.
            types: Record types to request; an empty tuple disables the filter.

        Returns:
            A list of ZoneRecord instances in the order the API returned them.

        Raises:
            ApiError: On a non-success status or a malformed payload.
            TransportError: If the API is unreachable.
        """
        url = f"{self._base_url}/{zone_id}/records"
        params = {"filter[types][]": list(types)} if types else None

        logger.debug("GET %s params=%s", url, params)
        response = await self._request("list", "GET", url, params=params)
        data = self._data(response, "list")

        if not isinstance(data, list):
            raise MalformedResponseError("list", response.status_code, response.text, "'data' is not a list")

        # NOTE: The filter is honoured server-side, but records of a type we do
        # not manage are skipped before parsing so they can never fail a listing.
        if types:
            data = [raw for raw in data if not isinstance(raw, dict) or raw.get("type") in types]
        return [self._parse_record(raw, response, "list") for raw in data]

    async def create_record(
        self, zone_id: str, name: str, record_type: str, ip: str, ttl: int = DEFAULT_TTL
    ) -> ZoneRecord:
        """
        Creates a new record in the zone.

        Args:
            zone_id: The Infomaniak zone identifier.
            name: Record source, e.g. "home.example.com".
            record_type: "A" or "AAAA".
            ip: Address the record should answer with.
            ttl: TTL in seconds.

        Returns:
            The created ZoneRecord as echoed back by the API.

        Raises:
            ApiError: On a non-success status or a malformed payload.
            TransportError: If the API is unreachable.
        """
        url = f"{self._base_url}/{zone_id}/records"
        payload: dict[str, Any] = {
            "source": name,
            "target": ip,
            "type": record_type,
            "ttl": ttl,
        }

        logger.debug("POST %s payload=%s", url, payload)
        response = await self._request("create", "POST", url, json=payload)
        return self._parse_record(self._data(response, "create"), response, "create")

    async def delete_record(self, zone_id: str, record_id: str) -> None:
        """
        Deletes a record from the zone.

        Args:
            zone_id: The Infomaniak zone identifier.
            record_id: The provider-assigned record identifier.

        Raises:
            ApiError: On a non-success status.
            TransportError: If the API is unreachable.
        """
        url = f"{self._base_url}/{zone_id}/records/{record_id}"

        logger.debug("DELETE %s", url)
        await self._request("delete", "DELETE", url)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Sends one HTTP request and maps failures onto the store exceptions.

        Returns:
            The successful httpx.Response.

        Raises:
            ApiError: If the status code is not 2xx.
            TransportError: If the request could not be sent or timed out.
        """
        try:
            response = await self._client.request(method, url, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(operation, exc.response.status_code, exc.response.text) from exc
        except httpx.RequestError as exc:
            raise TransportError(operation, exc) from exc

        return response

    @staticmethod
    def _data(response: httpx.Response, operation: str) -> Any:
        """
        Extracts the "data" member Infomaniak wraps every payload in.
        """
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                operation, response.status_code, response.text, "body is not JSON"
            ) from exc

        if not isinstance(body, dict) or "data" not in body:
            raise MalformedResponseError(operation, response.status_code, response.text, "missing 'data'")
        return body["data"]

    @staticmethod
    def _parse_record(raw: Any, response: httpx.Response, operation: str) -> ZoneRecord:
        """
        Converts a raw API record dict into a ZoneRecord.

        Args:
            raw: A single record object from the API response.
            response: The response it came from, kept for error reporting.
            operation: Label of the calling operation.

        Raises:
            MalformedResponseError: If a required field is missing or mistyped.
        """
        if not isinstance(raw, dict):
            raise MalformedResponseError(operation, response.status_code, response.text, "record is not an object")

        missing = [key for key in ("id", "source", "type", "target", "ttl", "updated_at") if key not in raw]
        if missing:
            raise MalformedResponseError(
                operation, response.status_code, response.text, f"record missing {', '.join(missing)}"
            )

        try:
            return ZoneRecord(
                id=str(raw["id"]),
                name=str(raw["source"]),
                type=str(raw["type"]),
                target=str(raw["target"]),
                ttl=int(raw["ttl"]),
                updated_at=int(raw["updated_at"]),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(
                operation, response.status_code, response.text, f"bad field value ({exc})"
            ) from exc
