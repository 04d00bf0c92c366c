"""
infomaniak/zone_store.py

Responsibility: Defines the ZoneRecordStore Protocol and the ZoneRecord value object.
Does NOT: make HTTP calls, decide which records to change, or hold any state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Record types this application manages
RECORD_TYPES: tuple[str, ...] = ("A", "AAAA")

# Fixed TTL for every record we create
DEFAULT_TTL = 300


# ---------------------------------------------------------------------------
# Value object — read-only snapshot of one record in the zone
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ZoneRecord:
    """
    Represents a single A/AAAA record as reported by the zone API.

    Instances are snapshots taken at the start of a cycle and are never
    mutated; a changed record is expressed as a new record with a new id.
    """

    # Provider-assigned identifier, unique within the zone
    id: str

    # Record source, e.g. "home.example.com" or "*.example.com"
    name: str

    # "A" or "AAAA"
    type: str

    # Address the record currently answers with
    target: str

    # TTL in seconds
    ttl: int

    # Last modification as epoch seconds; informational only
    updated_at: int = 0


# ---------------------------------------------------------------------------
# Abstract interface — the zone API as seen by the reconciliation engine
# ---------------------------------------------------------------------------


@runtime_checkable
class ZoneRecordStore(Protocol):
    """
    Abstract protocol for a DNS zone that only offers list, create and delete.

    There is no update primitive: the engine expresses a changed record as
    delete-by-id followed by create-by-payload. Implementations must not
    retry; a failed call raises and the next cycle tries again.
    """

    async def list_records(
        self, zone_id: str, types: tuple[str, ...] = RECORD_TYPES
    ) -> list[ZoneRecord]:
        """
        Returns the zone's records, filtered to the given types.

        Raises:
            ZoneStoreError: If the API call fails or returns a malformed payload.
        """
        ...

    async def create_record(
        self, zone_id: str, name: str, record_type: str, ip: str, ttl: int = DEFAULT_TTL
    ) -> ZoneRecord:
        """
        Creates a new record and returns it as confirmed by the provider.

        Raises:
            ZoneStoreError: If the API call fails or returns a malformed payload.
        """
        ...

    async def delete_record(self, zone_id: str, record_id: str) -> None:
        """
        Deletes a record by id.

        Raises:
            ZoneStoreError: If the API call fails.
        """
        ...
