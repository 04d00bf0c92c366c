"""
services/reconciler.py

Responsibility: The reconciliation engine. Turns (zone snapshot, desired
bindings) into a plan of NoOp / Create / Replace actions and executes it
against a ZoneRecordStore.
Does NOT: fetch IPs, list the zone, read configuration, or keep any state
between calls.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Union

from exceptions import MalformedResponseError, ZoneMutationError, ZoneStoreError
from infomaniak.zone_store import DEFAULT_TTL, ZoneRecord, ZoneRecordStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Desired state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DesiredBinding:
    """One (name, type, ip) the zone should answer with after this cycle."""

    name: str
    type: str
    ip: str


def build_bindings(
    record_names: Iterable[str],
    ipv4: str,
    ipv6: str | None = None,
) -> list[DesiredBinding]:
    """
    Crosses the configured names with every address family available this cycle.

    Args:
        record_names: Configured record names; repeats are collapsed.
        ipv4: Current public IPv4 address.
        ipv6: Current public IPv6 address, or None when IPv6 is disabled or
              its lookup failed this cycle.

    Returns:
        Bindings ordered by name, "A" before "AAAA".
    """
    bindings: list[DesiredBinding] = []
    seen: set[str] = set()
    for name in record_names:
        if name in seen:
            continue
        seen.add(name)
        bindings.append(DesiredBinding(name, "A", ipv4))
        if ipv6 is not None:
            bindings.append(DesiredBinding(name, "AAAA", ipv6))
    return bindings


# ---------------------------------------------------------------------------
# Plan actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NoOp:
    name: str
    type: str


@dataclass(frozen=True)
class Create:
    name: str
    type: str
    ip: str


@dataclass(frozen=True)
class Replace:
    """Delete `existing_id`, then create (name, type, ip). Never in place."""

    existing_id: str
    name: str
    type: str
    ip: str


Action = Union[NoOp, Create, Replace]


def plan(records: Sequence[ZoneRecord], bindings: Iterable[DesiredBinding]) -> list[Action]:
    """
    Diffs the zone snapshot against the desired bindings.

    Only the first record matching a binding's (name, type) is considered.
    Later duplicates are left untouched and are never cleaned up here.

    Args:
        records: Records from the zone, in the order the API returned them.
        bindings: Desired bindings for this cycle.

    Returns:
        One action per binding, in binding order.
    """
    actions: list[Action] = []
    for binding in bindings:
        matches = [r for r in records if r.name == binding.name and r.type == binding.type]
        if not matches:
            actions.append(Create(binding.name, binding.type, binding.ip))
            continue

        existing = matches[0]
        if len(matches) > 1:
            logger.warning(
                "%d %s records for %s; only id=%s is managed, the rest are ignored.",
                len(matches), binding.type, binding.name, existing.id,
            )

        if existing.target == binding.ip:
            actions.append(NoOp(binding.name, binding.type))
        else:
            actions.append(Replace(existing.id, binding.name, binding.type, binding.ip))
    return actions


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ReplaceStage(enum.Enum):
    """How far a Replace got. A failure leaves the stage it failed in."""

    PENDING_DELETE = "pending_delete"
    PENDING_CREATE = "pending_create"
    DONE = "done"


@dataclass
class ActionResult:
    action: Action
    ok: bool
    stage: ReplaceStage | None = None
    record: ZoneRecord | None = None
    error: ZoneMutationError | None = None

    @property
    def record_absent(self) -> bool:
        """
        True when a Replace deleted the old record and the recreate was rejected.

        A recreate answered with a malformed body may have succeeded on the
        provider side, so it does not count as absent.
        """
        if self.ok or self.stage is not ReplaceStage.PENDING_CREATE:
            return False
        return not (self.error is not None and isinstance(self.error.error, MalformedResponseError))


class Reconciler:
    """
    Executes reconciliation plans against a ZoneRecordStore.

    Holds only the store reference; every call is a pure function of its
    arguments plus the store's responses.

    Collaborators:
        - ZoneRecordStore: list/create/delete on the managed zone
    """

    def __init__(self, store: ZoneRecordStore, ttl: int = DEFAULT_TTL) -> None:
        self._store = store
        self._ttl = ttl

    async def reconcile(
        self,
        zone_id: str,
        records: Sequence[ZoneRecord],
        bindings: Iterable[DesiredBinding],
    ) -> list[ActionResult]:
        """Plans and executes in one call."""
        return await self.execute(zone_id, plan(records, bindings))

    async def execute(self, zone_id: str, actions: Iterable[Action]) -> list[ActionResult]:
        """
        Runs each action in order. A failed action never stops the ones after it.

        Args:
            zone_id: The zone the actions apply to.
            actions: The plan produced by plan().

        Returns:
            One ActionResult per action, in the same order.
        """
        results: list[ActionResult] = []
        for action in actions:
            if isinstance(action, NoOp):
                logger.debug("%s %s already up to date.", action.type, action.name)
                results.append(ActionResult(action, ok=True))
            elif isinstance(action, Create):
                results.append(await self._create(zone_id, action))
            else:
                results.append(await self._replace(zone_id, action))
        return results

    async def _create(self, zone_id: str, action: Create) -> ActionResult:
        try:
            record = await self._store.create_record(zone_id, action.name, action.type, action.ip, self._ttl)
        except ZoneStoreError as exc:
            logger.error("Creating %s %s → %s failed: %s", action.type, action.name, action.ip, exc)
            return ActionResult(action, ok=False, error=ZoneMutationError("create", exc))

        logger.info("Created %s %s → %s (id=%s).", action.type, action.name, action.ip, record.id)
        return ActionResult(action, ok=True, record=record)

    async def _replace(self, zone_id: str, action: Replace) -> ActionResult:
        stage = ReplaceStage.PENDING_DELETE
        try:
            await self._store.delete_record(zone_id, action.existing_id)
        except ZoneStoreError as exc:
            logger.error(
                "Deleting %s %s (id=%s) failed, old record kept: %s",
                action.type, action.name, action.existing_id, exc,
            )
            return ActionResult(action, ok=False, stage=stage, error=ZoneMutationError("delete", exc))

        stage = ReplaceStage.PENDING_CREATE
        try:
            record = await self._store.create_record(zone_id, action.name, action.type, action.ip, self._ttl)
        except MalformedResponseError as exc:
            logger.error(
                "Recreating %s %s → %s returned an unreadable answer after delete, outcome unknown until next cycle: %s",
                action.type, action.name, action.ip, exc,
            )
            return ActionResult(action, ok=False, stage=stage, error=ZoneMutationError("create", exc))
        except ZoneStoreError as exc:
            # The old record is gone; the next cycle sees no match and issues a Create.
            logger.error(
                "Recreating %s %s → %s failed after delete, record absent until next cycle: %s",
                action.type, action.name, action.ip, exc,
            )
            return ActionResult(action, ok=False, stage=stage, error=ZoneMutationError("create", exc))

        logger.info("Replaced %s %s → %s (id=%s).", action.type, action.name, action.ip, record.id)
        return ActionResult(action, ok=True, stage=ReplaceStage.DONE, record=record)
