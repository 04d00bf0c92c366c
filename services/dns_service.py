"""
services/dns_service.py

Responsibility: Orchestrates one DDNS cycle — looks up the public IP(s),
snapshots the zone, and hands both to the reconciliation engine.
Does NOT: make HTTP calls directly, decide what to change (that is the
Reconciler's job), or sleep between cycles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from config import AppConfig
from exceptions import IpSourceError, ZoneListError, ZoneStoreError
from infomaniak.zone_store import RECORD_TYPES, ZoneRecord, ZoneRecordStore
from services.ip_service import IpSource
from services.reconciler import ActionResult, Create, NoOp, Reconciler, Replace, build_bindings

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """
    What one cycle observed and did. Discarded once logged.
    """

    ipv4: str | None = None
    ipv6: str | None = None
    results: list[ActionResult] = field(default_factory=list)

    # Set when the cycle stopped before executing a plan
    aborted: str | None = None

    def _count(self, kind: type, ok: bool = True) -> int:
        return sum(1 for r in self.results if isinstance(r.action, kind) and r.ok is ok)

    @property
    def unchanged(self) -> int:
        return self._count(NoOp)

    @property
    def created(self) -> int:
        return self._count(Create)

    @property
    def replaced(self) -> int:
        return self._count(Replace)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


class DnsService:
    """
    Runs DDNS check cycles for the configured zone.

    Collaborators:
        - ZoneRecordStore: lists the zone (satisfied by InfomaniakClient)
        - IpSource: provides the current public IPv4 / IPv6
        - Reconciler: plans and applies the changes
    """

    def __init__(
        self,
        store: ZoneRecordStore,
        ip_source: IpSource,
        reconciler: Reconciler | None = None,
    ) -> None:
        """
        Args:
            store: Any ZoneRecordStore implementation.
            ip_source: Provides the host's public addresses.
            reconciler: Engine used to apply the plan; defaults to one over `store`.
        """
        self._store = store
        self._ip_source = ip_source
        self._reconciler = reconciler or Reconciler(store)

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def run_check_cycle(self, config: AppConfig) -> CycleReport:
        """
        Runs a single cycle: IP lookup, list, diff, apply.

        IPv4 failure or a failed listing abort the cycle. IPv6 failure only
        drops the AAAA bindings for this cycle. Per-record mutation failures
        are reported in the returned CycleReport and never raise.

        Args:
            config: The immutable process configuration.

        Returns:
            A CycleReport describing the outcome.
        """
        report = CycleReport()

        try:
            report.ipv4 = await self._ip_source.get_public_ipv4()
        except IpSourceError as exc:
            logger.error("Could not fetch public IPv4, skipping cycle: %s", exc)
            report.aborted = "ipv4"
            return report
        logger.info("Public IPv4: %s", report.ipv4)

        if config.ipv6_enabled:
            try:
                report.ipv6 = await self._ip_source.get_public_ipv6()
                logger.info("Public IPv6: %s", report.ipv6)
            except IpSourceError as exc:
                logger.warning("Could not fetch public IPv6, AAAA records skipped this cycle: %s", exc)

        try:
            records = await self._list_records(config.zone_id)
        except ZoneListError as exc:
            logger.error("%s — skipping cycle.", exc)
            report.aborted = "list"
            return report

        bindings = build_bindings(config.record_names, report.ipv4, report.ipv6)
        report.results = await self._reconciler.reconcile(config.zone_id, records, bindings)

        self._log_summary(report)
        return report

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _list_records(self, zone_id: str) -> list[ZoneRecord]:
        try:
            records = await self._store.list_records(zone_id, RECORD_TYPES)
        except ZoneStoreError as exc:
            raise ZoneListError(exc) from exc
        logger.debug("Zone %s holds %d A/AAAA record(s).", zone_id, len(records))
        return records

    @staticmethod
    def _log_summary(report: CycleReport) -> None:
        parts = [f"{len(report.results)} binding(s) checked"]
        if report.unchanged:
            parts.append(f"{report.unchanged} up to date")
        if report.created:
            parts.append(f"{report.created} created")
        if report.replaced:
            parts.append(f"{report.replaced} replaced")
        if report.failed:
            parts.append(f"{report.failed} failed")
        logger.log(
            logging.WARNING if report.failed else logging.INFO,
            "Cycle complete: %s.", ", ".join(parts),
        )
