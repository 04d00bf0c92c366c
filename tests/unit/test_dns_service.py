"""
tests/unit/test_dns_service.py

Unit tests for services/dns_service.py.
The store and IP source are AsyncMocks; the real Reconciler is used.
"""

from __future__ import annotations

import dataclasses
from unittest.mock import AsyncMock

import pytest

from exceptions import ApiError, IpSourceError, TransportError
from infomaniak.zone_store import ZoneRecord
from services.dns_service import DnsService
from services.reconciler import Create, NoOp, Replace


def _record(id="1", name="home.example.com", type="A", target="1.2.3.4"):
    return ZoneRecord(id=id, name=name, type=type, target=target, ttl=300, updated_at=0)


def _ip_source(ipv4="1.2.3.4", ipv6="2001:db8::1"):
    ip_source = AsyncMock()
    ip_source.get_public_ipv4.return_value = ipv4
    ip_source.get_public_ipv6.return_value = ipv6
    return ip_source


def _store(records=()):
    store = AsyncMock()
    store.list_records.return_value = list(records)
    store.create_record.side_effect = lambda zone_id, name, record_type, ip, ttl: _record(
        id="new", name=name, type=record_type, target=ip
    )
    return store


# ---------------------------------------------------------------------------
# Happy paths
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_check_cycle_no_update_needed(app_config):
    """When the zone already points at the public IP, no mutation is made."""
    store = _store([_record(target="1.2.3.4")])
    service = DnsService(store, _ip_source())

    report = await service.run_check_cycle(app_config)

    store.list_records.assert_awaited_once_with("zone123", ("A", "AAAA"))
    store.create_record.assert_not_called()
    store.delete_record.assert_not_called()
    assert report.unchanged == 1
    assert report.aborted is None


@pytest.mark.asyncio
async def test_run_check_cycle_replaces_when_ip_changed(app_config):
    store = _store([_record(id="42", target="1.1.1.1")])
    service = DnsService(store, _ip_source(ipv4="2.2.2.2"))

    report = await service.run_check_cycle(app_config)

    store.delete_record.assert_awaited_once_with("zone123", "42")
    store.create_record.assert_awaited_once_with("zone123", "home.example.com", "A", "2.2.2.2", 300)
    assert [r.action for r in report.results] == [Replace("42", "home.example.com", "A", "2.2.2.2")]
    assert report.replaced == 1


@pytest.mark.asyncio
async def test_run_check_cycle_does_not_ask_for_ipv6_when_disabled(app_config):
    ip_source = _ip_source()
    service = DnsService(_store(), ip_source)

    report = await service.run_check_cycle(app_config)

    ip_source.get_public_ipv6.assert_not_called()
    assert [r.action for r in report.results] == [Create("home.example.com", "A", "1.2.3.4")]


@pytest.mark.asyncio
async def test_run_check_cycle_manages_aaaa_when_ipv6_enabled(app_config):
    config = dataclasses.replace(app_config, ipv6_enabled=True)
    store = _store([_record(target="1.2.3.4")])
    service = DnsService(store, _ip_source())

    report = await service.run_check_cycle(config)

    assert [r.action for r in report.results] == [
        NoOp("home.example.com", "A"),
        Create("home.example.com", "AAAA", "2001:db8::1"),
    ]
    assert report.ipv6 == "2001:db8::1"


# ---------------------------------------------------------------------------
# Failure paths
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_check_cycle_aborts_on_ipv4_failure(app_config):
    """When the IPv4 lookup fails, the zone is never listed."""
    ip_source = _ip_source()
    ip_source.get_public_ipv4.side_effect = IpSourceError("timeout")
    store = _store()

    report = await DnsService(store, ip_source).run_check_cycle(app_config)

    store.list_records.assert_not_called()
    assert report.aborted == "ipv4"
    assert report.results == []


@pytest.mark.asyncio
async def test_run_check_cycle_ipv6_failure_only_skips_aaaa(app_config):
    config = dataclasses.replace(app_config, ipv6_enabled=True)
    ip_source = _ip_source()
    ip_source.get_public_ipv6.side_effect = IpSourceError("no route")
    store = _store([_record(id="42", target="1.1.1.1")])

    report = await DnsService(store, ip_source).run_check_cycle(config)

    assert report.aborted is None
    assert report.ipv6 is None
    assert [r.action for r in report.results] == [Replace("42", "home.example.com", "A", "1.2.3.4")]
    assert all(call.args[2] == "A" for call in store.create_record.await_args_list)


@pytest.mark.asyncio
async def test_run_check_cycle_aborts_when_listing_fails(app_config):
    store = _store()
    store.list_records.side_effect = TransportError("list", ConnectionError("refused"))

    report = await DnsService(store, _ip_source()).run_check_cycle(app_config)

    assert report.aborted == "list"
    store.create_record.assert_not_called()
    store.delete_record.assert_not_called()


@pytest.mark.asyncio
async def test_run_check_cycle_reports_failures_per_record(app_config):
    """A failing first record does not prevent the second from being created."""
    config = dataclasses.replace(app_config, record_names=("a.example.com", "b.example.com"))
    store = _store()
    store.create_record.side_effect = [
        ApiError("create", 500, "boom"),
        _record(id="b", name="b.example.com"),
    ]

    report = await DnsService(store, _ip_source()).run_check_cycle(config)

    assert store.create_record.await_count == 2
    assert report.failed == 1
    assert report.created == 1
