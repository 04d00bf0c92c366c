"""
tests/conftest.py

Shared pytest fixtures for the unit test suite.
All HTTP fixtures use respx.mock — no real network calls are made in any test.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from config import AppConfig


# ---------------------------------------------------------------------------
# HTTP mock fixture — intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Shared httpx.AsyncClient fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client():
    """
    Yields a real httpx.AsyncClient instance for use in tests.

    Pair with the mock_http fixture so all requests are intercepted by respx.
    The client is closed after each test.
    """
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_config():
    """A minimal IPv4-only config for one record in zone123."""
    return AppConfig(
        interval=300,
        api_token="test-token",
        zone_id="zone123",
        record_names=("home.example.com",),
    )

