"""
config.py

Responsibility: Builds the immutable AppConfig from environment variables,
once per process start.
Does NOT: hold mutable global state, make HTTP calls, or configure logging.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from exceptions import ConfigError
from infomaniak.infomaniak_client import INFOMANIAK_ZONES_API_URL
from services.ip_service import IPV4_URL, IPV6_URL

logger = logging.getLogger(__name__)

ENV_PREFIX = "INFOMANIAK_DYNDNS_WILDCARD_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class AppConfig:
    """
    Process-wide settings, read once at startup and passed explicitly.
    """

    # Seconds between two reconciliation cycles
    interval: int

    # Infomaniak API token with DNS edit permissions
    api_token: str

    # Zone the records live in
    zone_id: str

    # Record names to keep in sync, e.g. ("home.example.com", "*.example.com")
    record_names: tuple[str, ...]

    ipv6_enabled: bool = False
    ipv4_url: str = IPV4_URL
    ipv6_url: str = IPV6_URL
    api_url: str = INFOMANIAK_ZONES_API_URL
    log_level: str = "INFO"


def parse_record_names(raw: str) -> tuple[str, ...]:
    """
    Splits a comma-separated list of record names.

    Surrounding whitespace is stripped and empty entries are dropped.
    Repeats are kept; the engine collapses them.
    """
    return tuple(name.strip() for name in raw.split(",") if name.strip())


def parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{ENV_PREFIX}{key} must be a boolean, got {raw!r}")


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Reads every setting from the environment.

    Args:
        environ: Mapping to read from; defaults to os.environ.

    Returns:
        A frozen AppConfig.

    Raises:
        ConfigError: If a required setting is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ

    def get(key: str, default: str | None = None) -> str | None:
        value = env.get(ENV_PREFIX + key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def require(key: str) -> str:
        value = get(key)
        if value is None:
            raise ConfigError(f"{ENV_PREFIX}{key} must be set")
        return value

    raw_interval = require("TIME_BETWEEN_UPDATES_IN_SECONDS")
    try:
        interval = int(raw_interval)
    except ValueError as exc:
        raise ConfigError(
            f"{ENV_PREFIX}TIME_BETWEEN_UPDATES_IN_SECONDS must be an integer, got {raw_interval!r}"
        ) from exc
    if interval <= 0:
        raise ConfigError(f"{ENV_PREFIX}TIME_BETWEEN_UPDATES_IN_SECONDS must be positive, got {interval}")

    record_names = parse_record_names(require("RECORDS_NAME"))
    if not record_names:
        raise ConfigError(f"{ENV_PREFIX}RECORDS_NAME must list at least one record name")

    log_level = get("LOG_LEVEL", "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}")

    config = AppConfig(
        interval=interval,
        api_token=require("INFOMANIAK_API_TOKEN"),
        zone_id=require("DNS_ZONE_ID"),
        record_names=record_names,
        ipv6_enabled=parse_bool(get("IPV6_ENABLED", "false"), "IPV6_ENABLED"),
        ipv4_url=get("IPV4_URL", IPV4_URL),
        ipv6_url=get("IPV6_URL", IPV6_URL),
        api_url=get("API_URL", INFOMANIAK_ZONES_API_URL),
        log_level=log_level,
    )
    logger.debug(
        "Loaded config: zone=%s records=%s interval=%ds ipv6=%s",
        config.zone_id, ",".join(config.record_names), config.interval, config.ipv6_enabled,
    )
    return config
