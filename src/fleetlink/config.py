"""Client configuration for fleetlink."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fleetlink._constants import (
    BALANCE_TTL_S,
    DEFAULT_CANDIDATE_URLS,
    DOCUMENT_TTL_S,
    HEALTH_PATH,
    NOTIFICATION_TTL_S,
    PROBE_TIMEOUT_S,
    REQUEST_TIMEOUT_S,
    STORAGE_PORT,
    STORAGE_PREFIX,
)
from fleetlink.exceptions import FleetConfigError


def _split_urls(value: str) -> tuple[str, ...]:
    return tuple(part.strip().rstrip("/") for part in value.split(",") if part.strip())


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FleetConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise FleetConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Client configuration.

    Parameters
    ----------
    candidate_urls : tuple of str
        Backend base URLs probed, in order, during discovery.  The last
        successfully resolved address is always tried first.
    fixed_base_url : str or None
        When set, discovery is skipped and this address is used as-is
        (production deployments behind a stable hostname).
    health_path : str
        Path appended to each candidate when probing.
    probe_timeout : float
        Seconds to wait for a single candidate's health check.
    request_timeout : float
        Total timeout in seconds for regular API requests.
    storage_port : int
        Port the object-storage service listens on.  URLs pointing at it
        are rewritten to go through the reverse proxy.
    storage_prefix : str
        Reverse-proxy path prefix that fronts object storage.
    balance_ttl : float
        Cache lifetime in seconds for driver balances.
    notification_ttl : float
        Cache lifetime in seconds for notification lists.
    document_ttl : float
        Cache lifetime in seconds for driver documents.
    """

    candidate_urls: tuple[str, ...] = DEFAULT_CANDIDATE_URLS
    fixed_base_url: str | None = None
    health_path: str = HEALTH_PATH
    probe_timeout: float = PROBE_TIMEOUT_S
    request_timeout: float = REQUEST_TIMEOUT_S
    storage_port: int = STORAGE_PORT
    storage_prefix: str = STORAGE_PREFIX
    balance_ttl: float = BALANCE_TTL_S
    notification_ttl: float = NOTIFICATION_TTL_S
    document_ttl: float = DOCUMENT_TTL_S

    def __post_init__(self) -> None:
        if not self.candidate_urls and not self.fixed_base_url:
            raise FleetConfigError("At least one candidate URL or a fixed_base_url is required")
        for name in ("probe_timeout", "request_timeout", "balance_ttl", "notification_ttl", "document_ttl"):
            if getattr(self, name) <= 0:
                raise FleetConfigError(f"{name} must be positive")
        if not 0 < self.storage_port < 65536:
            raise FleetConfigError(f"storage_port out of range: {self.storage_port}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads optional ``FLEETLINK_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FleetConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        urls_env = env.get("FLEETLINK_CANDIDATE_URLS")
        if urls_env is not None:
            config_kwargs["candidate_urls"] = _split_urls(urls_env)

        _ENV_STR_MAP = {
            "FLEETLINK_BASE_URL": "fixed_base_url",
            "FLEETLINK_HEALTH_PATH": "health_path",
            "FLEETLINK_STORAGE_PREFIX": "storage_prefix",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "FLEETLINK_PROBE_TIMEOUT": "probe_timeout",
            "FLEETLINK_REQUEST_TIMEOUT": "request_timeout",
            "FLEETLINK_BALANCE_TTL": "balance_ttl",
            "FLEETLINK_NOTIFICATION_TTL": "notification_ttl",
            "FLEETLINK_DOCUMENT_TTL": "document_ttl",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        port_env = env.get("FLEETLINK_STORAGE_PORT")
        if port_env is not None and "storage_port" not in overrides:
            config_kwargs["storage_port"] = _env_int("FLEETLINK_STORAGE_PORT", port_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
