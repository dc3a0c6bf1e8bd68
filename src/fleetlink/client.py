"""High-level async client wiring the resilience layer together."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from fleetlink._discovery import HttpBackendProber
from fleetlink._transport import BackendTransport
from fleetlink.config import FleetConfig
from fleetlink.exceptions import FleetError
from fleetlink.network import Advisory, ConnectivityProvider, NetworkMonitor
from fleetlink.resolver import BackendResolver
from fleetlink.stores import BalanceStore, DocumentStore, NotificationStore
from fleetlink.urls import UrlResolver

_logger = logging.getLogger(__name__)


class FleetClient:
    """Async entry point for the fleet backend.

    Usage::

        async with FleetClient(config, provider) as client:
            await client.balances.fetch(driver_id)
            entry = client.balances.get(driver_id)

    On enter the network monitor starts following *provider*; on exit it
    stops and the HTTP session is closed (unless it was injected).
    """

    def __init__(
        self,
        config: FleetConfig,
        provider: ConnectivityProvider,
        *,
        session: aiohttp.ClientSession | None = None,
        on_advisory: Callable[[Advisory], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._provider = provider
        self._external_session = session is not None
        self._http_session = session
        self._on_advisory = on_advisory
        self._clock = clock
        self._resolver: BackendResolver | None = None
        self._transport: BackendTransport | None = None
        self._monitor: NetworkMonitor | None = None
        self._urls: UrlResolver | None = None
        self._balances: BalanceStore | None = None
        self._notifications: NotificationStore | None = None
        self._documents: DocumentStore | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        config = self._config

        resolver = BackendResolver(HttpBackendProber(config, self._http_session))
        if config.fixed_base_url:
            resolver.seed(config.fixed_base_url)
        monitor = NetworkMonitor(self._provider, resolver, on_advisory=self._on_advisory)
        transport = BackendTransport(
            resolver,
            self._http_session,
            request_timeout=config.request_timeout,
            is_online=lambda: monitor.is_online,
        )

        self._resolver = resolver
        self._monitor = monitor
        self._transport = transport
        self._urls = UrlResolver(resolver, storage_port=config.storage_port, storage_prefix=config.storage_prefix)
        self._balances = BalanceStore(transport, ttl=config.balance_ttl, clock=self._clock)
        self._notifications = NotificationStore(transport, ttl=config.notification_ttl, clock=self._clock)
        self._documents = DocumentStore(transport, ttl=config.document_ttl, clock=self._clock)

        await monitor.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._monitor is not None:
            self._monitor.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _require(self, component: Any, name: str) -> Any:
        if component is None:
            raise FleetError(f"Client not initialized ({name}). Use 'async with FleetClient(...) as client:'")
        return component

    @property
    def resolver(self) -> BackendResolver:
        resolver: BackendResolver = self._require(self._resolver, "resolver")
        return resolver

    @property
    def transport(self) -> BackendTransport:
        transport: BackendTransport = self._require(self._transport, "transport")
        return transport

    @property
    def network(self) -> NetworkMonitor:
        monitor: NetworkMonitor = self._require(self._monitor, "network")
        return monitor

    @property
    def urls(self) -> UrlResolver:
        urls: UrlResolver = self._require(self._urls, "urls")
        return urls

    @property
    def balances(self) -> BalanceStore:
        store: BalanceStore = self._require(self._balances, "balances")
        return store

    @property
    def notifications(self) -> NotificationStore:
        store: NotificationStore = self._require(self._notifications, "notifications")
        return store

    @property
    def documents(self) -> DocumentStore:
        store: DocumentStore = self._require(self._documents, "documents")
        return store

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def resolve_url(self, path: str | None) -> str | None:
        return self.urls.resolve(path)

    def clear_caches(self) -> None:
        """Drop every cached entity (logout / account switch)."""
        for store in (self._balances, self._notifications, self._documents):
            if store is not None:
                store.clear()
        _logger.debug("All entity caches cleared")
