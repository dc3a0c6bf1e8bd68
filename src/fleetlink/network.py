"""Connectivity tracking on top of the platform network-state provider.

The monitor turns raw provider events into three transitions:

* *went offline*: subscribers are told ``False`` and an ``OFFLINE``
  advisory is raised;
* *came online*: the backend address is invalidated (the device may be
  on a different network) and subscribers are told ``True``;
* *transport changed while online* (e.g. wifi to cellular): handled like
  *came online*, since the backend is likely reachable at another address.

Events that match none of these only update the stored snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from fleetlink.events import EventBus

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class NetworkTransport(StrEnum):
    WIFI = "wifi"
    CELLULAR = "cellular"
    NONE = "none"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> NetworkTransport:
        # Providers report many more medium names (ethernet, vpn, bluetooth...).
        return cls.OTHER


class ConnectivityState(BaseModel):
    """Snapshot of device connectivity as last reported by the provider."""

    model_config = ConfigDict(frozen=True)

    online: bool = True
    transport: NetworkTransport | None = None
    observed_at: datetime = Field(default_factory=_utcnow)


class AdvisoryKind(StrEnum):
    OFFLINE = "offline"
    BACK_ONLINE = "back_online"
    NETWORK_CHANGED = "network_changed"


class Advisory(BaseModel):
    """User-facing, non-fatal notice about a connectivity transition."""

    model_config = ConfigDict(frozen=True)

    kind: AdvisoryKind
    message: str
    state: ConnectivityState


_ADVISORY_MESSAGES: dict[AdvisoryKind, str] = {
    AdvisoryKind.OFFLINE: "You are offline. Showing cached data.",
    AdvisoryKind.BACK_ONLINE: "Connection restored. Detecting backend...",
    AdvisoryKind.NETWORK_CHANGED: "Network changed. Detecting new backend address...",
}


class ConnectivityProvider(Protocol):
    """Platform network-state source (NetInfo, NetworkManager, a test double...)."""

    async def fetch_once(self) -> ConnectivityState:
        ...

    def subscribe(self, callback: Callable[[ConnectivityState], None]) -> Callable[[], None]:
        ...


class AddressInvalidator(Protocol):
    def reset(self) -> None:
        ...


class NetworkMonitor:
    """Owned connectivity tracker with an explicit ``start``/``stop`` lifecycle.

    Usage::

        monitor = NetworkMonitor(provider, resolver)
        unsubscribe = await monitor.start()
        monitor.subscribe(lambda online: ...)
    """

    def __init__(
        self,
        provider: ConnectivityProvider,
        resolver: AddressInvalidator,
        *,
        on_advisory: Callable[[Advisory], None] | None = None,
    ) -> None:
        self._provider = provider
        self._resolver = resolver
        self._on_advisory = on_advisory
        self._state = ConnectivityState()
        self._listeners: EventBus[[bool]] = EventBus("network monitor")
        self._provider_unsubscribe: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> Callable[[], None]:
        """Load the provider's current snapshot and follow its events.

        Returns a callable equivalent to :meth:`stop`.
        """
        if self._provider_unsubscribe is not None:
            return self.stop

        try:
            self._state = await self._provider.fetch_once()
        except Exception:
            _logger.warning("Initial connectivity snapshot unavailable", exc_info=True)
        else:
            _logger.info(
                "Network: initial status %s (%s)",
                "ONLINE" if self._state.online else "OFFLINE",
                self._state.transport,
            )

        try:
            self._provider_unsubscribe = self._provider.subscribe(self._handle_event)
        except Exception:
            # Not retried; the monitor stays silent until start() is called again.
            _logger.warning("Connectivity provider subscription failed", exc_info=True)
        return self.stop

    def stop(self) -> None:
        unsubscribe = self._provider_unsubscribe
        self._provider_unsubscribe = None
        if unsubscribe is None:
            return
        try:
            unsubscribe()
        except Exception:
            _logger.debug("Connectivity provider unsubscribe failed", exc_info=True)

    @property
    def is_running(self) -> bool:
        return self._provider_unsubscribe is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_snapshot(self) -> ConnectivityState:
        return self._state

    @property
    def is_online(self) -> bool:
        return self._state.online

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Register *callback* for online/offline notifications."""
        return self._listeners.subscribe(callback)

    async def check_connection(self) -> bool:
        """Re-read connectivity from the provider and apply it as an event."""
        self._handle_event(await self._provider.fetch_once())
        return self._state.online

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def _handle_event(self, state: ConnectivityState) -> None:
        was_online = self._state.online
        previous_transport = self._state.transport
        self._state = state
        is_online = state.online

        if was_online and not is_online:
            _logger.warning("Network: OFFLINE, serving cached data")
            self._advise(AdvisoryKind.OFFLINE)
            self._listeners.emit(False)
        elif not was_online and is_online:
            _logger.info("Network: ONLINE (%s), re-detecting backend", state.transport)
            self._invalidate_backend()
            self._advise(AdvisoryKind.BACK_ONLINE)
            self._listeners.emit(True)
        elif is_online and previous_transport is not None and previous_transport != state.transport:
            _logger.info("Network changed: %s -> %s", previous_transport, state.transport)
            self._invalidate_backend()
            self._advise(AdvisoryKind.NETWORK_CHANGED)
            self._listeners.emit(True)

    def _invalidate_backend(self) -> None:
        try:
            self._resolver.reset()
        except Exception:
            _logger.error("Failed to reset backend detection", exc_info=True)

    def _advise(self, kind: AdvisoryKind) -> None:
        if self._on_advisory is None:
            return
        advisory = Advisory(kind=kind, message=_ADVISORY_MESSAGES[kind], state=self._state)
        try:
            self._on_advisory(advisory)
        except Exception:
            _logger.debug("Advisory callback failed", exc_info=True)
