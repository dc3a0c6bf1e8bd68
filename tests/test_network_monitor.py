from __future__ import annotations

from dataclasses import dataclass

import pytest
from fakes import FakeProvider

from fleetlink.network import (
    Advisory,
    AdvisoryKind,
    ConnectivityState,
    NetworkMonitor,
    NetworkTransport,
)


@dataclass
class FakeResolver:
    reset_calls: int = 0
    fail: bool = False

    def reset(self) -> None:
        self.reset_calls += 1
        if self.fail:
            raise RuntimeError("reset failed")


async def _started(
    provider: FakeProvider | None = None,
    resolver: FakeResolver | None = None,
) -> tuple[NetworkMonitor, FakeProvider, FakeResolver, list[bool], list[Advisory]]:
    provider = provider or FakeProvider()
    resolver = resolver or FakeResolver()
    advisories: list[Advisory] = []
    monitor = NetworkMonitor(provider, resolver, on_advisory=advisories.append)
    await monitor.start()
    notifications: list[bool] = []
    monitor.subscribe(notifications.append)
    return monitor, provider, resolver, notifications, advisories


@pytest.mark.asyncio
async def test_start_loads_initial_snapshot_without_side_effects() -> None:
    provider = FakeProvider(initial=ConnectivityState(online=False, transport=NetworkTransport.NONE))
    monitor, _, resolver, notifications, advisories = await _started(provider)

    snapshot = monitor.get_snapshot()
    assert snapshot.online is False
    assert snapshot.transport is NetworkTransport.NONE
    assert resolver.reset_calls == 0
    assert notifications == []
    assert advisories == []
    assert monitor.is_running


@pytest.mark.asyncio
async def test_wifi_to_cellular_while_online_resets_backend_once() -> None:
    monitor, provider, resolver, notifications, advisories = await _started()

    provider.emit(True, NetworkTransport.CELLULAR)

    assert resolver.reset_calls == 1
    assert notifications == [True]
    assert [a.kind for a in advisories] == [AdvisoryKind.NETWORK_CHANGED]
    assert monitor.get_snapshot().transport is NetworkTransport.CELLULAR


@pytest.mark.asyncio
async def test_went_offline_notifies_without_reset() -> None:
    _, provider, resolver, notifications, advisories = await _started()

    provider.emit(False, NetworkTransport.NONE)

    assert notifications == [False]
    assert resolver.reset_calls == 0
    assert [a.kind for a in advisories] == [AdvisoryKind.OFFLINE]


@pytest.mark.asyncio
async def test_came_online_resets_backend_and_notifies() -> None:
    _, provider, resolver, notifications, advisories = await _started()

    provider.emit(False, NetworkTransport.NONE)
    provider.emit(True, NetworkTransport.WIFI)

    assert notifications == [False, True]
    assert resolver.reset_calls == 1
    assert [a.kind for a in advisories] == [AdvisoryKind.OFFLINE, AdvisoryKind.BACK_ONLINE]


@pytest.mark.asyncio
async def test_same_state_event_only_updates_snapshot() -> None:
    monitor, provider, resolver, notifications, advisories = await _started()
    before = monitor.get_snapshot()

    provider.emit(True, NetworkTransport.WIFI)

    assert monitor.get_snapshot() is not before
    assert resolver.reset_calls == 0
    assert notifications == []
    assert advisories == []


@pytest.mark.asyncio
async def test_first_transport_report_is_not_a_change() -> None:
    provider = FakeProvider(initial=ConnectivityState(online=True, transport=None))
    _, provider, resolver, notifications, _ = await _started(provider)

    provider.emit(True, NetworkTransport.WIFI)

    assert resolver.reset_calls == 0
    assert notifications == []


@pytest.mark.asyncio
async def test_reset_failure_is_logged_not_raised() -> None:
    _, provider, resolver, notifications, _ = await _started(resolver=FakeResolver(fail=True))

    provider.emit(True, NetworkTransport.CELLULAR)

    assert resolver.reset_calls == 1
    assert notifications == [True]


@pytest.mark.asyncio
async def test_stop_unsubscribes_from_provider() -> None:
    monitor, provider, resolver, notifications, _ = await _started()

    monitor.stop()
    monitor.stop()
    provider.emit(False, NetworkTransport.NONE)

    assert provider.callbacks == []
    assert notifications == []
    assert not monitor.is_running


@pytest.mark.asyncio
async def test_start_twice_subscribes_once() -> None:
    provider = FakeProvider()
    monitor = NetworkMonitor(provider, FakeResolver())

    await monitor.start()
    await monitor.start()

    assert len(provider.callbacks) == 1


@pytest.mark.asyncio
async def test_subscription_failure_leaves_monitor_silent() -> None:
    provider = FakeProvider(fail_subscribe=True)
    monitor = NetworkMonitor(provider, FakeResolver())

    stop = await monitor.start()
    stop()

    assert not monitor.is_running
    assert monitor.get_snapshot().transport is NetworkTransport.WIFI


@pytest.mark.asyncio
async def test_check_connection_applies_fresh_reading() -> None:
    monitor, provider, _, notifications, _ = await _started()
    provider.initial = ConnectivityState(online=False, transport=NetworkTransport.NONE)

    online = await monitor.check_connection()

    assert online is False
    assert notifications == [False]


def test_unknown_transport_names_map_to_other() -> None:
    state = ConnectivityState.model_validate({"online": True, "transport": "ethernet"})
    assert state.transport is NetworkTransport.OTHER
