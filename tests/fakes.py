"""Test doubles shared by transport, discovery and client tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fleetlink.network import ConnectivityState, NetworkTransport


class FakeResponse:
    def __init__(self, status: int, body: Any = None) -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        if self._body is None:
            return ""
        if isinstance(self._body, str):
            return self._body
        return json.dumps(self._body)

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeHttpSession:
    """Minimal stand-in for ``aiohttp.ClientSession``.

    ``routes`` maps full URLs (without query string) to either a
    ``(status, body)`` tuple or an exception to raise.
    """

    routes: dict[str, tuple[int, Any] | Exception] = field(default_factory=dict)
    calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    closed: bool = False

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, {"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def urls_called(self) -> list[str]:
        return [url for _, url, _ in self.calls]

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeProvider:
    """Connectivity provider driven by :meth:`emit`."""

    initial: ConnectivityState = field(
        default_factory=lambda: ConnectivityState(online=True, transport=NetworkTransport.WIFI)
    )
    callbacks: list[Callable[[ConnectivityState], None]] = field(default_factory=list)
    fetch_calls: int = 0
    fail_subscribe: bool = False

    async def fetch_once(self) -> ConnectivityState:
        self.fetch_calls += 1
        return self.initial

    def subscribe(self, callback: Callable[[ConnectivityState], None]) -> Callable[[], None]:
        if self.fail_subscribe:
            raise RuntimeError("provider unavailable")
        self.callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return _unsubscribe

    def emit(self, online: bool, transport: NetworkTransport | None) -> None:
        for callback in list(self.callbacks):
            callback(ConnectivityState(online=online, transport=transport))
