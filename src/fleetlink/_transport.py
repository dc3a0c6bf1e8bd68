"""JSON-over-HTTP transport bound to the currently resolved backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import aiohttp

from fleetlink._constants import REQUEST_TIMEOUT_S, USER_AGENT
from fleetlink.exceptions import FetchFailedError, NetworkUnavailableError
from fleetlink.resolver import BackendResolver

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the entity stores.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`BackendTransport`) concrete.
    """

    async def get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    async def put_json(
        self,
        path: str,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        ...


class BackendTransport:
    """HTTP transport that resolves the backend address before each request.

    A connection-level failure marks the address stale so that the next
    request re-runs discovery; the failed request itself is not retried.
    When *is_online* reports the device offline, requests fail fast with
    :class:`~fleetlink.exceptions.NetworkUnavailableError`.
    """

    def __init__(
        self,
        resolver: BackendResolver,
        http_session: aiohttp.ClientSession,
        *,
        request_timeout: float = REQUEST_TIMEOUT_S,
        is_online: Callable[[], bool] | None = None,
    ) -> None:
        self._resolver = resolver
        self._is_online = is_online
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)

    async def get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post_json(self, path: str, payload: Mapping[str, Any] | None = None) -> Any:
        return await self._request("POST", path, payload=payload)

    async def put_json(
        self,
        path: str,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self._request("PUT", path, params=params, payload=payload)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        if self._is_online is not None and not self._is_online():
            raise NetworkUnavailableError(f"Device is offline; {method} {path} not sent")
        base_url = await self._resolver.resolve()
        url = f"{base_url}/{path.lstrip('/')}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        query = {k: str(v) for k, v in params.items() if v is not None} if params else None

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                params=query,
                json=dict(payload) if payload is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise FetchFailedError(
                        f"HTTP {resp.status} from {path}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=path,
                    )
        except FetchFailedError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _logger.info("Network error on %s; clearing cached backend address", path)
            self._resolver.reset()
            raise FetchFailedError(
                f"Request to {path} failed: {exc or type(exc).__name__}",
                endpoint=path,
            ) from exc

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FetchFailedError(
                f"Invalid JSON from {path}: {text[:200]}",
                endpoint=path,
            ) from exc
