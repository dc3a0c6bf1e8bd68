"""Backend discovery by probing candidate health endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import aiohttp

from fleetlink._constants import USER_AGENT
from fleetlink.config import FleetConfig
from fleetlink.exceptions import BackendUnreachableError

_logger = logging.getLogger(__name__)


def candidate_order(previous: str | None, candidates: Iterable[str]) -> list[str]:
    """Return candidates to probe, previously-known address first, without duplicates."""
    ordered: list[str] = []
    for url in ([previous] if previous else []) + list(candidates):
        normalized = url.rstrip("/")
        if normalized and normalized not in ordered:
            ordered.append(normalized)
    return ordered


class HttpBackendProber:
    """Probe ``GET {candidate}{health_path}`` on every candidate concurrently.

    The first healthy candidate in priority order wins, so discovery takes
    about one probe timeout however many candidates there are.
    """

    def __init__(self, config: FleetConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def is_reachable(self, base_url: str) -> bool:
        url = f"{base_url}{self._config.health_path}"
        timeout = aiohttp.ClientTimeout(total=self._config.probe_timeout)
        try:
            async with self._http.get(url, timeout=timeout, headers={"user-agent": USER_AGENT}) as resp:
                return resp.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _logger.debug("%s not reachable (%s)", base_url, exc)
            return False

    async def probe_and_resolve(self, previous: str | None) -> str:
        if self._config.fixed_base_url:
            return self._config.fixed_base_url.rstrip("/")
        candidates = candidate_order(previous, self._config.candidate_urls)
        _logger.debug("Probing backend candidates: %s", candidates)
        # All probes run at once; priority order decides among the healthy ones.
        reachable = await asyncio.gather(*(self.is_reachable(url) for url in candidates))
        for base_url, ok in zip(candidates, reachable):
            if ok:
                return base_url
        raise BackendUnreachableError(
            f"No backend responded on {len(candidates)} candidate(s)",
            candidates=candidates,
        )
