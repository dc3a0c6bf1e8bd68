"""Ownership of the single current backend address.

Discovery is not free (it costs round-trips to several candidates), so
invalidation is eager and re-resolution is lazy: :meth:`BackendResolver.reset`
only marks the address stale, and the next consumer that needs an address
triggers :meth:`BackendResolver.resolve`.  A stale address stays readable as
a last-resort fallback until a new one is confirmed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from fleetlink.exceptions import BackendUnreachableError

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ResolverState(StrEnum):
    UNKNOWN = "unknown"
    DETECTING = "detecting"
    RESOLVED = "resolved"
    STALE = "stale"


class ResolvedBackend(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str | None = None
    state: ResolverState = ResolverState.UNKNOWN
    resolved_at: datetime | None = None


class BackendProber(Protocol):
    """Discovery strategy used by the resolver.

    Implementations probe their candidates (trying *previous* first when
    given) and return the first reachable base URL, or raise
    :class:`~fleetlink.exceptions.BackendUnreachableError`.
    """

    async def probe_and_resolve(self, previous: str | None) -> str:
        ...


class BackendResolver:
    """Single-flight owner of :class:`ResolvedBackend`."""

    def __init__(
        self,
        prober: BackendProber,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._prober = prober
        self._clock = clock
        self._backend = ResolvedBackend()
        self._inflight: asyncio.Task[str] | None = None

    def get_current_address(self) -> str | None:
        return self._backend.base_url

    def snapshot(self) -> ResolvedBackend:
        return self._backend

    @property
    def state(self) -> ResolverState:
        return self._backend.state

    def seed(self, base_url: str) -> None:
        """Accept *base_url* as resolved without probing."""
        self._set(base_url=base_url.rstrip("/"), state=ResolverState.RESOLVED, resolved_at=self._clock())

    def reset(self) -> None:
        """Mark the current address stale; the next :meth:`resolve` re-validates it."""
        state = self._backend.state
        if state is ResolverState.RESOLVED:
            self._set(state=ResolverState.STALE)
            _logger.info("Backend address %s marked stale", self._backend.base_url)
        elif state is ResolverState.DETECTING:
            _logger.debug("Backend detection already in progress; reset coalesced")

    async def resolve(self) -> str:
        """Return a confirmed backend address, running discovery if needed.

        Raises
        ------
        BackendUnreachableError
            When no candidate answered.  The previous address (if any)
            stays available through :meth:`get_current_address`.
        """
        if self._backend.state is ResolverState.RESOLVED and self._backend.base_url is not None:
            return self._backend.base_url

        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._discover())
            self._inflight = task
        # Callers share one attempt; one caller being cancelled must not cancel it for the others.
        return await asyncio.shield(task)

    async def _discover(self) -> str:
        previous = self._backend.base_url
        fallback_state = ResolverState.STALE if previous is not None else ResolverState.UNKNOWN
        self._set(state=ResolverState.DETECTING)
        _logger.debug("Detecting backend address (previous=%s)", previous)
        try:
            base_url = await self._prober.probe_and_resolve(previous)
        except BackendUnreachableError:
            self._set(state=fallback_state)
            _logger.warning("Backend unreachable; keeping last known address %s", previous)
            raise
        except asyncio.CancelledError:
            self._set(state=fallback_state)
            raise
        except Exception as exc:
            self._set(state=fallback_state)
            raise BackendUnreachableError(f"Backend discovery failed: {exc}") from exc
        finally:
            self._inflight = None

        base_url = base_url.rstrip("/")
        self._set(base_url=base_url, state=ResolverState.RESOLVED, resolved_at=self._clock())
        _logger.info("Backend detected at %s", base_url)
        return base_url

    def _set(self, **changes: object) -> None:
        self._backend = self._backend.model_copy(update=changes)
