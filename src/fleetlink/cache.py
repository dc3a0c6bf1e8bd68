"""Generic stale-while-revalidate cache with per-key single-flight fetches.

One :class:`CacheStore` is instantiated per entity kind (balances,
notifications, documents...) with its own fetcher and TTL.  Entries cycle
through::

    Empty -> Loading -> Fresh -> (Fresh | StaleRefreshing) -> Fresh | Errored

Readers always see either ``None`` (never fetched) or the most recent
successfully fetched value; a failed refresh records ``error`` but never
discards data.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from fleetlink.events import EventBus

_logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


@dataclasses.dataclass
class CacheEntry(Generic[T]):
    """Cached value and fetch status for a single key."""

    data: T | None = None
    last_fetched_at: float | None = None
    is_loading: bool = False
    is_refreshing: bool = False
    error: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.is_loading or self.is_refreshing


class CacheStore(Generic[K, T]):
    """Per-key cache in front of an async *fetcher*.

    Parameters
    ----------
    fetcher : callable
        ``async fetcher(key) -> T``.  Any exception it raises is recorded
        as the entry's ``error``.
    ttl : float
        Seconds after a successful fetch during which cached data counts
        as valid.
    name : str
        Label used in log messages and default error strings.
    clock : callable
        Monotonic seconds source; injectable for tests.
    """

    def __init__(
        self,
        fetcher: Callable[[K], Awaitable[T]],
        *,
        ttl: float,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._fetcher = fetcher
        self._ttl = ttl
        self._name = name or "cache"
        self._clock = clock
        self._entries: dict[K, CacheEntry[T]] = {}
        # Bumped by clear(); results of fetches started under an older
        # generation are dropped on arrival.
        self._generations: dict[K, int] = {}
        self._listeners: EventBus[[K, CacheEntry[T]]] = EventBus(self._name)
        self._background: set[asyncio.Task[None]] = set()
        self._inflight: set[K] = set()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: K) -> CacheEntry[T]:
        """Return a snapshot of the entry for *key* (empty if never fetched)."""
        entry = self._entries.get(key)
        if entry is None:
            return CacheEntry()
        return dataclasses.replace(entry)

    def data(self, key: K) -> T | None:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def keys(self) -> list[K]:
        return list(self._entries)

    def is_valid(self, key: K) -> bool:
        """Whether *key* holds data younger than the TTL."""
        entry = self._entries.get(key)
        if entry is None or entry.data is None or entry.last_fetched_at is None:
            return False
        return (self._clock() - entry.last_fetched_at) < self._ttl

    def subscribe(self, callback: Callable[[K, CacheEntry[T]], None]) -> Callable[[], None]:
        """Call ``callback(key, entry_snapshot)`` after every entry change."""
        return self._listeners.subscribe(callback)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, key: K, force_refresh: bool = False) -> None:
        """Load or refresh *key*.

        Returns once this call's fetch settles.  If a fetch for *key* is
        already in flight the call returns immediately without issuing
        another one; read the entry (or subscribe) to observe the outcome.
        """
        # Checked against the key rather than the entry: clear() drops the
        # entry but the fetch it superseded is still running.
        if key in self._inflight:
            _logger.debug("%s: fetch for %r already in flight", self._name, key)
            return
        self._inflight.add(key)
        try:
            await self._run(key, force_refresh)
        finally:
            self._inflight.discard(key)

    async def _run(self, key: K, force_refresh: bool) -> None:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry()
            self._entries[key] = entry

        background = self.is_valid(key) and not force_refresh
        if background:
            entry.is_refreshing = True
        else:
            entry.is_loading = entry.data is None
            entry.is_refreshing = entry.data is not None
            entry.error = None
        self._notify(key, entry)

        generation = self._generations.get(key, 0)
        try:
            data = await self._fetcher(key)
        except asyncio.CancelledError:
            if self._is_current(key, generation):
                entry.is_loading = False
                entry.is_refreshing = False
                self._notify(key, entry)
            raise
        except Exception as exc:
            if not self._is_current(key, generation):
                _logger.debug("%s: dropping failure for cleared key %r", self._name, key)
                return
            entry.is_loading = False
            entry.is_refreshing = False
            entry.error = str(exc) or f"Failed to load {self._name}"
            if background or entry.data is not None:
                _logger.warning("%s: background refresh for %r failed: %s", self._name, key, entry.error)
            else:
                _logger.error("%s: failed to fetch %r: %s", self._name, key, entry.error)
            self._notify(key, entry)
            return

        if not self._is_current(key, generation):
            _logger.debug("%s: dropping result for cleared key %r", self._name, key)
            return
        entry.data = data
        entry.last_fetched_at = self._clock()
        entry.error = None
        entry.is_loading = False
        entry.is_refreshing = False
        self._notify(key, entry)

    def refresh_in_background(self, key: K, force_refresh: bool = False) -> asyncio.Task[None]:
        """Schedule :meth:`fetch` on the running loop and return its task."""
        task = asyncio.get_running_loop().create_task(self.fetch(key, force_refresh))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # ------------------------------------------------------------------
    # Local mutation and invalidation
    # ------------------------------------------------------------------

    def mutate(self, key: K, update: Callable[[T], T]) -> bool:
        """Replace present data with ``update(data)`` without a remote call.

        Returns ``False`` (and does nothing) when *key* has no data.  The
        fetch timestamp is left alone, so TTL-based refreshes still happen.
        """
        entry = self._entries.get(key)
        if entry is None or entry.data is None:
            return False
        entry.data = update(entry.data)
        self._notify(key, entry)
        return True

    def clear(self, key: K) -> None:
        """Discard cached data for *key* (logout, account switch)."""
        self._generations[key] = self._generations.get(key, 0) + 1
        if self._entries.pop(key, None) is not None:
            self._notify(key, CacheEntry())

    def clear_all(self) -> None:
        for key in set(self._entries) | set(self._generations):
            self.clear(key)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_current(self, key: K, generation: int) -> bool:
        return self._generations.get(key, 0) == generation

    def _notify(self, key: K, entry: CacheEntry[T]) -> None:
        self._listeners.emit(key, dataclasses.replace(entry))
