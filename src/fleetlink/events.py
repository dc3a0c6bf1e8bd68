"""Ordered subscriber registry.

Used by :class:`~fleetlink.network.NetworkMonitor` for online/offline
notifications and by :class:`~fleetlink.cache.CacheStore` for reactive
entry updates.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Generic, ParamSpec

_logger = logging.getLogger(__name__)

P = ParamSpec("P")


class EventBus(Generic[P]):
    """Callbacks invoked in registration order.

    Every :meth:`subscribe` call is a separate registration, so the same
    callable subscribed twice is invoked twice.  The returned unsubscribe
    removes only its own registration and is safe to call repeatedly.
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._ids = itertools.count()
        self._subscribers: dict[int, Callable[P, None]] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[P, None]) -> Callable[[], None]:
        token = next(self._ids)
        self._subscribers[token] = callback

        def _unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return _unsubscribe

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Invoke every subscriber.

        A failing subscriber is logged and does not prevent the remaining
        subscribers from being called.
        """
        # Snapshot so callbacks may (un)subscribe while we iterate.
        for callback in list(self._subscribers.values()):
            try:
                callback(*args, **kwargs)
            except Exception:
                _logger.exception("Subscriber %r of %s failed", callback, self._name or "event bus")

    def clear(self) -> None:
        self._subscribers.clear()
