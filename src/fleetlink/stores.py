"""Entity stores: one :class:`~fleetlink.cache.CacheStore` per entity kind.

Each store wires the generic cache to a backend endpoint, a payload model
and the TTL that suits how fast the entity changes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Hashable
from datetime import date
from typing import Any, Generic, TypeVar

from fleetlink._constants import BALANCE_TTL_S, DOCUMENT_EXPIRY_WINDOW_DAYS, DOCUMENT_TTL_S, NOTIFICATION_TTL_S
from fleetlink._transport import Transport
from fleetlink.cache import CacheEntry, CacheStore
from fleetlink.exceptions import FleetError
from fleetlink.models._base import utc_today
from fleetlink.models.balance import Balance, Transaction
from fleetlink.models.document import DriverDocument
from fleetlink.models.notification import Notification, UserRole, count_unread

_logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")

NotificationKey = tuple[str, UserRole]


def _as_list(payload: Any, endpoint: str, *, nested_key: str | None = None) -> list[Any]:
    if nested_key is not None and isinstance(payload, dict) and isinstance(payload.get(nested_key), list):
        payload = payload[nested_key]
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list from {endpoint}, got {type(payload).__name__}")
    return payload


class EntityStore(Generic[K, T]):
    """Thin facade over a :class:`CacheStore` bound to one entity kind."""

    def __init__(self, cache: CacheStore[K, T]) -> None:
        self.cache = cache

    async def fetch(self, key: K, force_refresh: bool = False) -> None:
        await self.cache.fetch(key, force_refresh)

    def get(self, key: K) -> CacheEntry[T]:
        return self.cache.get(key)

    def subscribe(self, callback: Callable[[K, CacheEntry[T]], None]) -> Callable[[], None]:
        return self.cache.subscribe(callback)

    def clear(self, key: K | None = None) -> None:
        if key is None:
            self.cache.clear_all()
        else:
            self.cache.clear(key)


class BalanceStore(EntityStore[str, Balance]):
    """Driver balances, keyed by driver id."""

    def __init__(
        self,
        transport: Transport,
        *,
        ttl: float = BALANCE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(CacheStore(self._load, ttl=ttl, name="balance", clock=clock))
        self._transport = transport
        self._transactions: dict[str, list[Transaction]] = {}

    async def _load(self, driver_id: str) -> Balance:
        payload = await self._transport.get_json(f"/drivers/{driver_id}/balance")
        return Balance.model_validate(payload)

    def transactions(self, driver_id: str) -> list[Transaction]:
        return list(self._transactions.get(driver_id, []))

    async def fetch_transactions(
        self,
        driver_id: str,
        *,
        month: int | None = None,
        year: int | None = None,
        transaction_type: str | None = None,
    ) -> list[Transaction]:
        """Load transaction history (uncached).

        On failure the error is logged and the last loaded list is returned.
        """
        endpoint = f"/driver-balance/{driver_id}/transactions"
        params = {"month": month, "year": year, "transaction_type": transaction_type}
        try:
            payload = await self._transport.get_json(endpoint, params=params)
            items = [Transaction.model_validate(item) for item in _as_list(payload, endpoint, nested_key="transactions")]
        except (FleetError, ValueError):
            _logger.error("Failed to fetch transactions for %s", driver_id, exc_info=True)
            return self.transactions(driver_id)
        self._transactions[driver_id] = items
        return list(items)

    def clear(self, key: str | None = None) -> None:
        super().clear(key)
        if key is None:
            self._transactions.clear()
        else:
            self._transactions.pop(key, None)


class NotificationStore(EntityStore[NotificationKey, list[Notification]]):
    """Notification lists, keyed by ``(user_id, role)``.

    Read-state changes are optimistic: the cached list is updated first and
    the backend is told afterwards on a best-effort basis.  A failed sync is
    logged and not rolled back, so the local list may show an item as read
    until the next refresh brings the server's view back.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        ttl: float = NOTIFICATION_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(CacheStore(self._load, ttl=ttl, name="notifications", clock=clock))
        self._transport = transport

    async def _load(self, key: NotificationKey) -> list[Notification]:
        user_id, role = key
        endpoint = "/notifications/"
        payload = await self._transport.get_json(
            endpoint,
            params={"user_id": user_id, "user_role": UserRole(role).value},
        )
        return [Notification.model_validate(item) for item in _as_list(payload, endpoint)]

    def unread_count(self, key: NotificationKey) -> int:
        return count_unread(self.cache.data(key) or [])

    async def mark_as_read(self, key: NotificationKey, notification_id: str) -> bool:
        """Mark one notification read locally, then sync it to the backend.

        Returns whether the cached list contained the notification.
        """
        found = False

        def _update(items: list[Notification]) -> list[Notification]:
            nonlocal found
            updated = []
            for item in items:
                if item.id == notification_id:
                    found = True
                    item = item.as_read()
                updated.append(item)
            return updated

        self.cache.mutate(key, _update)
        await self._sync_read(key[0], notification_id)
        return found

    async def mark_all_as_read(self, key: NotificationKey) -> int:
        """Mark every cached notification read; returns how many were unread."""
        unread = [n.id for n in self.cache.data(key) or [] if not n.is_read]
        if not unread:
            return 0
        self.cache.mutate(key, lambda items: [n.as_read() for n in items])
        # No bulk endpoint on the backend; one request per notification.
        await asyncio.gather(*(self._sync_read(key[0], nid) for nid in unread))
        return len(unread)

    async def _sync_read(self, user_id: str, notification_id: str) -> None:
        try:
            await self._transport.put_json(
                f"/notifications/{notification_id}/read",
                params={"user_id": user_id},
            )
        except FleetError as exc:
            _logger.warning("Failed to sync read state of notification %s: %s", notification_id, exc)


class DocumentStore(EntityStore[str, list[DriverDocument]]):
    """Driver documents, keyed by driver id."""

    def __init__(
        self,
        transport: Transport,
        *,
        ttl: float = DOCUMENT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = utc_today,
    ) -> None:
        super().__init__(CacheStore(self._load, ttl=ttl, name="documents", clock=clock))
        self._transport = transport
        self._today = today

    async def _load(self, driver_id: str) -> list[DriverDocument]:
        endpoint = f"/documents/driver/{driver_id}"
        payload = await self._transport.get_json(endpoint)
        return [DriverDocument.model_validate(item) for item in _as_list(payload, endpoint)]

    def expiring_documents(
        self,
        driver_id: str,
        within_days: int = DOCUMENT_EXPIRY_WINDOW_DAYS,
    ) -> list[DriverDocument]:
        """Active documents expiring today or within *within_days* days."""
        today = self._today()
        expiring = []
        for doc in self.cache.data(driver_id) or []:
            days = doc.days_until_expiry(today)
            if doc.is_active and days is not None and 0 <= days <= within_days:
                expiring.append(doc)
        return sorted(expiring, key=lambda d: d.expiry_date or today)

    def nearest_expiry_days(self, driver_id: str) -> int | None:
        """Days until the soonest upcoming expiry, ignoring already-expired documents."""
        today = self._today()
        upcoming = [
            days
            for doc in self.cache.data(driver_id) or []
            if (days := doc.days_until_expiry(today)) is not None and days >= 0
        ]
        return min(upcoming, default=None)
