"""Typed backend payloads."""

from fleetlink.models.balance import Balance, Transaction, TransactionType
from fleetlink.models.document import DriverDocument
from fleetlink.models.notification import (
    Notification,
    NotificationPriority,
    NotificationType,
    UserRole,
    count_unread,
)

__all__ = [
    "Balance",
    "DriverDocument",
    "Notification",
    "NotificationPriority",
    "NotificationType",
    "Transaction",
    "TransactionType",
    "UserRole",
    "count_unread",
]
