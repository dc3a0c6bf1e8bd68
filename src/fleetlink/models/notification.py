"""Notification models."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from fleetlink.models._base import FleetBaseModel, FleetEnum


class UserRole(FleetEnum):
    DRIVER = "driver"
    ADMIN = "admin"
    UNKNOWN = "unknown"


class NotificationType(FleetEnum):
    ASSIGNMENT = "assignment"
    LEAVE_REQUEST = "leave_request"
    PAYMENT = "payment"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class NotificationPriority(FleetEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class Notification(FleetBaseModel):
    id: str
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.UNKNOWN
    priority: NotificationPriority = NotificationPriority.UNKNOWN
    is_read: bool = False
    created_at: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    def as_read(self) -> Notification:
        if self.is_read:
            return self
        return self.model_copy(update={"is_read": True})


def count_unread(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)
