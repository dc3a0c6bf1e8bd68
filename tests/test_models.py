from __future__ import annotations

from datetime import date

from fleetlink.models import (
    Balance,
    DriverDocument,
    Notification,
    NotificationPriority,
    NotificationType,
    count_unread,
)
from fleetlink.models._base import parse_iso_date


def test_balance_keeps_raw_payload_and_coerces_garbage() -> None:
    payload = {"current_balance": "n/a", "total_payments": "12.5", "extra_field": 1}
    balance = Balance.model_validate(payload)

    assert balance.current_balance == 0.0
    assert balance.total_payments == 12.5
    assert balance.raw == payload


def test_notification_enums_tolerate_unknown_and_case() -> None:
    n = Notification.model_validate({"id": 7, "type": "Leave_Request", "priority": "urgent"})

    assert n.id == "7"
    assert n.type is NotificationType.LEAVE_REQUEST
    assert n.priority is NotificationPriority.UNKNOWN


def test_as_read_returns_copy() -> None:
    n = Notification.model_validate({"id": "n1", "is_read": False})

    read = n.as_read()

    assert read.is_read is True
    assert n.is_read is False
    assert read.as_read() is read
    assert count_unread([n, read]) == 1


def test_document_expiry_parsing() -> None:
    doc = DriverDocument.model_validate({"id": "a", "driver_id": 12, "expiry_date": "2026-12-31T10:00:00Z"})

    assert doc.driver_id == "12"
    assert doc.expiry_date == date(2026, 12, 31)
    assert doc.days_until_expiry(date(2026, 12, 30)) == 1


def test_document_with_bad_expiry_has_none() -> None:
    doc = DriverDocument.model_validate({"id": "a", "expiry_date": "someday"})

    assert doc.expiry_date is None
    assert doc.days_until_expiry(date(2026, 1, 1)) is None


def test_parse_iso_date_variants() -> None:
    assert parse_iso_date("2026-03-04") == date(2026, 3, 4)
    assert parse_iso_date("") is None
    assert parse_iso_date(None) is None
    assert parse_iso_date(date(2026, 3, 4)) == date(2026, 3, 4)
