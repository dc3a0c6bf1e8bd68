"""Driver document model."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import field_validator

from fleetlink.models._base import FleetBaseModel, parse_iso_date


class DriverDocument(FleetBaseModel):
    """A document on file for a driver (licence, visa, insurance...).

    ``file_url`` is whatever the backend stores; pass it through
    :class:`~fleetlink.urls.UrlResolver` before loading it.
    """

    id: str
    driver_id: str = ""
    document_type: str = ""
    document_number: str | None = None
    file_url: str | None = None
    expiry_date: date | None = None
    is_active: bool = True
    notes: str | None = None

    @field_validator("id", "driver_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> str:
        return str(value)

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _parse_expiry(cls, value: Any) -> date | None:
        return parse_iso_date(value)

    def days_until_expiry(self, today: date) -> int | None:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - today).days
