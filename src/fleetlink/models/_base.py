"""Base model and enum for backend payloads.

Every payload model inherits from :class:`FleetBaseModel` which provides:

* frozen instances, so cached values can be shared between readers;
* tolerance for unknown keys the backend may add;
* a ``raw`` dict that captures the original payload.

Categorical fields use :class:`FleetEnum`, whose ``_missing_`` hook maps
values without a member to ``UNKNOWN`` instead of failing validation.
"""

from __future__ import annotations

import enum
from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def parse_iso_date(value: Any) -> date | None:
    """Parse an ISO date or datetime string into a :class:`date`.

    Returns ``None`` for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None


def utc_today() -> date:
    return datetime.now(UTC).date()


class FleetEnum(str, enum.Enum):
    """Base for string enums in backend payloads.

    Every subclass **must** define ``UNKNOWN = "unknown"``.
    """

    @classmethod
    def _missing_(cls, value: object) -> FleetEnum:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        unknown: FleetEnum = cls["UNKNOWN"]
        return unknown


class FleetBaseModel(BaseModel):
    """Base for backend payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API payload."""

    @model_validator(mode="before")
    @classmethod
    def _ensure_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        # Keep the caller's raw= when constructing from kwargs.
        if "raw" in values:
            return values
        merged = {k: v for k, v in values.items() if v is not None}
        merged["raw"] = dict(values)
        return merged
