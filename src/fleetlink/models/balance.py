"""Driver balance and transaction models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from fleetlink.models._base import FleetBaseModel, FleetEnum


def _safe_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class Balance(FleetBaseModel):
    """Running account summary for a driver.

    Parameters
    ----------
    current_balance : float
        Amount owed (positive) or in credit (negative).
    total_rent_due : float
        Accumulated rent charges.
    total_payments : float
        Accumulated payments received.
    total_credits : float
        Accumulated credits granted.
    """

    current_balance: float = 0.0
    total_rent_due: float = 0.0
    total_payments: float = 0.0
    total_credits: float = 0.0

    @field_validator("current_balance", "total_rent_due", "total_payments", "total_credits", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> float:
        return _safe_float(value)


class TransactionType(FleetEnum):
    RENT = "rent"
    PAYMENT = "payment"
    CREDIT = "credit"
    PENALTY = "penalty"
    REFUND = "refund"
    UNKNOWN = "unknown"


class Transaction(FleetBaseModel):
    id: str
    date: str = ""
    type: TransactionType = TransactionType.UNKNOWN
    amount: float = 0.0
    description: str = ""
    balance_after: float = Field(default=0.0)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("amount", "balance_after", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> float:
        return _safe_float(value)
