# sales/services/records.py

"""
SALE / PAYMENT RECORDS (DOMAIN)

Purpose:
- Typed, immutable shapes for what checkout produces:
    PaymentMethod  closed set: cash | card | pix
    PaymentDetails method + amount tendered + change (cash only)
    SaleRecord     snapshot of the cart at completion + total + payment
- Validated (de)serialization for the persistence boundary:
  from_payload() rejects malformed data with InvalidInputError; the store layer
  turns that into PersistenceError when the bad data came from the database.

Money:
- Decimal, 2dp, serialized as strings ("32.80") to avoid float drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import models

from pos.services.cart import CartLineItem, money
from pos.services.exceptions import InvalidInputError


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Dinheiro"
    CARD = "card", "Cartão"
    PIX = "pix", "PIX"


def coerce_payment_method(value) -> PaymentMethod:
    raw = value.value if isinstance(value, PaymentMethod) else str(value or "").strip().lower()
    try:
        return PaymentMethod(raw)
    except ValueError as exc:
        allowed = ", ".join(PaymentMethod.values)
        raise InvalidInputError(f"Invalid payment method {value!r}. Must be one of: {allowed}") from exc


def _money_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else f"{value:.2f}"


@dataclass(frozen=True)
class PaymentDetails:
    method: PaymentMethod
    amount: Decimal
    change: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "method", coerce_payment_method(self.method))

        amount = money(self.amount)
        if amount < Decimal("0.00"):
            raise InvalidInputError("Payment amount cannot be negative")
        object.__setattr__(self, "amount", amount)

        if self.change is not None:
            change = money(self.change)
            if change <= Decimal("0.00"):
                raise InvalidInputError("Change must be positive when present")
            if self.method != PaymentMethod.CASH:
                raise InvalidInputError("Change only applies to cash payments")
            object.__setattr__(self, "change", change)

    @classmethod
    def from_input(cls, method, amount) -> "PaymentDetails":
        if amount is None or amount == "":
            raise InvalidInputError("Payment amount is required")
        return cls(method=method, amount=amount)

    def to_payload(self) -> dict:
        return {
            "method": self.method.value,
            "amount": _money_str(self.amount),
            "change": _money_str(self.change),
        }

    @classmethod
    def from_payload(cls, data) -> "PaymentDetails":
        if not isinstance(data, dict):
            raise InvalidInputError("payment payload must be an object")
        return cls(
            method=data.get("method"),
            amount=data.get("amount"),
            change=data.get("change"),
        )


@dataclass(frozen=True)
class SaleRecord:
    """
    Immutable record of a completed transaction.

    items is a tuple of (frozen) CartLineItem values copied from the cart at
    completion time; later cart edits cannot reach it.
    """

    id: str
    items: tuple
    total: Decimal
    payment: PaymentDetails
    created_at: str
    customer_name: Optional[str] = None
    cashier_id: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise InvalidInputError("SaleRecord.id is required")
        object.__setattr__(self, "id", str(self.id))

        items = tuple(self.items or ())
        if not items:
            raise InvalidInputError("SaleRecord must contain at least one line item")
        for item in items:
            if not isinstance(item, CartLineItem):
                raise InvalidInputError("SaleRecord items must be CartLineItem values")
        object.__setattr__(self, "items", items)

        total = money(self.total)
        if total < Decimal("0.00"):
            raise InvalidInputError("SaleRecord.total cannot be negative")
        object.__setattr__(self, "total", total)

        if not isinstance(self.payment, PaymentDetails):
            raise InvalidInputError("SaleRecord.payment must be PaymentDetails")

        try:
            created = datetime.fromisoformat(str(self.created_at))
        except ValueError as exc:
            raise InvalidInputError(f"created_at is not ISO-8601: {self.created_at!r}") from exc
        if created.tzinfo is None:
            raise InvalidInputError("created_at must carry a UTC offset")
        object.__setattr__(self, "created_at", created.isoformat())

        if self.cashier_id is not None:
            object.__setattr__(self, "cashier_id", str(self.cashier_id))

    @property
    def created_at_dt(self) -> datetime:
        return datetime.fromisoformat(self.created_at)

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "items": [i.to_payload() for i in self.items],
            "total": _money_str(self.total),
            "payment": self.payment.to_payload(),
            "created_at": self.created_at,
            "customer_name": self.customer_name,
            "cashier_id": self.cashier_id,
        }

    @classmethod
    def from_payload(cls, data) -> "SaleRecord":
        if not isinstance(data, dict):
            raise InvalidInputError("sale payload must be an object")
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise InvalidInputError("sale items must be a list")
        return cls(
            id=data.get("id"),
            items=tuple(CartLineItem.from_payload(i) for i in raw_items),
            total=data.get("total"),
            payment=PaymentDetails.from_payload(data.get("payment")),
            created_at=data.get("created_at"),
            customer_name=data.get("customer_name"),
            cashier_id=data.get("cashier_id"),
        )
