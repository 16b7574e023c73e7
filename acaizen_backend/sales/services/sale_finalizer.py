# sales/services/sale_finalizer.py

"""
SALE FINALIZER (APPLICATION SERVICE)

Purpose:
- Turn the active cart into an immutable SaleRecord.
- Check payment, compute change for cash, persist, decrement stock, clear the cart.

Ordering guarantees:
- Validation (empty cart, insufficient payment) happens before any side effect.
- Persistence happens before stock is touched and before the cart is cleared:
  if the store fails, the cart is left exactly as it was and nothing else changes.
- Stock decrements run after the sale is durable. A failed decrement is reported
  as a StockWarning; it never un-does the sale.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from django.utils import timezone

from pos.services.cart import CartAggregator
from pos.services.exceptions import (
    EmptyCartError,
    InsufficientPaymentError,
    InvalidInputError,
    PersistenceError,
)
from sales.services.catalog_store import CatalogStore
from sales.services.records import PaymentDetails, PaymentMethod, SaleRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockWarning:
    product_id: str
    quantity: int
    message: str

    def to_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "message": self.message,
        }


@dataclass(frozen=True)
class CompletedSale:
    sale: SaleRecord
    stock_warnings: tuple = ()

    @property
    def has_stock_warnings(self) -> bool:
        return bool(self.stock_warnings)


def compute_change(payment: PaymentDetails, total: Decimal) -> Optional[Decimal]:
    if payment.method == PaymentMethod.CASH and payment.amount > total:
        return payment.amount - total
    return None


def sold_quantities(items) -> dict[str, int]:
    """Units sold per product id, in first-seen order."""
    out: dict[str, int] = {}
    for item in items:
        out[item.product.id] = out.get(item.product.id, 0) + item.quantity
    return out


def _normalize_customer_name(value) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError("customer_name must be a string")
    return value.strip() or None


class SaleFinalizer:
    def __init__(
        self,
        cart: CartAggregator,
        store: CatalogStore,
        *,
        clock: Callable = timezone.now,
        id_factory: Callable = uuid.uuid4,
    ):
        self.cart = cart
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def build_record(
        self,
        payment: PaymentDetails,
        *,
        customer_name=None,
        cashier_id=None,
    ) -> SaleRecord:
        if not isinstance(payment, PaymentDetails):
            raise InvalidInputError("payment must be PaymentDetails")

        if self.cart.is_empty:
            raise EmptyCartError("Cannot complete a sale with an empty cart")

        total = self.cart.cart_total()
        if payment.amount < total:
            raise InsufficientPaymentError(
                f"Payment of {payment.amount} is less than the total of {total}"
            )

        settled = PaymentDetails(
            method=payment.method,
            amount=payment.amount,
            change=compute_change(payment, total),
        )

        return SaleRecord(
            id=str(self.id_factory()),
            items=self.cart.snapshot_items(),
            total=total,
            payment=settled,
            created_at=self.clock().isoformat(),
            customer_name=_normalize_customer_name(customer_name),
            cashier_id=cashier_id,
        )

    def complete_sale(
        self,
        payment: PaymentDetails,
        customer_name=None,
        cashier_id=None,
    ) -> CompletedSale:
        record = self.build_record(
            payment, customer_name=customer_name, cashier_id=cashier_id
        )

        try:
            stored = self.store.create_sale(record)
        except PersistenceError:
            logger.exception("Sale %s could not be persisted; cart retained", record.id)
            raise
        except Exception as exc:
            logger.exception("Sale %s could not be persisted; cart retained", record.id)
            raise PersistenceError(f"Failed to persist sale: {exc}") from exc

        warnings = []
        for product_id, qty in sold_quantities(stored.items).items():
            try:
                self.store.decrement_product_stock(product_id, qty)
            except Exception as exc:
                logger.warning(
                    "Stock decrement failed for product %s (qty=%s) on sale %s: %s",
                    product_id,
                    qty,
                    stored.id,
                    exc,
                )
                warnings.append(
                    StockWarning(product_id=product_id, quantity=qty, message=str(exc))
                )

        self.cart.clear_cart()

        logger.info(
            "Sale %s completed: total=%s method=%s items=%s",
            stored.id,
            stored.total,
            stored.payment.method.value,
            stored.item_count,
        )

        return CompletedSale(sale=stored, stock_warnings=tuple(warnings))


def complete_sale(
    cart: CartAggregator,
    store: CatalogStore,
    payment: PaymentDetails,
    customer_name=None,
    cashier_id=None,
    **finalizer_kwargs,
) -> CompletedSale:
    return SaleFinalizer(cart, store, **finalizer_kwargs).complete_sale(
        payment, customer_name=customer_name, cashier_id=cashier_id
    )
