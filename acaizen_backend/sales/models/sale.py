# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from pos.services.exceptions import InvalidInputError, PersistenceError
from sales.services.records import PaymentDetails, PaymentMethod, SaleRecord

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Immutable financial record: rows are inserted once and never updated or deleted
    - items holds the line-item snapshot taken from the cart at completion,
      so later catalog price changes never rewrite history
    - change_amount is only set for cash sales that were overpaid
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier who processed the sale",
    )

    items = models.JSONField(
        default=list,
        help_text="Serialized cart line items (product/add-on snapshots).",
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    payment_method = models.CharField(
        max_length=16,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )

    amount_tendered = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    change_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )

    customer_name = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["payment_method"], name="sale_payment_method_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Sale is immutable once recorded.")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Sale records cannot be deleted.")

    # ---------------- record mapping ----------------

    @classmethod
    def from_record(cls, record: SaleRecord) -> "Sale":
        return cls(
            id=record.id,
            user_id=record.cashier_id,
            items=[i.to_payload() for i in record.items],
            total_amount=record.total,
            payment_method=record.payment.method.value,
            amount_tendered=record.payment.amount,
            change_amount=record.payment.change,
            customer_name=record.customer_name or "",
            created_at=record.created_at_dt,
        )

    def to_record(self) -> SaleRecord:
        try:
            return SaleRecord.from_payload(
                {
                    "id": str(self.id),
                    "items": self.items,
                    "total": self.total_amount,
                    "payment": PaymentDetails(
                        method=self.payment_method,
                        amount=self.amount_tendered,
                        change=self.change_amount,
                    ).to_payload(),
                    "created_at": self.created_at.isoformat(),
                    "customer_name": self.customer_name or None,
                    "cashier_id": str(self.user_id) if self.user_id else None,
                }
            )
        except InvalidInputError as exc:
            raise PersistenceError(f"Stored sale {self.pk} is malformed: {exc}") from exc

    def __str__(self):
        return f"{self.id} | {self.payment_method} | {self.total_amount}"
