"""
PATH: pos/models/cart.py

CART MODEL

Purpose:
- Durable home of a cashier's in-progress cart between HTTP requests.
- The line items live in `lines` as the CartAggregator payload (JSON):
  product/add-on price snapshots, quantities and notes.

Rules:
- One cart per cashier.
- All cart semantics (merge, totals, index rules) live in pos.services.cart;
  this model only loads and stores the aggregator.
"""

import uuid

from django.conf import settings
from django.db import models

from pos.services.cart import CartAggregator
from pos.services.exceptions import InvalidInputError, PersistenceError

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="pos_cart",
    )

    lines = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    @classmethod
    def for_user(cls, user) -> "Cart":
        cart, _ = cls.objects.get_or_create(user=user)
        return cart

    def load(self) -> CartAggregator:
        try:
            return CartAggregator.from_payload(self.lines)
        except InvalidInputError as exc:
            raise PersistenceError(f"Stored cart {self.pk} is malformed: {exc}") from exc

    def store(self, aggregator: CartAggregator) -> None:
        self.lines = aggregator.to_payload()
        self.save(update_fields=["lines", "updated_at"])

    def __str__(self):
        return f"Cart {self.id} | {self.user} | {len(self.lines or [])} lines"
