# products/models/addon.py

"""
ADD-ON MODEL

Purpose:
- Priced extra attachable to a cart line item (granola, leite condensado...).
- Optional category restricts the products it may be attached to:
    - addon.category set   -> only products in that category
    - addon.category NULL  -> any product
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .category import Category


class AddonQuerySet(models.QuerySet):
    def eligible_for(self, product):
        qs = self.filter(is_active=True)
        category_id = getattr(product, "category_id", None)
        if category_id:
            return qs.filter(Q(category_id=category_id) | Q(category__isnull=True))
        return qs.filter(category__isnull=True)


class Addon(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="addons",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AddonQuerySet.as_manager()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} (+{self.price})"

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError({"price": "Price must be non-negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def is_eligible_for(self, product) -> bool:
        if not self.is_active:
            return False
        if self.category_id is None:
            return True
        return self.category_id == getattr(product, "category_id", None)


def eligible_addons_for(product):
    return Addon.objects.eligible_for(product)
