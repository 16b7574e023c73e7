# products/models/category.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Category(models.Model):
    """
    Product grouping (Açaí, Bebidas, Complementos...).

    Also used to restrict which add-ons may be attached to a product.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "name cannot be blank"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name
