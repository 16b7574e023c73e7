"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Sale (IMMUTABLE POS TRANSACTIONS)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "items",
                    models.JSONField(
                        default=list,
                        help_text="Serialized cart line items (product/add-on snapshots).",
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        max_length=16,
                        choices=[("cash", "Dinheiro"), ("card", "Cartão"), ("pix", "PIX")],
                        default="cash",
                    ),
                ),
                (
                    "amount_tendered",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "change_amount",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, null=True, blank=True
                    ),
                ),
                (
                    "customer_name",
                    models.CharField(max_length=255, blank=True, default=""),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, db_index=True
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                        help_text="Cashier who processed the sale",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["payment_method"], name="sale_payment_method_idx"
                    ),
                ],
            },
        ),
    ]
