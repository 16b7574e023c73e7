# pos/apps.py

"""
POS APP CONFIG

Point-of-sale module:
- Cashier cart (aggregator + persisted payload)
- Checkout into immutable sales
"""

from django.apps import AppConfig


class PosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pos"
    verbose_name = "Point of Sale"
