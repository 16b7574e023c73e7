"""
PATH: pos/urls.py

POS URLS

Purpose:
- POS health check
- Cart lifecycle
- Cart line operations (addressed by position in the cart)
- Cart checkout (finalizes to Sale via the sale finalizer)
"""

from django.urls import path

from pos.views.api import (
    POSHealthCheckView,
    ActiveCartView,
    AddCartItemView,
    UpdateCartItemView,
    RemoveCartItemView,
    ClearCartView,
    CheckoutCartView,
)

app_name = "pos"

urlpatterns = [
    path("health/", POSHealthCheckView.as_view(), name="health"),

    path("cart/", ActiveCartView.as_view(), name="active-cart"),
    path("cart/clear/", ClearCartView.as_view(), name="clear-cart"),

    path("cart/items/add/", AddCartItemView.as_view(), name="add-cart-item"),
    path("cart/items/<int:index>/update/", UpdateCartItemView.as_view(), name="update-cart-item"),
    path("cart/items/<int:index>/remove/", RemoveCartItemView.as_view(), name="remove-cart-item"),

    path("checkout/", CheckoutCartView.as_view(), name="checkout"),
]
