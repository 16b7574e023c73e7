from .cart import (
    AddCartItemInputSerializer,
    CartSerializer,
    CheckoutInputSerializer,
    UpdateCartItemInputSerializer,
)

__all__ = [
    "AddCartItemInputSerializer",
    "CartSerializer",
    "CheckoutInputSerializer",
    "UpdateCartItemInputSerializer",
]
