# products/serializers/__init__.py

from .addon import AddonSerializer
from .category import CategorySerializer
from .product import ProductSerializer

__all__ = [
    "AddonSerializer",
    "CategorySerializer",
    "ProductSerializer",
]
