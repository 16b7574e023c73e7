# products/views/__init__.py

"""
Products views package exports.
"""

from .addon import AddonViewSet
from .category import CategoryViewSet
from .product import ProductViewSet

__all__ = [
    "AddonViewSet",
    "CategoryViewSet",
    "ProductViewSet",
]
