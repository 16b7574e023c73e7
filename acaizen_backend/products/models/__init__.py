"""
PATH: products/models/__init__.py

Catalog models export surface.
"""

from .addon import Addon, eligible_addons_for
from .category import Category
from .product import Product

__all__ = [
    "Addon",
    "Category",
    "Product",
    "eligible_addons_for",
]
