# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog routes under /api/products/
    /categories/
    /products/            (+ /products/<id>/addons/)
    /addons/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import AddonViewSet, CategoryViewSet, ProductViewSet

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"addons", AddonViewSet, basename="addons")

urlpatterns = [
    path("", include(router.urls)),
]
