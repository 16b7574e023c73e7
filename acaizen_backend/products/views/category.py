# products/views/category.py

from rest_framework import viewsets

from products.models import Category
from products.serializers import CategorySerializer

from ._base import CatalogPermissionMixin


class CategoryViewSet(CatalogPermissionMixin, viewsets.ModelViewSet):
    """
    Category API

    Deleting a category leaves its products/add-ons uncategorized.
    """

    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
