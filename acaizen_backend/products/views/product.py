# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Catalog management endpoints (CRUD).
- POS grid browsing with search + category filter.
- Eligible add-ons for a product (used by the add-to-cart dialog).
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from products.models import Product, eligible_addons_for
from products.serializers import AddonSerializer, ProductSerializer

from ._base import CatalogPermissionMixin


class ProductViewSet(CatalogPermissionMixin, viewsets.ModelViewSet):
    """
    Product endpoints.

    Query params (list):
    - q: case-insensitive search on name/description
    - category: category UUID
    - include_inactive: "true" to include inactive products
    """

    serializer_class = ProductSerializer
    read_actions = {"list", "retrieve", "addons"}

    def get_queryset(self):
        qs = Product.objects.select_related("category")

        params = self.request.query_params

        if (params.get("include_inactive") or "").strip().lower() not in {"true", "1"}:
            if self.action in {"list", "addons"}:
                qs = qs.filter(is_active=True)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(description__icontains=q))

        category = (params.get("category") or "").strip()
        if category:
            qs = qs.filter(category_id=category)

        return qs.order_by("name")

    @extend_schema(
        parameters=[
            OpenApiParameter("q", str, required=False),
            OpenApiParameter("category", str, required=False),
            OpenApiParameter("include_inactive", bool, required=False),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        responses={200: AddonSerializer(many=True)},
        description="Add-ons that can be attached to this product (same category or uncategorized).",
    )
    @action(detail=True, methods=["get"], url_path="addons")
    def addons(self, request, pk=None):
        product = self.get_object()
        qs = eligible_addons_for(product).select_related("category").order_by("name")
        return Response(AddonSerializer(qs, many=True).data)
