# products/views/addon.py

from rest_framework import viewsets

from products.models import Addon
from products.serializers import AddonSerializer

from ._base import CatalogPermissionMixin


class AddonViewSet(CatalogPermissionMixin, viewsets.ModelViewSet):
    """
    Add-on API

    Query params (list):
    - category: only add-ons bound to that category
    """

    serializer_class = AddonSerializer

    def get_queryset(self):
        qs = Addon.objects.select_related("category")

        category = (self.request.query_params.get("category") or "").strip()
        if category:
            qs = qs.filter(category_id=category)

        return qs.order_by("name")
