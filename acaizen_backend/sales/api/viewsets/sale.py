# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- "Sales History" API for the staff UI (list + retrieve).
- Receipt endpoint (print-ready payload).

Security:
- Requires IsAuthenticated
- Requires ANY of:
    pos.sell
    reports.view
- Users without reports.view only see their own sales.
- A stored sale that fails to load answers 503 PERSISTENCE_ERROR.

Sales are immutable: this viewset is read-only.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_POS_SELL,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
    effective_capabilities_for,
)
from pos.views.api import ServiceErrorMixin
from sales.models import Sale
from sales.serializers.sale import SaleSerializer
from sales.views.reports import day_range_bounds, parse_payment_method, parse_report_date


class SaleViewSet(ServiceErrorMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated, HasAnyCapability]

    required_any_capabilities = {
        CAP_POS_SELL,
        CAP_REPORTS_VIEW,
    }

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        qs = Sale.objects.select_related("user").order_by("-created_at")

        user = self.request.user
        if CAP_REPORTS_VIEW not in effective_capabilities_for(user):
            qs = qs.filter(user=user)

        if self.action != "list":
            return qs

        params = self.request.query_params

        pm = parse_payment_method(params.get("payment_method"))
        if pm:
            qs = qs.filter(payment_method=pm)

        raw_start = (params.get("start_date") or "").strip()
        raw_end = (params.get("end_date") or "").strip()
        if raw_start or raw_end:
            start = parse_report_date(raw_start, field_name="start_date") if raw_start else None
            end = parse_report_date(raw_end, field_name="end_date") if raw_end else None
            if start:
                lower, _ = day_range_bounds(start, start)
                qs = qs.filter(created_at__gte=lower)
            if end:
                _, upper = day_range_bounds(end, end)
                qs = qs.filter(created_at__lt=upper)

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("payment_method", OpenApiTypes.STR, required=False),
            OpenApiParameter("start_date", OpenApiTypes.DATE, required=False),
            OpenApiParameter("end_date", OpenApiTypes.DATE, required=False),
        ],
        responses={200: SaleSerializer(many=True)},
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # ======================================================
    # STAFF RECEIPT
    # GET /api/sales/<id>/receipt/
    # ======================================================

    @extend_schema(
        responses={200: SaleSerializer},
        description="Return a print-ready receipt payload for a sale.",
    )
    @action(detail=True, methods=["get"], url_path="receipt")
    def receipt(self, request, pk=None):
        sale: Sale = self.get_object()
        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)
