# sales/views/reports.py

"""
PATH: sales/views/reports.py

SALES REPORTS

Summary for a date range (defaults to today):
- total sales, revenue, average ticket
- revenue and sale count per payment method
- units sold, distinct products, top products by revenue

Notes:
- Rows are narrowed in the database by the date range and payment method,
  then aggregated by sales.services.reports.summarize_sales.
- Dates are local (settings.TIME_ZONE) and inclusive on both ends.
- A stored sale that fails to load answers 503 PERSISTENCE_ERROR.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from pos.views.api import ServiceErrorMixin
from sales.models import Sale
from sales.services.records import PaymentMethod
from sales.services.reports import summarize_sales


def parse_report_date(date_str: str | None, *, field_name: str):
    """
    Accepts YYYY-MM-DD.
    Defaults to today (server timezone).
    """
    if not date_str:
        return timezone.localdate()

    try:
        return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise serializers.ValidationError(
            {field_name: "Invalid date format. Use YYYY-MM-DD."}
        )


def day_range_bounds(start, end):
    """
    Returns timezone-aware datetime bounds [start, end + 1 day) for local dates.
    """
    tz = timezone.get_current_timezone()
    lower = timezone.make_aware(datetime.combine(start, time.min), tz)
    upper = timezone.make_aware(datetime.combine(end, time.min), tz) + timedelta(days=1)
    return lower, upper


def parse_payment_method(raw: str | None):
    value = (raw or "").strip().lower()
    if not value or value == "all":
        return None
    if value not in PaymentMethod.values:
        raise serializers.ValidationError(
            {"payment_method": f"Must be one of: all, {', '.join(PaymentMethod.values)}"}
        )
    return value


class SalesSummaryReportView(ServiceErrorMixin, APIView):
    """
    Sales summary for the reports screen.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="start_date",
                type=OpenApiTypes.DATE,
                required=False,
                description="First day (YYYY-MM-DD). Defaults to today.",
            ),
            OpenApiParameter(
                name="end_date",
                type=OpenApiTypes.DATE,
                required=False,
                description="Last day, inclusive (YYYY-MM-DD). Defaults to today.",
            ),
            OpenApiParameter(
                name="payment_method",
                type=OpenApiTypes.STR,
                required=False,
                description="cash | card | pix | all",
            ),
            OpenApiParameter(
                name="product_id",
                type=OpenApiTypes.UUID,
                required=False,
                description="Only sales containing this product.",
            ),
        ],
        description="Sales totals, payment breakdown and top products for a date range.",
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        params = request.query_params

        start = parse_report_date(params.get("start_date"), field_name="start_date")
        end = parse_report_date(params.get("end_date"), field_name="end_date")
        if start > end:
            raise serializers.ValidationError(
                {"end_date": "end_date must be on or after start_date."}
            )

        method = parse_payment_method(params.get("payment_method"))
        product_id = (params.get("product_id") or "").strip() or None

        lower, upper = day_range_bounds(start, end)
        qs = Sale.objects.filter(created_at__gte=lower, created_at__lt=upper)
        if method:
            qs = qs.filter(payment_method=method)

        records = [s.to_record() for s in qs.order_by("created_at").iterator()]
        summary = summarize_sales(
            records,
            start_date=start,
            end_date=end,
            payment_method=method,
            product_id=product_id,
        )

        return Response(
            {
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "payment_method": method or "all",
                "product_id": product_id,
                **summary.to_payload(),
            }
        )
