# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit non-PK routes (like "reports/summary") MUST be registered BEFORE router URLs,
  otherwise the router will treat "reports" as a <pk>.

Provides:
- Staff endpoints:
    GET /api/sales/                (list)
    GET /api/sales/<uuid>/         (retrieve)
    GET /api/sales/<uuid>/receipt/ (receipt)

- Reports:
    GET /api/sales/reports/summary/?start_date&end_date&payment_method&product_id
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet
from sales.views.reports import SalesSummaryReportView

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("reports/summary/", SalesSummaryReportView.as_view(), name="sales-reports-summary"),
    path("", include(router.urls)),
]
