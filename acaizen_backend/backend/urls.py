# backend/urls.py
"""
Açaízen URL map.

Everything the POS front end calls is mounted under /api/; the Django admin
lives on settings.ADMIN_PATH.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connections
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import OpenApiTypes, extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import (
    TokenBlacklistView,
    TokenObtainPairView,
    TokenRefreshView,
)

API_INDEX = {
    "auth": {
        "token": "/api/auth/jwt/create/",
        "refresh": "/api/auth/jwt/refresh/",
        "logout": "/api/auth/jwt/logout/",
        "me": "/api/auth/me/",
        "employees": "/api/auth/employees/",
    },
    "catalog": "/api/products/",
    "cart": "/api/pos/cart/",
    "checkout": "/api/pos/checkout/",
    "sales": "/api/sales/",
    "sales_summary": "/api/sales/reports/summary/",
    "docs": "/api/docs/",
}


@extend_schema(responses={200: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_index(request):
    return Response({"service": "acaizen-pos", **API_INDEX})


@extend_schema(responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness plus a SELECT 1 against the default database."""
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        return Response(
            {"status": "degraded", "db": "down", "error": str(exc)},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"status": "ok", "db": "ok"})


admin_path = settings.ADMIN_PATH.rstrip("/") + "/"

api_urlpatterns = [
    path("", api_index, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/jwt/logout/", TokenBlacklistView.as_view(), name="jwt-logout"),
    path("auth/", include("users.urls")),
    path("products/", include("products.urls")),
    path("pos/", include("pos.urls")),
    path("sales/", include("sales.api.urls")),
]

urlpatterns = [
    path(admin_path, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
