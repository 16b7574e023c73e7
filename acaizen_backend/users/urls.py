# users/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import EmployeeViewSet, MeView

app_name = "users"

router = DefaultRouter()
router.register(r"employees", EmployeeViewSet, basename="employees")

urlpatterns = [
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    # ---------------- ADMIN ----------------
    path("", include(router.urls)),
]
