"""
PATH: users/views/employees.py

EMPLOYEE MANAGEMENT (ADMIN)

- List / create / update employees.
- DELETE deactivates the account instead of removing it; sales keep
  their cashier reference.
"""

import logging

from django.contrib.auth import get_user_model
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_USERS_MANAGE, HasCapability
from users.serializers import EmployeeSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class EmployeeViewSet(viewsets.ModelViewSet):
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_USERS_MANAGE

    def get_queryset(self):
        qs = User.objects.all().order_by("email")

        role = (self.request.query_params.get("role") or "").strip()
        if role:
            qs = qs.filter(role=role)

        active = (self.request.query_params.get("is_active") or "").strip().lower()
        if active in {"true", "1"}:
            qs = qs.filter(is_active=True)
        elif active in {"false", "0"}:
            qs = qs.filter(is_active=False)

        return qs

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("Employee created", extra={"employee_id": str(user.id), "role": user.role})

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()

        if user.pk == request.user.pk:
            return Response(
                {"error": {"code": "SELF_DEACTIVATION", "message": "You cannot deactivate your own account."}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if user.is_active:
            user.is_active = False
            user.save(update_fields=["is_active", "updated_at"])
            logger.info("Employee deactivated", extra={"employee_id": str(user.id)})

        return Response(status=status.HTTP_204_NO_CONTENT)
