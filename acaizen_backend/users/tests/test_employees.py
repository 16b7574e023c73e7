# users/tests/test_employees.py

from unittest import mock

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from permissions.roles import (
    CAP_POS_SELL,
    CAP_REPORTS_VIEW,
    ROLE_ADMIN,
    ROLE_CASHIER,
    ROLE_MANAGER,
    effective_capabilities_for,
)
from users.admin import EmployeeAdmin

User = get_user_model()


class RoleCapabilityTests(TestCase):
    def test_role_map(self):
        cashier = User.objects.create_user(email="c@acaizen.test", password="pw123456", role=ROLE_CASHIER)
        manager = User.objects.create_user(email="m@acaizen.test", password="pw123456", role=ROLE_MANAGER)

        self.assertEqual(effective_capabilities_for(cashier), {CAP_POS_SELL})
        self.assertIn(CAP_REPORTS_VIEW, effective_capabilities_for(manager))

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pw123456")

    def test_superuser_defaults_to_admin(self):
        admin = User.objects.create_superuser(email="root@acaizen.test", password="pw123456")
        self.assertEqual(admin.role, ROLE_ADMIN)
        self.assertTrue(admin.is_staff)


class EmployeeApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@acaizen.test", password="password123", role=ROLE_ADMIN
        )
        self.cashier = User.objects.create_user(
            email="caixa@acaizen.test", password="password123", role=ROLE_CASHIER
        )

    def test_me_returns_capabilities(self):
        self.client.force_authenticate(user=self.cashier)

        res = self.client.get(reverse("users:me"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["email"], "caixa@acaizen.test")
        self.assertEqual(res.data["capabilities"], [CAP_POS_SELL])

    def test_admin_creates_employee(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.post(
            reverse("users:employees-list"),
            {
                "email": "novo@acaizen.test",
                "password": "segredo-forte-1",
                "first_name": "Novo",
                "role": ROLE_MANAGER,
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertNotIn("password", res.data)
        user = User.objects.get(email="novo@acaizen.test")
        self.assertTrue(user.check_password("segredo-forte-1"))
        self.assertTrue(user.is_staff)

    def test_create_requires_password(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.post(
            reverse("users:employees-list"),
            {"email": "sem-senha@acaizen.test", "role": ROLE_CASHIER},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cashier_cannot_manage_employees(self):
        self.client.force_authenticate(user=self.cashier)

        res = self.client.get(reverse("users:employees-list"))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_deactivates(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.delete(reverse("users:employees-detail", args=[self.cashier.id]))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.cashier.refresh_from_db()
        self.assertFalse(self.cashier.is_active)

    def test_admin_cannot_deactivate_self(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.delete(reverse("users:employees-detail", args=[self.admin.id]))

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "SELF_DEACTIVATION")


class EmployeeAdminTests(TestCase):
    def test_deactivate_action_skips_current_user(self):
        root = User.objects.create_superuser(email="root@acaizen.test", password="pw123456")
        cashier = User.objects.create_user(email="c@acaizen.test", password="pw123456", role=ROLE_CASHIER)
        request = RequestFactory().post("/")
        request.user = root

        model_admin = EmployeeAdmin(User, admin.site)
        with mock.patch.object(EmployeeAdmin, "message_user"):
            model_admin.deactivate_employees(request, User.objects.all())

        root.refresh_from_db()
        cashier.refresh_from_db()
        self.assertTrue(root.is_active)
        self.assertFalse(cashier.is_active)
        self.assertFalse(model_admin.has_delete_permission(request, cashier))
