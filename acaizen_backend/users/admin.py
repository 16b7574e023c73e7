# users/admin.py

"""
EMPLOYEE ADMIN

Cashiers, managers and admins are all User rows; the admin mirrors the
employees API: accounts are deactivated, never removed, so past sales keep
their cashier.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()


@admin.register(User)
class EmployeeAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "full_name", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("email", "first_name", "last_name")
    readonly_fields = ("created_at", "updated_at", "last_login")
    actions = ["deactivate_employees"]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Employee", {"fields": ("first_name", "last_name", "role")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Activity", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "password1", "password2"),
            },
        ),
    )

    @admin.display(description="Name")
    def full_name(self, obj):
        return obj.full_name or "-"

    @admin.action(description="Deactivate selected employees")
    def deactivate_employees(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).filter(is_active=True).update(is_active=False)
        self.message_user(request, f"{updated} employee(s) deactivated.")

    def has_delete_permission(self, request, obj=None):
        return False
