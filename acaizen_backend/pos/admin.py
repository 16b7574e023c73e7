from django.contrib import admin

from pos.services.exceptions import PersistenceError

from .models import Cart


# =====================================================
# CART ADMIN (READ-ONLY)
# =====================================================


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "line_count",
        "total",
        "updated_at",
    )

    readonly_fields = (
        "id",
        "user",
        "lines",
        "created_at",
        "updated_at",
    )

    search_fields = ("user__email",)
    list_filter = ("updated_at",)

    @admin.display(description="Lines")
    def line_count(self, obj):
        return len(obj.lines or [])

    @admin.display(description="Total")
    def total(self, obj):
        try:
            return obj.load().cart_total()
        except PersistenceError:
            return "(unreadable)"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
