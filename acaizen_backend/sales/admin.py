# sales/admin.py

from django.contrib import admin

from sales.models.sale import Sale


# ======================================================
# SALE ADMIN (IMMUTABLE)
# ======================================================


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "created_at",
        "payment_method",
        "total_amount",
        "change_amount",
        "user",
        "customer_name",
    )
    readonly_fields = (
        "id",
        "user",
        "items",
        "total_amount",
        "payment_method",
        "amount_tendered",
        "change_amount",
        "customer_name",
        "created_at",
    )
    search_fields = ("customer_name", "user__email")
    list_filter = ("payment_method", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
