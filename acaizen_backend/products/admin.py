# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Catalog admin:
- Categories, products and add-ons are edited directly.
- Product stock is editable here (inventory counts); sales decrement it.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Addon, Category, Product


class ProductInline(admin.TabularInline):
    model = Product
    extra = 0
    fields = ("name", "price", "stock", "is_active")
    show_change_link = True


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    inlines = [ProductInline]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock", "is_active", "updated_at")
    list_filter = ("category", "is_active")
    search_fields = ("name", "description")
    list_editable = ("stock", "is_active")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Addon)
class AddonAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("name",)
