# products/admin.py

"""
PRODUCTS ADMIN

- stock_quantity is shown read-only: it is a cache moved by order
  reconciliation and corrected by the sync_inventory command.
- sales_count is owned by payment confirmation.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "source_kind",
        "source_ref",
        "price",
        "stock_quantity",
        "track_inventory",
        "sales_count",
        "is_active",
    )
    list_filter = ("source_kind", "track_inventory", "is_active")
    search_fields = ("name", "slug", "source_ref")
    readonly_fields = ("stock_quantity", "sales_count", "created_at", "updated_at")
    prepopulated_fields = {"slug": ("name",)}
