# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem, OrderStatusHistory


# ======================================================
# ORDER ADMIN
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "name", "price", "cost_price", "quantity", "line_total", "unit")


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    can_delete = False
    readonly_fields = ("status", "note", "changed_by", "changed_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Status changes go through the API so the lifecycle rules apply."""

    list_display = (
        "order_number",
        "customer_email",
        "status",
        "payment_status",
        "payment_method",
        "total",
        "inventory_deducted",
        "created_at",
    )
    readonly_fields = (
        "order_number",
        "customer",
        "status",
        "payment_status",
        "subtotal",
        "shipping_cost",
        "discount",
        "total",
        "inventory_deducted",
        "finance_record_id",
        "paid_at",
        "shipped_at",
        "delivered_at",
        "cancelled_at",
        "created_at",
    )
    search_fields = ("order_number", "customer_email", "customer_name")
    list_filter = ("status", "payment_status", "payment_method", "created_at")
    inlines = [OrderItemInline, OrderStatusHistoryInline]
