# payments/admin.py

from django.contrib import admin

from payments.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("reference", "order", "amount", "currency", "status", "channel", "paid_at")
    readonly_fields = (
        "order",
        "reference",
        "amount",
        "currency",
        "status",
        "provider_reference",
        "channel",
        "gateway_response",
        "failure_reason",
        "provider_payload",
        "paid_at",
        "created_at",
    )
    search_fields = ("reference", "order__order_number", "provider_reference")
    list_filter = ("status", "provider", "created_at")
