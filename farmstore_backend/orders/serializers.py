# orders/serializers.py

"""
ORDERS SERIALIZERS

Transport-layer contracts for checkout, customer order history and staff
order management. Business rules live in orders/services.
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order, OrderItem, OrderStatusHistory


# ============================================================
# INPUT
# ============================================================


class ShippingAddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120)
    postal_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class CheckoutInputSerializer(serializers.Serializer):
    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.ChoiceField(
        choices=[code for code, _ in Order.PAYMENT_METHOD_CHOICES],
        required=False,
        default=Order.METHOD_PAYSTACK,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)

    def to_internal_value(self, data):
        # Accept display labels ("Paystack", "Bank Transfer") as well as codes
        if hasattr(data, "copy"):
            data = data.copy()
        method = data.get("payment_method") if hasattr(data, "get") else None
        if isinstance(method, str):
            data["payment_method"] = method.strip().lower().replace(" ", "_")
        return super().to_internal_value(data)


class AdminOrderUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[code for code, _ in Order.STATUS_CHOICES],
        required=False,
    )
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    admin_notes = serializers.CharField(required=False, allow_blank=True, max_length=10000)

    def validate(self, attrs):
        if "status" not in attrs and "admin_notes" not in attrs:
            raise serializers.ValidationError("Provide status and/or admin_notes.")
        return attrs


# ============================================================
# OUTPUT
# ============================================================


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "name",
            "slug",
            "image_url",
            "price",
            "quantity",
            "line_total",
            "unit",
        ]
        read_only_fields = fields


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["status", "note", "changed_by", "changed_at"]
        read_only_fields = fields


class OrderSummarySerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "payment_method",
            "total",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj) -> int:
        return sum(int(i.quantity) for i in obj.items.all())


class OrderDetailSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "customer_email",
            "customer_phone",
            "status",
            "payment_status",
            "payment_method",
            "subtotal",
            "shipping_cost",
            "discount",
            "total",
            "shipping_address",
            "notes",
            "cancellation_reason",
            "items",
            "status_history",
            "paid_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminOrderDetailSerializer(OrderDetailSerializer):
    transactions = serializers.SerializerMethodField()

    class Meta(OrderDetailSerializer.Meta):
        fields = OrderDetailSerializer.Meta.fields + [
            "customer",
            "admin_notes",
            "inventory_deducted",
            "finance_record_id",
            "transactions",
        ]
        read_only_fields = fields

    def get_transactions(self, obj) -> list:
        from payments.serializers import TransactionSerializer

        return TransactionSerializer(obj.transactions.all(), many=True).data
