# payments/serializers.py

from __future__ import annotations

from rest_framework import serializers

from payments.models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "order",
            "order_number",
            "provider",
            "reference",
            "amount",
            "currency",
            "status",
            "provider_reference",
            "channel",
            "gateway_response",
            "failure_reason",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class PaymentSessionSerializer(serializers.Serializer):
    authorization_url = serializers.URLField()
    access_code = serializers.CharField(allow_blank=True)
    reference = serializers.CharField()


class PaymentVerifyResponseSerializer(serializers.Serializer):
    status = serializers.CharField()
    order_id = serializers.UUIDField(allow_null=True, required=False)
    reason = serializers.CharField(allow_blank=True, required=False)
