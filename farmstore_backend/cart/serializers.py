# cart/serializers.py

from __future__ import annotations

from rest_framework import serializers

from cart.models import Cart, CartItem
from products.serializers import ProductSummarySerializer


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductSummarySerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "product", "product_name", "quantity", "unit_price", "line_total", "added_at"]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Cart
        fields = ["id", "items", "item_count", "subtotal", "last_activity"]
        read_only_fields = fields


class CartAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class CartUpdateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class CartRemoveSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False)
    clear = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get("clear") and not attrs.get("product_id"):
            raise serializers.ValidationError("Provide product_id or clear=true.")
        return attrs
