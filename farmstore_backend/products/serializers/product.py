# products/serializers/product.py

"""
PRODUCT SERIALIZER

Read-only projection embedded in cart responses.
Stock is the local cache value (products.services.stock_cache).
"""

from rest_framework import serializers

from products.models import Product


class ProductSummarySerializer(serializers.ModelSerializer):
    is_in_stock = serializers.BooleanField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "image_url",
            "source_kind",
            "price",
            "unit",
            "track_inventory",
            "stock_quantity",
            "is_in_stock",
            "is_low_stock",
            "is_active",
        ]
        read_only_fields = fields
