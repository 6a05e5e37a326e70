# products/serializers/__init__.py

from .product import ProductSummarySerializer

__all__ = [
    "ProductSummarySerializer",
]
