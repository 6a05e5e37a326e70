# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .order import Order, generate_order_number
from .order_item import OrderItem
from .status_history import OrderStatusHistory

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "generate_order_number",
]
