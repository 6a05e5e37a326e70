from .stock_cache import (
    available_quantity,
    decrement_stock,
    increment_sales_count,
    increment_stock,
    set_stock_for_inventory_item,
)

__all__ = [
    "available_quantity",
    "decrement_stock",
    "increment_stock",
    "increment_sales_count",
    "set_stock_for_inventory_item",
]
