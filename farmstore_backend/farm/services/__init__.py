# farm/services/__init__.py

from .finance import build_sale_payload, register_sale_for_order
from .inventory_reconciliation import (
    InventoryResult,
    deduct_inventory_for_order,
    restore_inventory_for_order,
)
from .stock_sync import StockSyncResult, sync_stock_from_farm

__all__ = [
    "InventoryResult",
    "StockSyncResult",
    "build_sale_payload",
    "deduct_inventory_for_order",
    "register_sale_for_order",
    "restore_inventory_for_order",
    "sync_stock_from_farm",
]
