# products/services/stock_cache.py

"""
LOCAL STOCK CACHE

Purpose:
- Fast availability checks without a farm API call per request.
- Product.stock_quantity is eventually consistent with the farm manager
  (the remote system is the source of truth; resync corrects drift).

Hard rules:
- Every write is a single atomic UPDATE with F() expressions.
  Application code never reads, computes, then writes a stock value.
- The cache never goes below zero.
"""

from __future__ import annotations

import logging

from django.db.models import F, Value
from django.db.models.functions import Greatest

from products.models import Product

logger = logging.getLogger(__name__)


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


def decrement_stock(*, product_id, quantity) -> int:
    """Atomically subtract quantity (floored at zero). Returns rows touched."""
    qty = _to_int_qty(quantity)
    if qty <= 0:
        return 0

    return Product.objects.filter(pk=product_id, track_inventory=True).update(
        stock_quantity=Greatest(F("stock_quantity") - qty, Value(0))
    )


def increment_stock(*, product_id, quantity) -> int:
    """Atomically add quantity back. Returns rows touched."""
    qty = _to_int_qty(quantity)
    if qty <= 0:
        return 0

    return Product.objects.filter(pk=product_id, track_inventory=True).update(
        stock_quantity=F("stock_quantity") + qty
    )


def set_stock_for_inventory_item(*, inventory_item_ref: str, quantity) -> int:
    """
    Overwrite the cache of every product linked to one remote inventory item.
    Used by resync only; rows already at the value are left alone.
    """
    ref = str(inventory_item_ref or "").strip()
    if not ref:
        return 0

    qty = max(0, _to_int_qty(quantity))
    return (
        Product.objects.filter(
            source_kind=Product.SourceKind.INVENTORY,
            source_ref=ref,
        )
        .exclude(stock_quantity=qty)
        .update(stock_quantity=qty)
    )


def increment_sales_count(*, product_id, quantity) -> int:
    qty = _to_int_qty(quantity)
    if qty <= 0:
        return 0
    return Product.objects.filter(pk=product_id).update(sales_count=F("sales_count") + qty)


def available_quantity(product: Product) -> int | None:
    """None means unlimited (inventory not tracked)."""
    if not product.track_inventory:
        return None
    return int(product.stock_quantity or 0)
