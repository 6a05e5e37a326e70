# farm/services/stock_sync.py

"""
STOCK CACHE RESYNC

Pulls the farm manager's public product listing and overwrites the local
stock cache of inventory-linked products whose quantity drifted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from farm import client as farm_client
from products.models import Product
from products.services.stock_cache import set_stock_for_inventory_item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockSyncResult:
    total_checked: int
    updated_count: int


def _rows(payload) -> list[dict]:
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        rows = payload.get("products") or payload.get("items") or payload.get("data") or []
    else:
        rows = []
    return [r for r in rows if isinstance(r, dict)]


def _row_quantity(row: dict) -> int | None:
    raw = row.get("quantity", row.get("stockQuantity"))
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return max(0, int(Decimal(str(raw))))
    except (InvalidOperation, ValueError):
        return None


def sync_stock_from_farm(params: dict | None = None) -> StockSyncResult:
    """Raises FarmAPIError when the listing cannot be fetched."""
    linked_refs = set(
        Product.objects.filter(source_kind=Product.SourceKind.INVENTORY)
        .exclude(source_ref="")
        .values_list("source_ref", flat=True)
    )
    if not linked_refs:
        return StockSyncResult(total_checked=0, updated_count=0)

    remote = {}
    for row in _rows(farm_client.fetch_public_products(params)):
        ref = str(row.get("id") or row.get("_id") or row.get("inventoryItemId") or "").strip()
        qty = _row_quantity(row)
        if ref and qty is not None:
            remote[ref] = qty

    updated = 0
    for ref in linked_refs:
        if ref in remote:
            updated += set_stock_for_inventory_item(inventory_item_ref=ref, quantity=remote[ref])

    logger.info(
        "Stock cache resynced",
        extra={"total_checked": len(linked_refs), "updated_count": updated},
    )
    return StockSyncResult(total_checked=len(linked_refs), updated_count=updated)
