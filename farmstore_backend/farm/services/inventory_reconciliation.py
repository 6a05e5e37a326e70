# farm/services/inventory_reconciliation.py

"""
INVENTORY RECONCILIATION (ORDER <-> FARM STOCK)

deduct_inventory_for_order / restore_inventory_for_order apply or reverse
an order's stock effect on:
- the farm manager (source of truth), for inventory-linked lines only
- the local stock cache, for every tracked line

Guard:
- Order.inventory_deducted is claimed with a conditional UPDATE
  (False -> True for deduct, True -> False for restore), so two concurrent
  callers can never both apply the same effect.
- If the remote deduction reports errors the flag is put back to False:
  stock that was never confirmed deducted is never "restored", and a later
  retry remains possible.
- Local cache writes happen regardless of remote outcome; resync corrects drift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from farm import client as farm_client
from farm.client import FarmAPIError
from orders.models import Order, OrderItem
from products.services.stock_cache import decrement_stock, increment_stock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryResult:
    applied: bool
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _remote_lines(items: list[OrderItem]) -> list[dict]:
    return [
        {
            "inventoryItemId": item.inventory_item_ref,
            "quantity": int(item.quantity),
            "productName": item.name,
        }
        for item in items
        if item.inventory_item_ref
    ]


def _format_remote_errors(raw_errors) -> list[str]:
    out = []
    for err in raw_errors or []:
        if isinstance(err, dict):
            product = err.get("product") or err.get("productName") or "item"
            reason = err.get("reason") or err.get("error") or "unknown error"
            out.append(f"{product}: {reason}")
        else:
            out.append(str(err))
    return out


def deduct_inventory_for_order(order_id) -> InventoryResult:
    claimed = Order.objects.filter(pk=order_id, inventory_deducted=False).update(
        inventory_deducted=True
    )
    if not claimed:
        logger.info("Inventory already deducted; skipping", extra={"order_id": str(order_id)})
        return InventoryResult(applied=False)

    items = list(OrderItem.objects.filter(order_id=order_id))
    errors: list[str] = []

    remote = _remote_lines(items)
    if remote:
        try:
            response = farm_client.deduct_stock(remote)
            errors.extend(_format_remote_errors(response.get("errors")))
        except FarmAPIError as e:
            errors.append(f"Farm stock deduction failed: {e}")

    for item in items:
        if item.product_id:
            decrement_stock(product_id=item.product_id, quantity=item.quantity)

    if errors:
        Order.objects.filter(pk=order_id, inventory_deducted=True).update(
            inventory_deducted=False
        )
        logger.warning(
            "Inventory deduction reported errors",
            extra={"order_id": str(order_id), "errors": errors},
        )
        return InventoryResult(applied=False, errors=errors)

    logger.info(
        "Inventory deducted",
        extra={"order_id": str(order_id), "remote_lines": len(remote)},
    )
    return InventoryResult(applied=True)


def restore_inventory_for_order(order_id) -> InventoryResult:
    claimed = Order.objects.filter(pk=order_id, inventory_deducted=True).update(
        inventory_deducted=False
    )
    if not claimed:
        return InventoryResult(applied=False)

    items = list(OrderItem.objects.filter(order_id=order_id))
    errors: list[str] = []

    remote = _remote_lines(items)
    if remote:
        try:
            response = farm_client.restore_stock(remote)
            errors.extend(_format_remote_errors(response.get("errors")))
        except FarmAPIError as e:
            errors.append(f"Farm stock restore failed: {e}")

    for item in items:
        if item.product_id:
            increment_stock(product_id=item.product_id, quantity=item.quantity)

    if errors:
        logger.error(
            "Inventory restore incomplete on farm side",
            extra={"order_id": str(order_id), "errors": errors},
        )
    else:
        logger.info("Inventory restored", extra={"order_id": str(order_id)})

    return InventoryResult(applied=True, errors=errors)
