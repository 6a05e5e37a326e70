# orders/services/payment_confirmation.py

"""
ORDER PAYMENT CONFIRMATION

Runs once per order, after a payment has been proven (gateway-verified
Transaction claimed as success, or a staff member recording payment).

Steps:
1) Under a row lock: if payment_status is already 'paid' -> no-op.
   Otherwise move status to 'paid' via the lifecycle rules (history +
   paid_at) and set payment_status='paid'.
2) After commit, independently:
   a. deduct inventory (errors -> admin_notes, payment stays confirmed)
   b. register the sale with farm finance (guarded by finance_record_id)
   c. bump customer counters and product sales counters

A payment for an order whose status no longer allows 'paid' (e.g. it was
cancelled meanwhile) is recorded as paid with an admin note and triggers
no fulfilment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from farm.services.finance import register_sale_for_order
from farm.services.inventory_reconciliation import deduct_inventory_for_order
from orders.models import Order
from orders.services.admin_notes import append_admin_note
from orders.services.order_lifecycle import _apply_transition, can_transition
from products.services.stock_cache import increment_sales_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationResult:
    order: Order
    confirmed: bool
    fulfilled: bool = False


def _bump_counters(order: Order) -> None:
    Customer = get_user_model()
    Customer.objects.filter(pk=order.customer_id).update(
        order_count=F("order_count") + 1,
        total_spent=F("total_spent") + order.total,
    )
    for item in order.items.all():
        if item.product_id:
            increment_sales_count(product_id=item.product_id, quantity=item.quantity)


def confirm_order_payment(order_id, *, actor: str = "system", note: str = "") -> ConfirmationResult:
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)

        if order.payment_status == Order.PAYMENT_PAID:
            return ConfirmationResult(order=order, confirmed=False)

        if can_transition(from_status=order.status, to_status=Order.STATUS_PAID):
            fields = _apply_transition(
                order=order,
                target_status=Order.STATUS_PAID,
                note=note or "Payment confirmed",
                actor=actor,
            )
            order.save(update_fields=fields)
            fulfil = True
        else:
            order.payment_status = Order.PAYMENT_PAID
            order.paid_at = order.paid_at or timezone.now()
            order.save(update_fields=["payment_status", "paid_at", "updated_at"])
            fulfil = False

    if not fulfil:
        logger.warning(
            "Payment received for order that cannot be fulfilled",
            extra={"order_id": str(order.pk), "order_status": order.status},
        )
        append_admin_note(
            order_id=order.pk,
            note=f"Payment received while order was '{order.status}'. Manual review needed.",
        )
        order.refresh_from_db()
        return ConfirmationResult(order=order, confirmed=True, fulfilled=False)

    try:
        inventory = deduct_inventory_for_order(order.pk)
        if inventory.errors:
            append_admin_note(
                order_id=order.pk,
                note="Inventory deduction failed: " + "; ".join(inventory.errors),
            )
    except Exception as e:
        logger.exception("Inventory deduction crashed", extra={"order_id": str(order.pk)})
        append_admin_note(order_id=order.pk, note=f"Inventory deduction failed: {e}")

    try:
        register_sale_for_order(order.pk)
    except Exception as e:
        logger.exception("Finance registration failed", extra={"order_id": str(order.pk)})
        append_admin_note(order_id=order.pk, note=f"Finance registration failed: {e}")

    try:
        _bump_counters(order)
    except Exception as e:
        logger.exception("Counter update failed", extra={"order_id": str(order.pk)})
        append_admin_note(order_id=order.pk, note=f"Customer/product counters not updated: {e}")

    order.refresh_from_db()
    logger.info(
        "Order payment confirmed",
        extra={"order_id": str(order.pk), "order_number": order.order_number},
    )
    return ConfirmationResult(order=order, confirmed=True, fulfilled=True)
