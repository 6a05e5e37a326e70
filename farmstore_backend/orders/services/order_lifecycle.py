# orders/services/order_lifecycle.py

"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions for Orders and is
the only code path that writes Order.status.

RULES:
- Transitions are checked and applied under a row lock.
- Every accepted transition appends an OrderStatusHistory row.
- Milestone timestamps are stamped the first time a milestone is reached
  and never overwritten.
- Cancelling an order whose stock was deducted restores it (after the
  status change is committed).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from orders.models import Order, OrderStatusHistory

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class OrderError(Exception):
    pass


class InvalidOrderTransitionError(OrderError):
    def __init__(self, *, order_number: str, current: str, target: str):
        super().__init__(
            f"Order {order_number} cannot transition from '{current}' to '{target}'"
        )
        self.current = current
        self.target = target


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
    Order.STATUS_REFUNDED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_PAID,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PAID: {
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
        Order.STATUS_REFUNDED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
    },
}

MILESTONE_TIMESTAMPS = {
    Order.STATUS_PAID: "paid_at",
    Order.STATUS_SHIPPED: "shipped_at",
    Order.STATUS_DELIVERED: "delivered_at",
    Order.STATUS_CANCELLED: "cancelled_at",
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            order_number=order.order_number,
            current=order.status,
            target=target_status,
        )


def _apply_transition(*, order: Order, target_status: str, note: str, actor: str) -> list[str]:
    """Mutate the locked order in memory; returns the fields to save."""
    now = timezone.now()
    order.status = target_status
    fields = ["status", "updated_at"]

    ts_field = MILESTONE_TIMESTAMPS.get(target_status)
    if ts_field and getattr(order, ts_field) is None:
        setattr(order, ts_field, now)
        fields.append(ts_field)

    if target_status == Order.STATUS_PAID:
        order.payment_status = Order.PAYMENT_PAID
        fields.append("payment_status")

    if target_status == Order.STATUS_CANCELLED:
        order.cancellation_reason = note or ""
        fields.append("cancellation_reason")

    if target_status == Order.STATUS_REFUNDED:
        order.payment_status = Order.PAYMENT_REFUNDED
        fields.append("payment_status")

    OrderStatusHistory.objects.create(
        order=order,
        status=target_status,
        note=note or "",
        changed_by=actor or "",
        changed_at=now,
    )
    return fields


def transition_order(*, order_id, target_status: str, note: str = "", actor: str = "") -> Order:
    """
    Move an order to target_status.

    Raises InvalidOrderTransitionError (order untouched) when the move is not
    in ALLOWED_TRANSITIONS.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        validate_transition(order=order, target_status=target_status)

        fields = _apply_transition(
            order=order, target_status=target_status, note=note, actor=actor
        )
        order.save(update_fields=fields)

    logger.info(
        "Order status changed",
        extra={
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "target_status": target_status,
            "actor": actor,
        },
    )

    if target_status == Order.STATUS_CANCELLED and order.inventory_deducted:
        from farm.services.inventory_reconciliation import restore_inventory_for_order

        restore_inventory_for_order(order.pk)
        order.refresh_from_db()

    return order
