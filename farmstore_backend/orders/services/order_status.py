# orders/services/order_status.py

"""
Staff-driven status changes.

'paid' goes through payment confirmation so fulfilment side effects run
exactly once; every other target goes straight through the lifecycle.
"""

from __future__ import annotations

from orders.models import Order
from orders.services.order_lifecycle import transition_order, validate_transition
from orders.services.payment_confirmation import confirm_order_payment


def update_order_status(*, order_id, target_status: str, note: str = "", actor: str = "") -> Order:
    if target_status == Order.STATUS_PAID:
        order = Order.objects.get(pk=order_id)
        validate_transition(order=order, target_status=target_status)
        return confirm_order_payment(
            order_id, actor=actor, note=note or "Payment recorded by staff"
        ).order

    return transition_order(
        order_id=order_id, target_status=target_status, note=note, actor=actor
    )
