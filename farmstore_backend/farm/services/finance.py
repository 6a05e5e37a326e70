# farm/services/finance.py

"""
FINANCE REGISTRATION

Each paid order is registered as a sale with the farm manager exactly once.
Order.finance_record_id is the guard: non-null means "already registered".
"""

from __future__ import annotations

import logging
from decimal import Decimal

from farm import client as farm_client
from farm.client import FarmAPIError
from orders.models import Order

logger = logging.getLogger(__name__)


def build_sale_payload(order: Order) -> dict:
    items = list(order.items.all())
    cost_of_goods = sum((item.line_cost for item in items), Decimal("0.00"))

    return {
        "orderNumber": order.order_number,
        "total": str(order.total),
        "subtotal": str(order.subtotal),
        "shippingCost": str(order.shipping_cost),
        "costOfGoods": str(cost_of_goods),
        "customerName": order.customer_name,
        "customerEmail": order.customer_email,
        "itemCount": sum(int(item.quantity) for item in items),
        "paymentMethod": order.payment_method,
        "paidAt": order.paid_at.isoformat() if order.paid_at else None,
    }


def register_sale_for_order(order_id) -> str:
    """
    Returns the finance record id (existing or new).
    Raises FarmAPIError when the farm manager rejects or cannot be reached.
    """
    order = Order.objects.get(pk=order_id)
    if order.finance_record_id:
        return order.finance_record_id

    response = farm_client.register_sale(build_sale_payload(order))
    record_id = str(response.get("financeRecordId") or "").strip()
    if not record_id:
        raise FarmAPIError("Farm API did not return a financeRecordId")

    updated = Order.objects.filter(pk=order_id, finance_record_id__isnull=True).update(
        finance_record_id=record_id
    )
    if not updated:
        logger.warning(
            "Finance record already set by another worker",
            extra={"order_id": str(order_id), "finance_record_id": record_id},
        )
        order.refresh_from_db(fields=["finance_record_id"])
        return order.finance_record_id

    logger.info(
        "Sale registered with farm finance",
        extra={"order_id": str(order_id), "finance_record_id": record_id},
    )
    return record_id
