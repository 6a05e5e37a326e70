# orders/services/order_builder.py

"""
ORDER BUILDER

Turns the customer's cart into an immutable Order:
- lines are snapshots of the current product (name/price/cost/unit)
- subtotal = sum(line totals); total = subtotal + shipping - discount
- order_number is regenerated on a uniqueness collision
- customer name/email/phone are copied onto the order
- an initial 'pending' history entry is written

The cart is deleted inside the order transaction, in its own savepoint.
That cleanup is best-effort: a durable order is valid even if the cart
survives.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import DatabaseError, IntegrityError, transaction

from cart.models import Cart
from cart.services.cart_service import delete_cart
from customers.services.addresses import normalize_address, save_checkout_address
from orders.models import Order, OrderItem, OrderStatusHistory, generate_order_number
from orders.services.cart_validation import (
    CheckoutError,
    EmptyCartError,
    resolve_cart_items,
)

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5
SHIPPING_COST = Decimal("0.00")

VALID_PAYMENT_METHODS = {
    Order.METHOD_PAYSTACK,
    Order.METHOD_BANK_TRANSFER,
    Order.METHOD_CASH_ON_DELIVERY,
}


def _normalize_payment_method(method: str | None) -> str:
    m = (method or Order.METHOD_PAYSTACK).strip().lower().replace(" ", "_")
    if m not in VALID_PAYMENT_METHODS:
        raise CheckoutError(f"Unsupported payment method: {method}")
    return m


def _create_order_row(**fields) -> Order:
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                return Order.objects.create(order_number=generate_order_number(), **fields)
        except IntegrityError:
            logger.warning("Order number collision", extra={"attempt": attempt})

    raise CheckoutError("Could not allocate an order number. Please try again.")


def create_order_from_cart(
    *,
    customer,
    shipping_address: dict,
    payment_method: str | None = None,
    notes: str = "",
) -> Order:
    """
    Raises EmptyCartError / CartValidationError (nothing written, cart kept)
    or CheckoutError for bad input.
    """
    address = normalize_address(shipping_address)
    missing = [k for k in ("street", "city", "state") if not address[k]]
    if missing:
        raise CheckoutError(f"Shipping address is missing: {', '.join(missing)}")

    method = _normalize_payment_method(payment_method)

    with transaction.atomic():
        cart = Cart.objects.select_for_update().filter(customer=customer).first()
        if cart is None:
            raise EmptyCartError("Your cart is empty.")

        resolved = resolve_cart_items(cart.items.select_related("product"))

        subtotal = sum((r.line_total for r in resolved), Decimal("0.00"))
        discount = Decimal("0.00")
        total = subtotal + SHIPPING_COST - discount

        order = _create_order_row(
            customer=customer,
            customer_name=customer.full_name,
            customer_email=customer.email,
            customer_phone=customer.phone or "",
            status=Order.STATUS_PENDING,
            payment_status=Order.PAYMENT_UNPAID,
            payment_method=method,
            subtotal=subtotal,
            shipping_cost=SHIPPING_COST,
            discount=discount,
            total=total,
            shipping_address=address,
            notes=str(notes or "").strip(),
        )

        for r in resolved:
            OrderItem.objects.create(
                order=order,
                product_id=r.product_id,
                inventory_item_ref=r.inventory_item_ref,
                name=r.name,
                slug=r.slug,
                image_url=r.image_url,
                price=r.price,
                cost_price=r.cost_price,
                quantity=r.quantity,
                line_total=r.line_total,
                unit=r.unit,
            )

        OrderStatusHistory.objects.create(
            order=order,
            status=Order.STATUS_PENDING,
            note="Order placed",
            changed_by=customer.email,
        )

        # Cleared with the order; a failed delete only rolls back its savepoint.
        try:
            with transaction.atomic():
                delete_cart(customer_id=customer.pk)
        except DatabaseError:
            logger.exception(
                "Cart cleanup failed after order creation",
                extra={"order_id": str(order.pk)},
            )

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "total": str(order.total),
            "payment_method": method,
        },
    )

    save_checkout_address(customer=customer, address=address)
    return order
