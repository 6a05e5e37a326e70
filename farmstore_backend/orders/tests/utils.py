# orders/tests/utils.py

"""Shared fixtures for order / payment / inventory tests."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model

from orders.models import Order, OrderItem, OrderStatusHistory
from products.models import Product

User = get_user_model()

TEST_PAYSTACK = {
    "PAYSTACK": {
        "PUBLIC_KEY": "pk_test_x",
        "SECRET_KEY": "sk_test_secret",
        "CALLBACK_URL": "http://testserver/checkout/verify",
        "TIMEOUT": 5,
    }
}


def make_customer(email="buyer@example.com", **extra):
    extra.setdefault("first_name", "Ada")
    extra.setdefault("last_name", "Obi")
    extra.setdefault("phone", "+2348012345678")
    return User.objects.create_user(email=email, password="pass12345", **extra)


def make_product(name="Fresh Eggs (crate)", *, price="1000.00", stock=5, **extra):
    extra.setdefault("source_kind", Product.SourceKind.INVENTORY)
    if extra["source_kind"] != Product.SourceKind.CATALOG:
        extra.setdefault("source_ref", f"inv-{name[:8].lower().replace(' ', '-')}")
    return Product.objects.create(
        name=name,
        price=Decimal(price),
        cost_price=Decimal(price) / 2,
        stock_quantity=stock,
        **extra,
    )


def make_order(customer, lines, *, status=Order.STATUS_PENDING, **extra):
    """lines: [(product, qty)]. Prices come from the products."""
    subtotal = sum((Decimal(p.price) * q for p, q in lines), Decimal("0.00"))
    order = Order.objects.create(
        customer=customer,
        customer_name=customer.full_name,
        customer_email=customer.email,
        status=status,
        subtotal=subtotal,
        total=subtotal,
        shipping_address={"street": "1 Farm Road", "city": "Ibadan", "state": "Oyo"},
        **extra,
    )
    for product, qty in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            inventory_item_ref=product.inventory_item_ref,
            name=product.name,
            price=product.price,
            cost_price=product.cost_price,
            quantity=qty,
            line_total=Decimal(product.price) * qty,
            unit=product.unit,
        )
    OrderStatusHistory.objects.create(order=order, status=order.status, note="Order placed")
    return order


class FarmStubMixin:
    """Replaces the farm manager HTTP calls for the duration of each test."""

    def start_farm_stubs(self):
        self.farm_deduct = self._patch("farm.client.deduct_stock", return_value={"errors": []})
        self.farm_restore = self._patch("farm.client.restore_stock", return_value={"ok": True})
        self.farm_register = self._patch(
            "farm.client.register_sale", return_value={"financeRecordId": "fin-001"}
        )

    def _patch(self, target, **kwargs):
        patcher = mock.patch(target, **kwargs)
        mocked = patcher.start()
        self.addCleanup(patcher.stop)
        return mocked
