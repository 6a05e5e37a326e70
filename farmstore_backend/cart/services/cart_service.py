# cart/services/cart_service.py

"""
CART SERVICE

Customer-facing cart mutations.

Rules:
- One cart per customer (Cart.customer is unique).
- Mutations for one customer are serialized by locking the cart row.
- Stock checks read the local stock cache; checkout re-validates anyway.
- Every mutation bumps Cart.last_activity (housekeeping clock).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db import IntegrityError, transaction
from django.utils import timezone

from cart.models import Cart, CartItem
from products.models import Product
from products.services.stock_cache import _to_int_qty, available_quantity

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class CartError(Exception):
    pass


class ProductUnavailableError(CartError):
    pass


class InsufficientStockError(CartError):
    def __init__(self, message: str, *, available: int):
        super().__init__(message)
        self.available = available


@dataclass
class CartRefreshResult:
    cart: Cart
    changes: list[str] = field(default_factory=list)


# ============================================================
# HELPERS
# ============================================================


def _get_locked_cart(customer) -> Cart:
    """Get-or-create the customer's cart and lock its row (call inside atomic)."""
    cart = Cart.objects.select_for_update().filter(customer=customer).first()
    if cart is not None:
        return cart

    try:
        with transaction.atomic():
            Cart.objects.create(customer=customer)
    except IntegrityError:
        # concurrent first add created it
        pass
    return Cart.objects.select_for_update().get(customer=customer)


def _get_sellable_product(product_id) -> Product:
    product = Product.objects.filter(pk=product_id).first()
    if product is None or not product.is_active:
        raise ProductUnavailableError("Product is not available.")
    return product


def _check_stock(product: Product, quantity: int) -> None:
    available = available_quantity(product)
    if available is None:
        return
    if available <= 0:
        raise InsufficientStockError(f"{product.name} is out of stock.", available=0)
    if quantity > available:
        raise InsufficientStockError(
            f"Only {available} {product.unit} of {product.name} available.",
            available=available,
        )


def _positive_qty(quantity) -> int:
    try:
        qty = _to_int_qty(quantity)
    except ValueError as e:
        raise CartError(str(e)) from e
    if qty < 1:
        raise CartError("quantity must be at least 1")
    return qty


# ============================================================
# READ
# ============================================================


def get_cart(customer) -> Cart:
    cart, _ = Cart.objects.get_or_create(customer=customer)
    return cart


@transaction.atomic
def refresh_cart(customer) -> CartRefreshResult:
    """
    Bring cart lines in line with current products:
    - drop lines whose product is gone or inactive
    - re-price lines to the current product price
    - clamp quantities to available stock (drop when none left)
    """
    cart = _get_locked_cart(customer)
    result = CartRefreshResult(cart=cart)

    for item in cart.items.select_related("product"):
        product = item.product
        label = item.product_name or "Item"

        if product is None or not product.is_active:
            item.delete()
            result.changes.append(f"{label} is no longer available and was removed.")
            continue

        changed = []
        price = _money(product.price)
        if price != _money(item.unit_price):
            item.unit_price = price
            changed.append("unit_price")
            result.changes.append(f"{product.name} price changed to {price}.")

        available = available_quantity(product)
        if available is not None:
            if available <= 0:
                item.delete()
                result.changes.append(f"{product.name} is out of stock and was removed.")
                continue
            if item.quantity > available:
                item.quantity = available
                changed.append("quantity")
                result.changes.append(f"{product.name} quantity reduced to {available}.")

        if product.name != item.product_name:
            item.product_name = product.name
            changed.append("product_name")

        if changed:
            item.save(update_fields=changed)

    if result.changes:
        cart.touch()
        logger.info(
            "Cart refreshed with changes",
            extra={"cart_id": str(cart.pk), "changes": len(result.changes)},
        )

    return result


# ============================================================
# MUTATIONS
# ============================================================


@transaction.atomic
def add_item(*, customer, product_id, quantity=1) -> CartItem:
    qty = _positive_qty(quantity)
    product = _get_sellable_product(product_id)
    cart = _get_locked_cart(customer)

    item = cart.items.filter(product=product).first()
    new_qty = qty + (int(item.quantity) if item else 0)
    _check_stock(product, new_qty)

    if item is None:
        item = CartItem.objects.create(
            cart=cart,
            product=product,
            product_name=product.name,
            quantity=new_qty,
            unit_price=_money(product.price),
        )
    else:
        item.quantity = new_qty
        item.unit_price = _money(product.price)
        item.save(update_fields=["quantity", "unit_price"])

    cart.touch()
    return item


@transaction.atomic
def update_item_quantity(*, customer, product_id, quantity) -> CartItem | None:
    """Set a line's quantity. quantity <= 0 removes the line (returns None)."""
    try:
        qty = _to_int_qty(quantity)
    except ValueError as e:
        raise CartError(str(e)) from e

    cart = _get_locked_cart(customer)
    item = cart.items.select_related("product").filter(product_id=product_id).first()
    if item is None:
        raise CartError("Item is not in the cart.")

    if qty <= 0:
        item.delete()
        cart.touch()
        return None

    product = item.product
    if product is None or not product.is_active:
        raise ProductUnavailableError("Product is not available.")
    _check_stock(product, qty)

    item.quantity = qty
    item.save(update_fields=["quantity"])
    cart.touch()
    return item


@transaction.atomic
def remove_item(*, customer, product_id) -> bool:
    cart = _get_locked_cart(customer)
    deleted, _ = cart.items.filter(product_id=product_id).delete()
    cart.touch()
    return deleted > 0


@transaction.atomic
def clear_cart(*, customer) -> None:
    cart = _get_locked_cart(customer)
    cart.items.all().delete()
    cart.touch()


def delete_cart(*, customer_id) -> int:
    """Drop the whole cart (after a successful checkout)."""
    _, per_model = Cart.objects.filter(customer_id=customer_id).delete()
    return int(per_model.get("cart.Cart", 0))


def purge_stale_carts(*, idle_days: int) -> int:
    cutoff = timezone.now() - timedelta(days=int(idle_days))
    _, per_model = Cart.objects.filter(last_activity__lt=cutoff).delete()
    return int(per_model.get("cart.Cart", 0))
