# orders/services/cart_validation.py

"""
CART VALIDATION (CHECKOUT GATE)

Re-resolves every cart line against the CURRENT product row:
- missing / inactive products are reported as unavailable
- tracked products must have stock >= requested quantity
- price at checkout time wins over the price captured in the cart

Checkout is all-or-nothing: any per-line error rejects the whole cart.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from products.models import Product
from products.services.stock_cache import available_quantity

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class CheckoutError(Exception):
    pass


class EmptyCartError(CheckoutError):
    pass


class CartValidationError(CheckoutError):
    def __init__(self, errors: list[dict]):
        super().__init__("Some items in your cart are unavailable.")
        self.errors = errors


@dataclass(frozen=True)
class ResolvedOrderItem:
    product_id: object
    inventory_item_ref: str
    name: str
    slug: str
    image_url: str
    price: Decimal
    cost_price: Decimal
    quantity: int
    line_total: Decimal
    unit: str


def resolve_cart_items(cart_items) -> list[ResolvedOrderItem]:
    """
    cart_items: iterable of CartItem rows.
    Returns one snapshot per line or raises CartValidationError.
    """
    lines = list(cart_items)
    if not lines:
        raise EmptyCartError("Your cart is empty.")

    product_ids = [line.product_id for line in lines if line.product_id]
    products = {p.pk: p for p in Product.objects.filter(pk__in=product_ids)}

    resolved: list[ResolvedOrderItem] = []
    errors: list[dict] = []

    for line in lines:
        qty = int(line.quantity or 0)
        product = products.get(line.product_id)
        label = (product.name if product else "") or line.product_name or "Item"

        if product is None or not product.is_active:
            errors.append(
                {
                    "product_id": str(line.product_id) if line.product_id else None,
                    "name": label,
                    "reason": "Product is no longer available.",
                }
            )
            continue

        if qty < 1:
            errors.append(
                {"product_id": str(product.pk), "name": label, "reason": "Invalid quantity."}
            )
            continue

        available = available_quantity(product)
        if available is not None and available < qty:
            errors.append(
                {
                    "product_id": str(product.pk),
                    "name": label,
                    "reason": f"Only {available} {product.unit} available.",
                    "available": available,
                    "requested": qty,
                }
            )
            continue

        price = _money(product.price)
        resolved.append(
            ResolvedOrderItem(
                product_id=product.pk,
                inventory_item_ref=product.inventory_item_ref,
                name=product.name,
                slug=product.slug,
                image_url=product.image_url or "",
                price=price,
                cost_price=_money(product.cost_price),
                quantity=qty,
                line_total=(price * qty).quantize(TWOPLACES, rounding=ROUND_HALF_UP),
                unit=product.unit,
            )
        )

    if errors:
        raise CartValidationError(errors)

    return resolved
