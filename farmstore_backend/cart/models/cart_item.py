# cart/models/cart_item.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class CartItem(models.Model):
    """
    Cart line.

    unit_price is the price seen when the line was added or last refreshed;
    checkout always re-prices from the current Product.
    """

    cart = models.ForeignKey(
        "cart.Cart",
        on_delete=models.CASCADE,
        related_name="items",
    )

    # Nullable so a deleted product surfaces as an unavailable line
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cart_items",
    )
    product_name = models.CharField(max_length=255, blank=True, default="")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="uniq_cart_product_line",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return (Decimal(self.unit_price or 0) * Decimal(int(self.quantity or 0))).quantize(
            Decimal("0.01")
        )

    def __str__(self):
        return f"{self.product_name or self.product_id} x{self.quantity}"
