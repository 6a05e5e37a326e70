# orders/models/order_item.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class OrderItem(models.Model):
    """
    Line snapshot for an Order.

    name/price/cost/unit are copied from the Product at checkout time and
    never re-derived afterwards.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    # Remote inventory id when the product was inventory-linked at checkout
    inventory_item_ref = models.CharField(max_length=64, blank=True, default="")

    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=255, blank=True, default="")
    image_url = models.URLField(max_length=500, blank=True, default="")

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="quantity * price (server computed)",
    )
    unit = models.CharField(max_length=32, default="Unit")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be >= 1")

        self.line_total = (Decimal(self.quantity) * Decimal(self.price)).quantize(
            Decimal("0.01")
        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def line_cost(self) -> Decimal:
        return (self.cost_price or Decimal("0.00")) * Decimal(int(self.quantity or 0))

    def __str__(self):
        return f"{self.name} x{self.quantity}"
