# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify


class Product(models.Model):
    """
    Local sellable-item projection.

    PROVENANCE (tagged, not subclassed):
    - source_kind says where the item comes from (catalog, remote inventory
      item, remote service offering, livestock record)
    - source_ref holds the remote id for the non-catalog kinds
    - cart/order code only ever reads the common fields below

    STOCK MODEL (IMPORTANT):
    - stock_quantity is a CACHE; for inventory-linked products the truth
      lives in the farm manager system
    - it is only moved with atomic F() updates (products.services.stock_cache)
    """

    class SourceKind(models.TextChoices):
        CATALOG = "catalog", "Catalog item"
        INVENTORY = "inventory", "Inventory-linked"
        SERVICE = "service", "Service-linked"
        LIVESTOCK = "livestock", "Livestock-linked"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    image_url = models.URLField(max_length=500, blank=True, default="")

    source_kind = models.CharField(
        max_length=16,
        choices=SourceKind.choices,
        default=SourceKind.CATALOG,
    )
    source_ref = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Remote id (inventory item / service / animal). Empty for catalog items.",
    )

    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    unit = models.CharField(max_length=32, default="Unit")

    track_inventory = models.BooleanField(default=True)
    stock_quantity = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=5)

    sales_count = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["source_kind", "source_ref"], name="products_pr_source__a91c0e_idx"),
            models.Index(fields=["is_active"], name="products_pr_is_acti_3b7f52_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.source_kind})"

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError({"price": "price cannot be negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < Decimal("0.00"):
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.source_kind != self.SourceKind.CATALOG and not (self.source_ref or "").strip():
            raise ValidationError({"source_ref": f"{self.source_kind} products need a source_ref"})

    def save(self, *args, **kwargs):
        if not self.slug and self.name:
            self.slug = f"{slugify(self.name)[:200]}-{uuid.uuid4().hex[:6]}"
        super().save(*args, **kwargs)

    @property
    def inventory_item_ref(self) -> str:
        """Remote inventory id, only for inventory-linked products."""
        if self.source_kind == self.SourceKind.INVENTORY:
            return self.source_ref
        return ""

    @property
    def is_in_stock(self) -> bool:
        if not self.track_inventory:
            return True
        return int(self.stock_quantity or 0) > 0

    @property
    def is_low_stock(self) -> bool:
        if not self.track_inventory:
            return False
        qty = int(self.stock_quantity or 0)
        return 0 < qty <= int(self.low_stock_threshold or 0)
