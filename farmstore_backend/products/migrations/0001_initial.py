"""
PATH: products/migrations/0001_initial.py

MIGRATION: CREATE Product (local sellable-item projection + stock cache)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("image_url", models.URLField(blank=True, default="", max_length=500)),
                (
                    "source_kind",
                    models.CharField(
                        choices=[
                            ("catalog", "Catalog item"),
                            ("inventory", "Inventory-linked"),
                            ("service", "Service-linked"),
                            ("livestock", "Livestock-linked"),
                        ],
                        default="catalog",
                        max_length=16,
                    ),
                ),
                (
                    "source_ref",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Remote id (inventory item / service / animal). Empty for catalog items.",
                        max_length=64,
                    ),
                ),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "cost_price",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                ("unit", models.CharField(default="Unit", max_length=32)),
                ("track_inventory", models.BooleanField(default=True)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("low_stock_threshold", models.PositiveIntegerField(default=5)),
                ("sales_count", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["source_kind", "source_ref"],
                        name="products_pr_source__a91c0e_idx",
                    ),
                    models.Index(fields=["is_active"], name="products_pr_is_acti_3b7f52_idx"),
                ],
            },
        ),
    ]
