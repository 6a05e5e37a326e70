"""
PATH: payments/migrations/0001_initial.py

MIGRATION: CREATE Transaction (gateway payment attempts)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Transaction",
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
                (
                    "provider",
                    models.CharField(
                        choices=[("paystack", "Paystack")],
                        default="paystack",
                        max_length=32,
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        help_text="Gateway reference. Must be unique for idempotency.",
                        max_length=128,
                        unique=True,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("currency", models.CharField(default="NGN", max_length=8)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("success", "Success"),
                            ("failed", "Failed"),
                            ("reversed", "Reversed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("authorization_url", models.URLField(blank=True, default="", max_length=500)),
                ("access_code", models.CharField(blank=True, default="", max_length=128)),
                ("provider_reference", models.CharField(blank=True, default="", max_length=128)),
                ("channel", models.CharField(blank=True, default="", max_length=32)),
                ("gateway_response", models.CharField(blank=True, default="", max_length=255)),
                ("failure_reason", models.CharField(blank=True, default="", max_length=255)),
                ("provider_payload", models.JSONField(blank=True, default=dict)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="payments_tr_status_41c7d2_idx"),
                    models.Index(fields=["order", "created_at"], name="payments_tr_order_i_9e03fa_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "success")),
                        fields=("order",),
                        name="uniq_success_transaction_per_order",
                    )
                ],
            },
        ),
    ]
