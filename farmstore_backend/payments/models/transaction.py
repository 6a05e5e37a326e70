# payments/models/transaction.py

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Transaction(models.Model):
    """
    Payment attempt for an Order.

    Lifecycle:
    - created 'pending' when a gateway session is initialized (never at verify time)
    - moves to exactly one terminal state ('success' or 'failed') and never back
    - 'reversed' is reserved for provider-side reversals

    Idempotency rules:
    - reference is unique (gateway reference)
    - at most one 'success' row per order (partial unique constraint)
    """

    PROVIDER_PAYSTACK = "paystack"
    PROVIDER_CHOICES = [
        (PROVIDER_PAYSTACK, "Paystack"),
    ]

    STATUS_PENDING = "pending"
    STATUS_SUCCESS = "success"
    STATUS_FAILED = "failed"
    STATUS_REVERSED = "reversed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_SUCCESS, "Success"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REVERSED, "Reversed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="transactions",
    )

    provider = models.CharField(max_length=32, choices=PROVIDER_CHOICES, default=PROVIDER_PAYSTACK)

    reference = models.CharField(
        max_length=128,
        unique=True,
        help_text="Gateway reference. Must be unique for idempotency.",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=8, default="NGN")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    authorization_url = models.URLField(max_length=500, blank=True, default="")
    access_code = models.CharField(max_length=128, blank=True, default="")

    provider_reference = models.CharField(max_length=128, blank=True, default="")
    channel = models.CharField(max_length=32, blank=True, default="")
    gateway_response = models.CharField(max_length=255, blank=True, default="")
    failure_reason = models.CharField(max_length=255, blank=True, default="")
    provider_payload = models.JSONField(default=dict, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="payments_tr_status_41c7d2_idx"),
            models.Index(fields=["order", "created_at"], name="payments_tr_order_i_9e03fa_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=Q(status="success"),
                name="uniq_success_transaction_per_order",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in {self.STATUS_SUCCESS, self.STATUS_FAILED, self.STATUS_REVERSED}

    def __str__(self):
        return f"{self.reference} | {self.amount} {self.currency} | {self.status}"
