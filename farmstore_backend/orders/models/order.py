# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string


def generate_order_number() -> str:
    """ORD-<yymmdd>-<5 random chars>. Uniqueness is enforced by the DB."""
    date_part = timezone.now().strftime("%y%m%d")
    random_part = get_random_string(5, allowed_chars="ABCDEFGHJKLMNPQRSTUVWXYZ23456789")
    return f"ORD-{date_part}-{random_part}"


class Order(models.Model):
    """
    Storefront order.

    Key rules:
    - Created once by the order builder; money fields are never recomputed
      (total == subtotal + shipping_cost - discount at creation time).
    - status only moves through orders.services.order_lifecycle.
    - payment_status / inventory_deducted / finance_record_id are only
      moved by payment reconciliation, through conditional UPDATEs.
    - Items are snapshots (OrderItem); they never follow later Product edits.
    """

    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PAID = "paid"
    PAYMENT_REFUNDED = "refunded"
    PAYMENT_PARTIALLY_REFUNDED = "partially_refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_REFUNDED, "Refunded"),
        (PAYMENT_PARTIALLY_REFUNDED, "Partially Refunded"),
    ]

    METHOD_PAYSTACK = "paystack"
    METHOD_BANK_TRANSFER = "bank_transfer"
    METHOD_CASH_ON_DELIVERY = "cash_on_delivery"

    PAYMENT_METHOD_CHOICES = [
        (METHOD_PAYSTACK, "Paystack"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
        (METHOD_CASH_ON_DELIVERY, "Cash on Delivery"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=32,
        unique=True,
        default=generate_order_number,
        help_text="System-generated human-readable order number",
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Customer snapshot (profile edits never rewrite history)
    customer_name = models.CharField(max_length=255, blank=True, default="")
    customer_email = models.EmailField(blank=True, default="")
    customer_phone = models.CharField(max_length=32, blank=True, default="")

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    payment_status = models.CharField(
        max_length=24, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_UNPAID
    )
    payment_method = models.CharField(
        max_length=24, choices=PAYMENT_METHOD_CHOICES, default=METHOD_PAYSTACK
    )

    # Money fields (server authoritative, fixed at creation)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    # {"street", "city", "state", "postal_code", "country"}
    shipping_address = models.JSONField(default=dict, blank=True)

    notes = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")
    cancellation_reason = models.TextField(blank=True, default="")

    paid_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # Reconciliation guards
    inventory_deducted = models.BooleanField(default=False)
    finance_record_id = models.CharField(max_length=64, null=True, blank=True, default=None)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_orde_created_5c2e1b_idx"),
            models.Index(fields=["status", "created_at"], name="orders_orde_status_8d4a90_idx"),
            models.Index(fields=["payment_status"], name="orders_orde_payment_e71b3c_idx"),
            models.Index(fields=["customer_email"], name="orders_orde_custome_2a9f64_idx"),
        ]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PAYMENT_PAID

    def __str__(self):
        return f"{self.order_number} | {self.total} | {self.status}"
