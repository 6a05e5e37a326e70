# orders/models/status_history.py

from django.db import models
from django.utils import timezone


class OrderStatusHistory(models.Model):
    """Append-only audit trail of order status changes."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )

    status = models.CharField(max_length=16)
    note = models.TextField(blank=True, default="")
    changed_by = models.CharField(max_length=255, blank=True, default="")
    changed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["changed_at", "id"]
        verbose_name_plural = "order status history"

    def __str__(self):
        return f"{self.order_id} -> {self.status} @ {self.changed_at:%Y-%m-%d %H:%M}"
