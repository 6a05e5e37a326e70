# cart/models/cart.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Cart(models.Model):
    """
    One shopping cart per customer (DB enforced).

    Totals are derived from lines; nothing is stored on the cart itself
    except the idle clock used by housekeeping.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    last_activity = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-last_activity"]

    @property
    def item_count(self) -> int:
        return sum(int(i.quantity or 0) for i in self.items.all())

    @property
    def subtotal(self) -> Decimal:
        total = Decimal("0.00")
        for item in self.items.all():
            total += item.line_total
        return total

    def touch(self) -> None:
        now = timezone.now()
        Cart.objects.filter(pk=self.pk).update(last_activity=now)
        self.last_activity = now

    def __str__(self):
        return f"Cart<{self.customer_id}>"
