# customers/models/address.py

import uuid

from django.db import models


class CustomerAddress(models.Model):
    """
    Saved shipping address (address book entry).

    Checkout appends the address used for an order when it is new.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="addresses",
    )

    label = models.CharField(max_length=64, default="Home")
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=120)
    postal_code = models.CharField(max_length=32, blank=True, default="")
    country = models.CharField(max_length=120, default="Nigeria")
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["customer", "created_at"],
                name="customers_c_custome_4e0f7b_idx",
            ),
        ]

    def __str__(self):
        return f"{self.label}: {self.street}, {self.city}, {self.state}"
