# customers/services/addresses.py

"""
ADDRESS BOOK SERVICE

Checkout captures the shipping address into the customer's address book
when it is not already saved. Address capture never blocks checkout.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError

from customers.models import CustomerAddress

logger = logging.getLogger(__name__)


def normalize_address(raw: dict | None) -> dict:
    raw = raw or {}
    default_country = getattr(settings, "STORE_DEFAULT_COUNTRY", "Nigeria")
    return {
        "street": str(raw.get("street") or "").strip(),
        "city": str(raw.get("city") or "").strip(),
        "state": str(raw.get("state") or "").strip(),
        "postal_code": str(raw.get("postal_code") or "").strip(),
        "country": str(raw.get("country") or "").strip() or default_country,
    }


def save_checkout_address(*, customer, address: dict) -> CustomerAddress | None:
    """
    Returns the new address row, or None when nothing was saved
    (incomplete, already known, or a database hiccup).
    """
    normalized = normalize_address(address)
    if not (normalized["street"] and normalized["city"] and normalized["state"]):
        return None

    try:
        existing = CustomerAddress.objects.filter(customer=customer)
        if existing.filter(
            street=normalized["street"],
            city=normalized["city"],
            state=normalized["state"],
            postal_code=normalized["postal_code"],
        ).exists():
            return None

        return CustomerAddress.objects.create(
            customer=customer,
            label="Checkout Address",
            is_default=not existing.exists(),
            **normalized,
        )
    except DatabaseError:
        logger.exception(
            "Failed to save checkout address",
            extra={"customer_id": str(customer.pk)},
        )
        return None
