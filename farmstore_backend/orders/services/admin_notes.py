# orders/services/admin_notes.py

from __future__ import annotations

from django.db.models import F, TextField, Value
from django.db.models.functions import Concat
from django.utils import timezone

from orders.models import Order


def append_admin_note(*, order_id, note: str) -> int:
    """
    Append a timestamped line to Order.admin_notes in a single UPDATE.
    Concurrent writers never clobber each other's notes.
    """
    text = str(note or "").strip()
    if not text:
        return 0

    line = f"[{timezone.now():%Y-%m-%d %H:%M}] {text}\n"
    return Order.objects.filter(pk=order_id).update(
        admin_notes=Concat(F("admin_notes"), Value(line), output_field=TextField())
    )
