# orders/services/order_stats.py

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Sum

from orders.models import Order

TWOPLACES = Decimal("0.01")


def get_order_stats(*, date_from=None) -> dict:
    """Dashboard numbers. Revenue only counts paid orders."""
    qs = Order.objects.all()
    if date_from:
        qs = qs.filter(created_at__date__gte=date_from)

    by_status = {code: 0 for code, _ in Order.STATUS_CHOICES}
    for row in qs.values("status").annotate(n=Count("id")):
        by_status[row["status"]] = row["n"]

    paid = qs.filter(payment_status=Order.PAYMENT_PAID)
    paid_count = paid.count()
    revenue = paid.aggregate(total=Sum("total")).get("total") or Decimal("0.00")

    average = Decimal("0.00")
    if paid_count:
        average = (revenue / paid_count).quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    return {
        "total_orders": qs.count(),
        "paid_orders": paid_count,
        "revenue": str(revenue.quantize(TWOPLACES)),
        "average_order_value": str(average),
        "by_status": by_status,
    }
