# payments/filters.py

from __future__ import annotations

import django_filters

from payments.models import Transaction


class TransactionFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Transaction.STATUS_CHOICES)
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    reference = django_filters.CharFilter(field_name="reference", lookup_expr="icontains")

    class Meta:
        model = Transaction
        fields = ["status", "provider"]
