# payments/views/admin_transactions.py

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics
from rest_framework.permissions import IsAdminUser

from payments.filters import TransactionFilter
from payments.models import Transaction
from payments.serializers import TransactionSerializer


class AdminTransactionListView(generics.ListAPIView):
    """GET /api/admin/store/transactions/ (filters: status, provider, date_from, date_to, reference)"""

    serializer_class = TransactionSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = TransactionFilter

    def get_queryset(self):
        return Transaction.objects.select_related("order").order_by("-created_at")
