# orders/views/admin_orders.py

"""
STAFF ORDER MANAGEMENT

- GET   /api/admin/store/orders/        (filters: status, payment_status,
                                         payment_method, date_from, date_to, q)
- GET   /api/admin/store/orders/<id>/   (with transactions)
- PATCH /api/admin/store/orders/<id>/   {status?, note?, admin_notes?}
- GET   /api/admin/store/stats/         (?date_from=YYYY-MM-DD)
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    AdminOrderDetailSerializer,
    AdminOrderUpdateSerializer,
    OrderSummarySerializer,
)
from orders.services.order_lifecycle import InvalidOrderTransitionError
from orders.services.order_stats import get_order_stats
from orders.services.order_status import update_order_status


class AdminOrderListView(generics.ListAPIView):
    serializer_class = OrderSummarySerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_queryset(self):
        return Order.objects.all().prefetch_related("items").order_by("-created_at")


class AdminOrderDetailView(APIView):
    permission_classes = [IsAdminUser]

    def _get_order(self, order_id) -> Order:
        return get_object_or_404(
            Order.objects.prefetch_related("items", "status_history", "transactions"),
            pk=order_id,
        )

    @extend_schema(tags=["Admin"], responses={200: AdminOrderDetailSerializer})
    def get(self, request, order_id, *args, **kwargs):
        return Response(AdminOrderDetailSerializer(self._get_order(order_id)).data)

    @extend_schema(
        tags=["Admin"],
        request=AdminOrderUpdateSerializer,
        responses={
            200: AdminOrderDetailSerializer,
            400: OpenApiResponse(description="Validation error"),
            409: OpenApiResponse(description="Illegal status transition"),
        },
    )
    def patch(self, request, order_id, *args, **kwargs):
        order = self._get_order(order_id)

        s = AdminOrderUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        if "admin_notes" in data:
            Order.objects.filter(pk=order.pk).update(admin_notes=data["admin_notes"])

        if data.get("status") and data["status"] != order.status:
            try:
                update_order_status(
                    order_id=order.pk,
                    target_status=data["status"],
                    note=data.get("note") or "",
                    actor=request.user.email,
                )
            except InvalidOrderTransitionError as e:
                return Response(
                    {
                        "detail": str(e),
                        "current_status": e.current,
                        "requested_status": e.target,
                    },
                    status=status.HTTP_409_CONFLICT,
                )

        return Response(AdminOrderDetailSerializer(self._get_order(order.pk)).data)


class AdminOrderStatsView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        tags=["Admin"],
        parameters=[OpenApiParameter("date_from", str, required=False)],
        responses={200: OpenApiResponse(description="Order dashboard numbers")},
    )
    def get(self, request, *args, **kwargs):
        raw = (request.query_params.get("date_from") or "").strip()
        date_from = None
        if raw:
            date_from = parse_date(raw)
            if date_from is None:
                return Response(
                    {"detail": "date_from must be YYYY-MM-DD"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        return Response(get_order_stats(date_from=date_from))
