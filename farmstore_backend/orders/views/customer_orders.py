# orders/views/customer_orders.py

"""
CUSTOMER ORDER HISTORY + PAYMENT RE-INITIATION

- GET  /api/store/orders/            (paginated, own orders only)
- GET  /api/store/orders/<id>/
- POST /api/store/orders/<id>/pay/   (new Paystack session for a pending order)
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import OrderDetailSerializer, OrderSummarySerializer
from orders.views.checkout import StoreWriteThrottle
from payments.serializers import PaymentSessionSerializer
from payments.services.payment_service import (
    PaymentGatewayError,
    PaymentNotRetryableError,
    initialize_payment,
)


class CustomerOrderListView(generics.ListAPIView):
    serializer_class = OrderSummarySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return (
            Order.objects.filter(customer=self.request.user)
            .prefetch_related("items")
            .order_by("-created_at")
        )


class CustomerOrderDetailView(generics.RetrieveAPIView):
    serializer_class = OrderDetailSerializer
    permission_classes = [IsAuthenticated]
    lookup_url_kwarg = "order_id"

    def get_queryset(self):
        return Order.objects.filter(customer=self.request.user).prefetch_related(
            "items", "status_history"
        )


class OrderPayView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [StoreWriteThrottle]

    @extend_schema(
        tags=["Store"],
        request=None,
        responses={
            200: PaymentSessionSerializer,
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order is not awaiting payment"),
            502: OpenApiResponse(description="Payment provider error"),
        },
    )
    def post(self, request, order_id, *args, **kwargs):
        order = get_object_or_404(Order, pk=order_id, customer=request.user)

        if order.payment_method != Order.METHOD_PAYSTACK:
            return Response(
                {"detail": "Online payment is only available for Paystack orders."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            session = initialize_payment(order=order, email=request.user.email)
        except PaymentNotRetryableError as e:
            return Response({"detail": str(e)}, status=status.HTTP_409_CONFLICT)
        except PaymentGatewayError as e:
            return Response(
                {"detail": f"Payment provider error: {e}"},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response(
            {
                "authorization_url": session.authorization_url,
                "access_code": session.access_code,
                "reference": session.reference,
            },
            status=status.HTTP_200_OK,
        )
