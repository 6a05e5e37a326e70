# orders/views/checkout.py

"""
CHECKOUT

POST /api/store/checkout/

Flow:
- validate input (address + payment method)
- build the order from the customer's cart (all-or-nothing)
- Paystack: open a hosted session and return its URL
- Bank transfer / cash on delivery: return collection instructions

A gateway failure after the order is created answers 502 with the order
so the client can retry through /orders/<id>/pay/.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import CheckoutInputSerializer
from orders.services.cart_validation import (
    CartValidationError,
    CheckoutError,
)
from orders.services.order_builder import create_order_from_cart
from payments.services.payment_service import PaymentGatewayError, initialize_payment

logger = logging.getLogger(__name__)

OFFLINE_PAYMENT_MESSAGES = {
    Order.METHOD_BANK_TRANSFER: (
        "Transfer the order total to the store account using your order number "
        "as the reference. Your order is confirmed once payment is received."
    ),
    Order.METHOD_CASH_ON_DELIVERY: "Pay the order total in cash when your order is delivered.",
}


class StoreWriteThrottle(UserRateThrottle):
    scope = "public_write"


def _order_payload(order: Order) -> dict:
    return {
        "id": str(order.pk),
        "order_number": order.order_number,
        "total": str(order.total),
        "status": order.status,
        "payment_status": order.payment_status,
    }


class CheckoutView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [StoreWriteThrottle]

    @extend_schema(
        tags=["Store"],
        request=CheckoutInputSerializer,
        responses={
            201: OpenApiResponse(description="Order created (+ payment session for Paystack)"),
            400: OpenApiResponse(description="Empty cart, invalid address or unavailable items"),
            502: OpenApiResponse(description="Payment provider error (order kept, retry via pay/)"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = CheckoutInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = create_order_from_cart(
                customer=request.user,
                shipping_address=data["shipping_address"],
                payment_method=data["payment_method"],
                notes=data.get("notes") or "",
            )
        except CartValidationError as e:
            return Response(
                {"detail": str(e), "errors": e.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except CheckoutError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        body = {"order": _order_payload(order)}

        if order.payment_method != Order.METHOD_PAYSTACK:
            body["message"] = OFFLINE_PAYMENT_MESSAGES.get(order.payment_method, "")
            return Response(body, status=status.HTTP_201_CREATED)

        try:
            session = initialize_payment(order=order, email=request.user.email)
        except PaymentGatewayError as e:
            logger.warning(
                "Checkout payment initialization failed",
                extra={"order_id": str(order.pk)},
            )
            body["detail"] = f"Payment provider error: {e}"
            return Response(body, status=status.HTTP_502_BAD_GATEWAY)

        body["payment"] = {
            "authorization_url": session.authorization_url,
            "access_code": session.access_code,
            "reference": session.reference,
        }
        return Response(body, status=status.HTTP_201_CREATED)
