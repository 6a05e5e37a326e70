# payments/views/verify.py

"""
GET /api/store/payment/verify/?reference=...

Called by the storefront after the customer returns from the hosted
Paystack page. Safe to repeat (reload): the reconciler is idempotent.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from payments.serializers import PaymentVerifyResponseSerializer
from payments.services.payment_service import (
    RESULT_PENDING,
    PaymentError,
    PaymentGatewayError,
    verify_payment,
)


class PublicPollThrottle(AnonRateThrottle):
    scope = "public_poll"


class PaymentVerifyView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Store"],
        parameters=[OpenApiParameter("reference", str, required=True)],
        responses={
            200: PaymentVerifyResponseSerializer,
            400: OpenApiResponse(description="Payment failed, bad or unknown reference"),
            502: OpenApiResponse(description="Payment provider error"),
        },
    )
    def get(self, request, *args, **kwargs):
        reference = (request.query_params.get("reference") or "").strip()
        if not reference:
            return Response(
                {"status": "failed", "reason": "reference is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = verify_payment(reference)
        except PaymentGatewayError as e:
            return Response(
                {"status": "error", "reason": f"Payment provider error: {e}"},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        except PaymentError as e:
            return Response(
                {"status": "failed", "reason": str(e)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        order_id = str(result.order_id) if result.order_id else None

        if result.is_success:
            return Response(
                {"status": "success", "order_id": order_id, "detail": result.status},
                status=status.HTTP_200_OK,
            )

        if result.status == RESULT_PENDING:
            return Response(
                {"status": "pending", "order_id": order_id},
                status=status.HTTP_200_OK,
            )

        return Response(
            {"status": "failed", "order_id": order_id, "reason": result.reason},
            status=status.HTTP_400_BAD_REQUEST,
        )
