# payments/views/webhook.py

"""
POST /api/store/payment/webhook/

- Signature (HMAC-SHA512 of the RAW body) is checked before anything else.
- Once the signature is valid the gateway always gets 200 {received: true};
  internal failures are logged, never surfaced (avoids retry storms).
"""

from __future__ import annotations

import json
import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import BaseParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from payments.services.payment_service import handle_paystack_webhook
from payments.services.paystack import verify_paystack_signature

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


class RawBodyParser(BaseParser):
    """Leaves the body untouched; the view reads request.body itself."""

    media_type = "*/*"

    def parse(self, stream, media_type=None, parser_context=None):
        return {}


class PaystackWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [RawBodyParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        tags=["Payments"],
        request=None,
        responses={
            200: OpenApiResponse(description="Received"),
            401: OpenApiResponse(description="Invalid signature"),
        },
    )
    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""
        signature = request.headers.get("x-paystack-signature")

        if not verify_paystack_signature(raw_body=raw_body, signature=signature):
            logger.warning("Invalid Paystack signature")
            return Response(
                {"received": False, "detail": "Invalid signature"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            payload = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Paystack webhook body is not valid JSON")
            return Response({"received": True}, status=status.HTTP_200_OK)

        try:
            outcome = handle_paystack_webhook(payload if isinstance(payload, dict) else {})
            logger.info("Paystack webhook processed", extra={"outcome": outcome})
        except Exception:
            logger.exception("Unhandled webhook error")

        return Response({"received": True}, status=status.HTTP_200_OK)
