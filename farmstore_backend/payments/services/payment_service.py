# payments/services/payment_service.py

"""
PAYMENT SERVICE (INITIALIZE + RECONCILE)

initialize_payment:
- opens a Paystack session for a pending order
- persists a 'pending' Transaction BEFORE returning the hosted URL
- gateway failure -> no Transaction row, PaymentGatewayError raised

verify_payment (reconciler) is reached from two racing producers, the
customer's verify redirect and the gateway webhook. It is idempotent:
1) unknown reference -> UnknownReferenceError (never creates a Transaction)
2) already 'success' -> "already_verified", no gateway call, no mutation
3) already 'failed'  -> stored failure reason, no gateway call
4) gateway verify; in-flight statuses keep the Transaction pending
5) non-success or amount mismatch (kobo) -> Transaction 'failed'
6) success -> conditional UPDATE pending -> success; only the caller whose
   UPDATE matched runs order payment confirmation
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from orders.models import Order
from orders.services.admin_notes import append_admin_note
from orders.services.payment_confirmation import confirm_order_payment
from payments.models import Transaction
from payments.services.paystack import (
    PaystackError,
    paystack_initialize_transaction,
    to_kobo,
    verify_paystack_transaction,
)

logger = logging.getLogger(__name__)

IN_FLIGHT_STATUSES = {"ongoing", "pending", "processing", "queued", "abandoned"}

RESULT_SUCCESS = "success"
RESULT_ALREADY_VERIFIED = "already_verified"
RESULT_FAILED = "failed"
RESULT_PENDING = "pending"


# ============================================================
# DOMAIN ERRORS
# ============================================================


class PaymentError(Exception):
    pass


class PaymentGatewayError(PaymentError):
    pass


class UnknownReferenceError(PaymentError):
    pass


class PaymentNotRetryableError(PaymentError):
    pass


@dataclass(frozen=True)
class PaymentSession:
    transaction: Transaction
    reference: str
    authorization_url: str
    access_code: str


@dataclass(frozen=True)
class ReconcileResult:
    status: str
    reference: str
    order_id: object = None
    reason: str = ""

    @property
    def is_success(self) -> bool:
        return self.status in {RESULT_SUCCESS, RESULT_ALREADY_VERIFIED}


# ============================================================
# INITIALIZE
# ============================================================


def _generate_reference(order: Order) -> str:
    return f"txn_{order.pk.hex}_{int(time.time() * 1000)}"


def _default_callback_url() -> str:
    cfg = (getattr(settings, "PAYMENTS", {}) or {}).get("PAYSTACK") or {}
    url = str(cfg.get("CALLBACK_URL") or "").strip()
    if url:
        return url
    base = str(getattr(settings, "FRONTEND_BASE_URL", "") or "").rstrip("/")
    return f"{base}/checkout/verify" if base else ""


def initialize_payment(
    *,
    order: Order,
    email: str | None = None,
    callback_url: str | None = None,
    metadata: dict | None = None,
) -> PaymentSession:
    if order.payment_status != Order.PAYMENT_UNPAID or order.status != Order.STATUS_PENDING:
        raise PaymentNotRetryableError("Order is not awaiting payment.")

    if order.transactions.filter(status=Transaction.STATUS_SUCCESS).exists():
        raise PaymentNotRetryableError("Order has already been paid.")

    reference = _generate_reference(order)
    currency = getattr(settings, "STORE_CURRENCY", "NGN")

    meta = {"order_id": str(order.pk), "order_number": order.order_number}
    meta.update(metadata or {})

    try:
        data = paystack_initialize_transaction(
            email=email or order.customer_email,
            amount=order.total,
            reference=reference,
            currency=currency,
            callback_url=callback_url or _default_callback_url(),
            metadata=meta,
        )
    except PaystackError as e:
        logger.warning(
            "Paystack initialize failed",
            extra={"order_id": str(order.pk), "reference": reference, "error": str(e)},
        )
        raise PaymentGatewayError(str(e)) from e

    txn = Transaction.objects.create(
        order=order,
        provider=Transaction.PROVIDER_PAYSTACK,
        reference=reference,
        amount=order.total,
        currency=currency,
        status=Transaction.STATUS_PENDING,
        authorization_url=str(data.get("authorization_url") or ""),
        access_code=str(data.get("access_code") or ""),
    )

    logger.info(
        "Payment session initialized",
        extra={"order_id": str(order.pk), "reference": reference},
    )
    return PaymentSession(
        transaction=txn,
        reference=reference,
        authorization_url=txn.authorization_url,
        access_code=txn.access_code,
    )


# ============================================================
# RECONCILE
# ============================================================


def _mark_failed(txn: Transaction, *, reason: str, verify: dict | None = None) -> None:
    Transaction.objects.filter(pk=txn.pk, status=Transaction.STATUS_PENDING).update(
        status=Transaction.STATUS_FAILED,
        failure_reason=reason[:255],
        gateway_response=str((verify or {}).get("gateway_response") or "")[:255],
        provider_payload=(verify or {}).get("raw") or {},
        updated_at=timezone.now(),
    )


def _paid_at(verify: dict):
    raw = verify.get("paid_at")
    if raw:
        parsed = parse_datetime(str(raw))
        if parsed is not None:
            return parsed
    return timezone.now()


def _failed(txn: Transaction, reason: str) -> ReconcileResult:
    return ReconcileResult(
        status=RESULT_FAILED, reference=txn.reference, order_id=txn.order_id, reason=reason
    )


def verify_payment(reference: str) -> ReconcileResult:
    ref = str(reference or "").strip()
    if not ref:
        raise PaymentError("reference is required")

    txn = Transaction.objects.filter(reference=ref).first()
    if txn is None:
        raise UnknownReferenceError(f"Unknown payment reference: {ref}")

    if txn.status == Transaction.STATUS_SUCCESS:
        return ReconcileResult(
            status=RESULT_ALREADY_VERIFIED, reference=ref, order_id=txn.order_id
        )

    if txn.status != Transaction.STATUS_PENDING:
        return _failed(txn, txn.failure_reason or f"Transaction is {txn.status}")

    try:
        verify = verify_paystack_transaction(reference=ref)
    except PaystackError as e:
        logger.warning("Paystack verify failed", extra={"reference": ref, "error": str(e)})
        raise PaymentGatewayError(str(e)) from e

    gw_status = verify.get("status") or ""

    if verify.get("ok") and gw_status in IN_FLIGHT_STATUSES:
        return ReconcileResult(status=RESULT_PENDING, reference=ref, order_id=txn.order_id)

    if not verify.get("ok") or gw_status != "success":
        reason = verify.get("gateway_response") or f"Payment {gw_status or 'not successful'}"
        logger.warning(
            "Payment not successful",
            extra={"reference": ref, "gateway_status": gw_status},
        )
        _mark_failed(txn, reason=reason, verify=verify)
        return _failed(txn, reason)

    expected = to_kobo(txn.amount)
    paid = verify.get("amount")
    if paid != expected:
        reason = f"Amount mismatch: expected {expected}, got {paid}"
        logger.error(
            "Payment amount mismatch",
            extra={"reference": ref, "expected_kobo": expected, "paid_kobo": paid},
        )
        _mark_failed(txn, reason=reason, verify=verify)
        return _failed(txn, reason)

    currency = verify.get("currency")
    if currency and txn.currency and currency.upper() != txn.currency.upper():
        reason = f"Currency mismatch: expected {txn.currency}, got {currency}"
        logger.error("Payment currency mismatch", extra={"reference": ref})
        _mark_failed(txn, reason=reason, verify=verify)
        return _failed(txn, reason)

    try:
        with transaction.atomic():
            claimed = Transaction.objects.filter(
                pk=txn.pk, status=Transaction.STATUS_PENDING
            ).update(
                status=Transaction.STATUS_SUCCESS,
                provider_reference=str(verify.get("provider_reference") or "")[:128],
                channel=str(verify.get("channel") or "")[:32],
                gateway_response=str(verify.get("gateway_response") or "")[:255],
                provider_payload=verify.get("raw") or {},
                paid_at=_paid_at(verify),
                updated_at=timezone.now(),
            )
    except IntegrityError:
        reason = "Duplicate payment: order already has a successful transaction"
        logger.error("Duplicate successful payment", extra={"reference": ref})
        _mark_failed(txn, reason=reason, verify=verify)
        append_admin_note(
            order_id=txn.order_id,
            note=f"Duplicate payment received (reference {ref}). Refund required.",
        )
        return _failed(txn, reason)

    if not claimed:
        logger.info("Payment already claimed by another worker", extra={"reference": ref})
        txn.refresh_from_db(fields=["status", "failure_reason"])
        if txn.status == Transaction.STATUS_SUCCESS:
            return ReconcileResult(
                status=RESULT_ALREADY_VERIFIED, reference=ref, order_id=txn.order_id
            )
        return _failed(txn, txn.failure_reason or f"Transaction is {txn.status}")

    logger.info("Payment verified", extra={"reference": ref, "order_id": str(txn.order_id)})
    confirm_order_payment(txn.order_id, actor="paystack")
    return ReconcileResult(status=RESULT_SUCCESS, reference=ref, order_id=txn.order_id)


def handle_paystack_webhook(payload: dict) -> str:
    """Returns a short outcome label. Unexpected errors propagate to the caller."""
    event = str((payload or {}).get("event") or "").strip()
    if event != "charge.success":
        logger.info("Paystack webhook event ignored", extra={"event": event})
        return "ignored"

    data = payload.get("data") or {}
    reference = str(data.get("reference") or "").strip()
    if not reference:
        logger.warning("Webhook received without reference")
        return "ignored"

    try:
        result = verify_payment(reference)
    except UnknownReferenceError:
        logger.warning("Webhook for unknown payment reference", extra={"reference": reference})
        return "unknown_reference"

    return result.status
