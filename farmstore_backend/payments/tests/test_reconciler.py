# payments/tests/test_reconciler.py

from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.utils import TEST_PAYSTACK, FarmStubMixin, make_customer, make_order, make_product
from payments.models import Transaction
from payments.services.payment_service import (
    RESULT_ALREADY_VERIFIED,
    RESULT_FAILED,
    RESULT_PENDING,
    RESULT_SUCCESS,
    UnknownReferenceError,
    verify_payment,
)
from payments.services.paystack import PaystackError

WEBHOOK_URL = "/api/store/payment/webhook/"
VERIFY_URL = "/api/store/payment/verify/"
VERIFY_TARGET = "payments.services.payment_service.verify_paystack_transaction"


def _gateway(status_="success", amount=200000, currency="NGN", **extra):
    body = {
        "ok": True,
        "status": status_,
        "amount": amount,
        "currency": currency,
        "reference": "",
        "gateway_response": "Successful" if status_ == "success" else "Declined",
        "channel": "card",
        "paid_at": "2026-10-19T10:00:00Z",
        "provider_reference": "4099260516",
        "raw": {"status": True},
    }
    body.update(extra)
    return body


def _sign(raw: bytes) -> str:
    return hmac.new(b"sk_test_secret", raw, hashlib.sha512).hexdigest()


@override_settings(PAYMENTS=TEST_PAYSTACK)
class PaymentReconcilerTests(FarmStubMixin, TestCase):
    """
    GUARANTEES:
    - confirmation side effects run once per order
    - amount mismatch never confirms
    - failed is terminal
    """

    def setUp(self):
        self.start_farm_stubs()
        self.customer = make_customer()
        self.product = make_product(price="1000.00", stock=5)
        self.order = make_order(self.customer, [(self.product, 2)])
        self.txn = Transaction.objects.create(
            order=self.order,
            reference="txn_test_0001",
            amount=Decimal("2000.00"),
            currency="NGN",
        )

    def test_unknown_reference_rejected_without_creating_transaction(self):
        with self.assertRaises(UnknownReferenceError):
            verify_payment("txn_missing")
        self.assertEqual(Transaction.objects.count(), 1)

    @mock.patch(VERIFY_TARGET)
    def test_already_verified_is_a_no_op(self, verify_mock):
        verify_mock.return_value = _gateway()

        first = verify_payment(self.txn.reference)
        self.assertEqual(first.status, RESULT_SUCCESS)

        self.order.refresh_from_db()
        snapshot = (
            self.order.status,
            self.order.payment_status,
            self.order.paid_at,
            self.order.finance_record_id,
            self.order.status_history.count(),
        )

        second = verify_payment(self.txn.reference)

        self.assertEqual(second.status, RESULT_ALREADY_VERIFIED)
        self.assertEqual(verify_mock.call_count, 1)
        self.order.refresh_from_db()
        self.assertEqual(
            snapshot,
            (
                self.order.status,
                self.order.payment_status,
                self.order.paid_at,
                self.order.finance_record_id,
                self.order.status_history.count(),
            ),
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.sales_count, 2)
        self.assertEqual(self.product.stock_quantity, 3)
        self.farm_register.assert_called_once()

    @mock.patch(VERIFY_TARGET)
    def test_amount_mismatch_fails_transaction_and_leaves_order(self, verify_mock):
        verify_mock.return_value = _gateway(amount=150000)

        result = verify_payment(self.txn.reference)

        self.assertEqual(result.status, RESULT_FAILED)
        self.assertIn("Amount mismatch", result.reason)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.STATUS_FAILED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_UNPAID)
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.farm_deduct.assert_not_called()

    @mock.patch(VERIFY_TARGET)
    def test_failed_transaction_is_terminal(self, verify_mock):
        verify_mock.return_value = _gateway(status_="failed")

        first = verify_payment(self.txn.reference)
        self.assertEqual(first.status, RESULT_FAILED)

        verify_mock.return_value = _gateway()
        second = verify_payment(self.txn.reference)

        self.assertEqual(second.status, RESULT_FAILED)
        self.assertEqual(second.reason, "Declined")
        self.assertEqual(verify_mock.call_count, 1)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.STATUS_FAILED)

    @mock.patch(VERIFY_TARGET)
    def test_in_flight_gateway_status_keeps_transaction_pending(self, verify_mock):
        for gw_status in ("ongoing", "pending", "processing", "queued", "abandoned"):
            verify_mock.return_value = _gateway(status_=gw_status)
            result = verify_payment(self.txn.reference)
            self.assertEqual(result.status, RESULT_PENDING)

        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.STATUS_PENDING)

    @mock.patch(VERIFY_TARGET)
    def test_race_loser_does_not_confirm(self, verify_mock):
        def _someone_else_wins(*, reference):
            Transaction.objects.filter(reference=reference).update(
                status=Transaction.STATUS_SUCCESS
            )
            return _gateway()

        verify_mock.side_effect = _someone_else_wins

        with mock.patch(
            "payments.services.payment_service.confirm_order_payment"
        ) as confirm_mock:
            result = verify_payment(self.txn.reference)

        self.assertEqual(result.status, RESULT_ALREADY_VERIFIED)
        confirm_mock.assert_not_called()

    @mock.patch(VERIFY_TARGET)
    def test_inventory_failure_does_not_unpay_order(self, verify_mock):
        from farm.client import FarmAPIError

        verify_mock.return_value = _gateway()
        self.farm_deduct.side_effect = FarmAPIError("Farm API unreachable")

        result = verify_payment(self.txn.reference)

        self.assertEqual(result.status, RESULT_SUCCESS)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertFalse(self.order.inventory_deducted)
        self.assertIn("Inventory deduction failed", self.order.admin_notes)

    @mock.patch(VERIFY_TARGET)
    def test_payment_for_cancelled_order_is_recorded_without_fulfilment(self, verify_mock):
        verify_mock.return_value = _gateway()
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_CANCELLED)

        verify_payment(self.txn.reference)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertIn("Manual review", self.order.admin_notes)
        self.farm_deduct.assert_not_called()
        self.farm_register.assert_not_called()

    @mock.patch(VERIFY_TARGET)
    def test_verify_endpoint_maps_results(self, verify_mock):
        client = APIClient()

        self.assertEqual(client.get(VERIFY_URL).status_code, status.HTTP_400_BAD_REQUEST)
        res = client.get(VERIFY_URL, {"reference": "nope"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["status"], "failed")
        self.assertIn("Unknown payment reference", res.data["reason"])

        verify_mock.side_effect = PaystackError("Paystack timed out after 5s")
        res = client.get(VERIFY_URL, {"reference": self.txn.reference})
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)

        verify_mock.side_effect = None
        verify_mock.return_value = _gateway(amount=1)
        res = client.get(VERIFY_URL, {"reference": self.txn.reference})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["status"], "failed")


@override_settings(PAYMENTS=TEST_PAYSTACK)
class PaystackWebhookTests(FarmStubMixin, TestCase):
    def setUp(self):
        self.start_farm_stubs()
        self.client = APIClient()
        self.customer = make_customer()
        self.product = make_product(price="1000.00", stock=5)
        self.order = make_order(self.customer, [(self.product, 2)])
        self.txn = Transaction.objects.create(
            order=self.order,
            reference="txn_hook_0001",
            amount=Decimal("2000.00"),
        )

    def _post(self, payload, *, signature=None):
        raw = json.dumps(payload).encode("utf-8")
        return self.client.generic(
            "POST",
            WEBHOOK_URL,
            raw,
            content_type="application/json",
            HTTP_X_PAYSTACK_SIGNATURE=signature if signature is not None else _sign(raw),
        )

    def _charge_success(self):
        return {"event": "charge.success", "data": {"reference": self.txn.reference}}

    @mock.patch(VERIFY_TARGET)
    def test_invalid_signature_rejected_without_side_effects(self, verify_mock):
        res = self._post(self._charge_success(), signature="not-a-signature")

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        verify_mock.assert_not_called()
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.STATUS_PENDING)

    @mock.patch(VERIFY_TARGET)
    def test_duplicate_webhook_deducts_and_registers_once(self, verify_mock):
        verify_mock.return_value = _gateway()

        first = self._post(self._charge_success())
        second = self._post(self._charge_success())

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data, {"received": True})

        self.farm_deduct.assert_called_once()
        self.farm_register.assert_called_once()
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
        self.order.refresh_from_db()
        self.assertEqual(self.order.finance_record_id, "fin-001")

    @mock.patch(VERIFY_TARGET)
    def test_other_events_are_acknowledged_and_ignored(self, verify_mock):
        res = self._post({"event": "transfer.success", "data": {"reference": "x"}})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"received": True})
        verify_mock.assert_not_called()

    @mock.patch(VERIFY_TARGET)
    def test_internal_failure_still_acknowledged(self, verify_mock):
        verify_mock.side_effect = PaystackError("Paystack HTTPError: 500")

        res = self._post(self._charge_success())

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.status, Transaction.STATUS_PENDING)

    def test_unknown_reference_acknowledged(self):
        res = self._post({"event": "charge.success", "data": {"reference": "txn_unknown"}})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
