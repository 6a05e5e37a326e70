# orders/tests/test_admin_orders.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.utils import FarmStubMixin, make_customer, make_order, make_product
from payments.models import Transaction

ADMIN_ORDERS_URL = "/api/admin/store/orders/"
ADMIN_STATS_URL = "/api/admin/store/stats/"
ADMIN_TRANSACTIONS_URL = "/api/admin/store/transactions/"


def detail_url(order) -> str:
    return f"{ADMIN_ORDERS_URL}{order.pk}/"


class AdminOrderApiTests(FarmStubMixin, TestCase):
    def setUp(self):
        self.start_farm_stubs()

        self.staff = make_customer("staff@example.com", is_staff=True)
        self.buyer = make_customer()
        self.eggs = make_product("Fresh Eggs", price="1000.00", stock=10)

        self.client = APIClient()
        self.client.force_authenticate(user=self.staff)

    def test_customers_cannot_reach_admin_endpoints(self):
        client = APIClient()
        client.force_authenticate(user=self.buyer)

        for url in (ADMIN_ORDERS_URL, ADMIN_STATS_URL, ADMIN_TRANSACTIONS_URL):
            res = client.get(url)
            self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN, url)

    def test_list_filters_by_status_and_search(self):
        pending = make_order(self.buyer, [(self.eggs, 1)])
        make_order(self.buyer, [(self.eggs, 2)], status=Order.STATUS_CANCELLED)

        res = self.client.get(ADMIN_ORDERS_URL, {"status": "pending"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([r["id"] for r in res.data["results"]], [str(pending.pk)])

        res = self.client.get(ADMIN_ORDERS_URL, {"q": pending.order_number})
        self.assertEqual(res.data["count"], 1)

    def test_illegal_transition_is_conflict(self):
        order = make_order(self.buyer, [(self.eggs, 1)])

        res = self.client.patch(detail_url(order), {"status": "shipped"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["current_status"], "pending")
        self.assertEqual(res.data["requested_status"], "shipped")
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_marking_paid_runs_fulfilment_once(self):
        order = make_order(self.buyer, [(self.eggs, 3)])

        res = self.client.patch(
            detail_url(order), {"status": "paid", "note": "Bank transfer received"}, format="json"
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "paid")
        self.assertEqual(res.data["payment_status"], "paid")
        self.assertTrue(res.data["inventory_deducted"])
        self.assertEqual(res.data["finance_record_id"], "fin-001")

        self.eggs.refresh_from_db()
        self.buyer.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 7)
        self.assertEqual(self.eggs.sales_count, 3)
        self.assertEqual(self.buyer.order_count, 1)
        self.assertEqual(self.buyer.total_spent, Decimal("3000.00"))
        self.assertEqual(self.farm_deduct.call_count, 1)

        history = order.status_history.order_by("-changed_at", "-id").first()
        self.assertEqual(history.note, "Bank transfer received")
        self.assertEqual(history.changed_by, "staff@example.com")

    def test_staff_walks_order_to_delivered(self):
        order = make_order(self.buyer, [(self.eggs, 1)], status=Order.STATUS_PAID)

        for target in ("processing", "shipped", "delivered"):
            res = self.client.patch(detail_url(order), {"status": target}, format="json")
            self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_DELIVERED)
        self.assertIsNotNone(order.shipped_at)
        self.assertIsNotNone(order.delivered_at)

    def test_admin_notes_update(self):
        order = make_order(self.buyer, [(self.eggs, 1)])

        res = self.client.patch(detail_url(order), {"admin_notes": "Call before delivery"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["admin_notes"], "Call before delivery")
        self.assertEqual(res.data["status"], "pending")

    def test_detail_includes_transactions(self):
        order = make_order(self.buyer, [(self.eggs, 1)])
        Transaction.objects.create(order=order, reference="txn_admin_1", amount=order.total)

        res = self.client.get(detail_url(order))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([t["reference"] for t in res.data["transactions"]], ["txn_admin_1"])

    def test_transactions_list_filters_by_status(self):
        order = make_order(self.buyer, [(self.eggs, 1)])
        Transaction.objects.create(order=order, reference="txn_a", amount=order.total)
        Transaction.objects.create(
            order=order, reference="txn_b", amount=order.total, status=Transaction.STATUS_FAILED
        )

        res = self.client.get(ADMIN_TRANSACTIONS_URL, {"status": "failed"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([t["reference"] for t in res.data["results"]], ["txn_b"])

    def test_stats_count_paid_revenue_only(self):
        make_order(self.buyer, [(self.eggs, 2)], status=Order.STATUS_PAID, payment_status=Order.PAYMENT_PAID)
        make_order(self.buyer, [(self.eggs, 4)], status=Order.STATUS_PAID, payment_status=Order.PAYMENT_PAID)
        make_order(self.buyer, [(self.eggs, 9)])

        res = self.client.get(ADMIN_STATS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_orders"], 3)
        self.assertEqual(res.data["paid_orders"], 2)
        self.assertEqual(res.data["revenue"], "6000.00")
        self.assertEqual(res.data["average_order_value"], "3000.00")
        self.assertEqual(res.data["by_status"]["pending"], 1)

    def test_stats_rejects_bad_date(self):
        res = self.client.get(ADMIN_STATS_URL, {"date_from": "last-week"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)


class HealthCheckTests(TestCase):
    def test_health_reports_db_ok(self):
        res = APIClient().get("/api/health/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})
