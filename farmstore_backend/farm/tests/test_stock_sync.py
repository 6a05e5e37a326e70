# farm/tests/test_stock_sync.py

from __future__ import annotations

from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from farm.client import FarmAPIError
from farm.services.stock_sync import sync_stock_from_farm
from orders.tests.utils import make_customer, make_product
from products.models import Product

FETCH_TARGET = "farm.client.fetch_public_products"


class StockSyncTests(TestCase):
    def setUp(self):
        self.eggs = make_product("Fresh Eggs", stock=5, source_ref="inv-eggs")
        self.honey = make_product("Raw Honey", stock=2, source_ref="inv-honey")
        self.bag = make_product(
            "Farm Tote Bag", stock=7, source_kind=Product.SourceKind.CATALOG
        )

    @mock.patch(FETCH_TARGET)
    def test_overwrites_only_drifted_inventory_products(self, fetch_mock):
        fetch_mock.return_value = {
            "products": [
                {"_id": "inv-eggs", "quantity": 12},
                {"id": "inv-honey", "stockQuantity": 2},
                {"id": "inv-unlinked", "quantity": 99},
            ]
        }

        result = sync_stock_from_farm()

        self.assertEqual(result.total_checked, 2)
        self.assertEqual(result.updated_count, 1)
        self.eggs.refresh_from_db()
        self.bag.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 12)
        self.assertEqual(self.bag.stock_quantity, 7)

    @mock.patch(FETCH_TARGET)
    def test_admin_endpoint(self, fetch_mock):
        fetch_mock.return_value = [{"id": "inv-honey", "quantity": 0}]
        client = APIClient()

        client.force_authenticate(user=make_customer())
        res = client.post("/api/admin/store/sync-inventory/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        client.force_authenticate(user=make_customer("staff@example.com", is_staff=True))
        res = client.post("/api/admin/store/sync-inventory/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["updated_count"], 1)

        fetch_mock.side_effect = FarmAPIError("Farm API unreachable")
        res = client.post("/api/admin/store/sync-inventory/")
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)

    @mock.patch(FETCH_TARGET)
    def test_management_command(self, fetch_mock):
        fetch_mock.return_value = {"items": [{"id": "inv-eggs", "quantity": "3"}]}
        out = StringIO()

        call_command("sync_inventory", stdout=out)

        self.assertIn("updated 1 product(s)", out.getvalue())

        fetch_mock.side_effect = FarmAPIError("Farm API unreachable")
        with self.assertRaises(CommandError):
            call_command("sync_inventory", stdout=StringIO())
