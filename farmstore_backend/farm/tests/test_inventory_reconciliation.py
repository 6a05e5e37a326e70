# farm/tests/test_inventory_reconciliation.py

from __future__ import annotations

from django.test import TestCase

from farm.client import FarmAPIError
from farm.services.finance import register_sale_for_order
from farm.services.inventory_reconciliation import (
    deduct_inventory_for_order,
    restore_inventory_for_order,
)
from orders.tests.utils import FarmStubMixin, make_customer, make_order, make_product
from products.models import Product


class InventoryReconciliationTests(FarmStubMixin, TestCase):
    """
    GUARANTEES:
    - at most one deduction per order
    - only inventory-linked lines are sent to the farm manager
    - local cache never goes below zero
    """

    def setUp(self):
        self.start_farm_stubs()
        self.customer = make_customer()
        self.eggs = make_product("Fresh Eggs", price="1000.00", stock=5)
        self.catalog = make_product(
            "Farm Tote Bag",
            price="500.00",
            stock=10,
            source_kind=Product.SourceKind.CATALOG,
        )
        self.order = make_order(self.customer, [(self.eggs, 2), (self.catalog, 1)])

    def test_deduct_twice_applies_once(self):
        first = deduct_inventory_for_order(self.order.pk)
        second = deduct_inventory_for_order(self.order.pk)

        self.assertTrue(first.applied)
        self.assertFalse(second.applied)
        self.farm_deduct.assert_called_once()

        sent = self.farm_deduct.call_args[0][0]
        self.assertEqual(
            sent,
            [{"inventoryItemId": self.eggs.source_ref, "quantity": 2, "productName": "Fresh Eggs"}],
        )

        self.eggs.refresh_from_db()
        self.catalog.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 3)
        self.assertEqual(self.catalog.stock_quantity, 9)

        self.order.refresh_from_db()
        self.assertTrue(self.order.inventory_deducted)

    def test_remote_errors_leave_flag_false_but_cache_decremented(self):
        self.farm_deduct.return_value = {
            "errors": [{"product": "Fresh Eggs", "reason": "Insufficient stock"}]
        }

        result = deduct_inventory_for_order(self.order.pk)

        self.assertFalse(result.applied)
        self.assertEqual(result.errors, ["Fresh Eggs: Insufficient stock"])
        self.order.refresh_from_db()
        self.assertFalse(self.order.inventory_deducted)
        self.eggs.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 3)

    def test_remote_timeout_is_recorded_as_error(self):
        self.farm_deduct.side_effect = FarmAPIError("Farm API timed out after 15s")

        result = deduct_inventory_for_order(self.order.pk)

        self.assertFalse(result.ok)
        self.assertIn("timed out", result.errors[0])

    def test_cache_is_floored_at_zero(self):
        Product.objects.filter(pk=self.eggs.pk).update(stock_quantity=1)

        deduct_inventory_for_order(self.order.pk)

        self.eggs.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 0)

    def test_restore_is_no_op_when_nothing_deducted(self):
        result = restore_inventory_for_order(self.order.pk)

        self.assertFalse(result.applied)
        self.farm_restore.assert_not_called()

    def test_restore_reverses_deduction_once(self):
        deduct_inventory_for_order(self.order.pk)

        first = restore_inventory_for_order(self.order.pk)
        second = restore_inventory_for_order(self.order.pk)

        self.assertTrue(first.applied)
        self.assertFalse(second.applied)
        self.farm_restore.assert_called_once()
        self.eggs.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 5)


class FinanceRegistrationTests(FarmStubMixin, TestCase):
    def setUp(self):
        self.start_farm_stubs()
        self.customer = make_customer()
        self.eggs = make_product("Fresh Eggs", price="1000.00", stock=5)
        self.order = make_order(self.customer, [(self.eggs, 3)])

    def test_registers_once(self):
        self.assertEqual(register_sale_for_order(self.order.pk), "fin-001")
        self.assertEqual(register_sale_for_order(self.order.pk), "fin-001")

        self.farm_register.assert_called_once()
        payload = self.farm_register.call_args[0][0]
        self.assertEqual(payload["orderNumber"], self.order.order_number)
        self.assertEqual(payload["itemCount"], 3)
        self.assertEqual(payload["costOfGoods"], "1500.00")
        self.assertEqual(payload["customerEmail"], self.customer.email)

    def test_missing_record_id_raises(self):
        self.farm_register.return_value = {}

        with self.assertRaises(FarmAPIError):
            register_sale_for_order(self.order.pk)

        self.order.refresh_from_db()
        self.assertIsNone(self.order.finance_record_id)
