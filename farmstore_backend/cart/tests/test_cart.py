# cart/tests/test_cart.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from cart.models import Cart
from cart.services.cart_service import (
    InsufficientStockError,
    ProductUnavailableError,
    add_item,
    refresh_cart,
    update_item_quantity,
)
from orders.tests.utils import make_customer, make_product
from products.models import Product

CART_URL = "/api/store/cart/"


class CartServiceTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.eggs = make_product("Fresh Eggs", price="1000.00", stock=5)

    def test_add_merges_existing_line(self):
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)
        item = add_item(customer=self.customer, product_id=self.eggs.pk, quantity=1)

        self.assertEqual(item.quantity, 3)
        cart = Cart.objects.get(customer=self.customer)
        self.assertEqual(cart.items.count(), 1)
        self.assertEqual(cart.item_count, 3)
        self.assertEqual(cart.subtotal, Decimal("3000.00"))

    def test_add_beyond_stock_rejected(self):
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=4)

        with self.assertRaises(InsufficientStockError) as ctx:
            add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)

        self.assertEqual(ctx.exception.available, 5)

    def test_untracked_product_has_no_stock_limit(self):
        service = make_product(
            "Farm Tour",
            stock=0,
            track_inventory=False,
            source_kind=Product.SourceKind.SERVICE,
            source_ref="svc-tour",
        )

        item = add_item(customer=self.customer, product_id=service.pk, quantity=50)

        self.assertEqual(item.quantity, 50)

    def test_inactive_product_cannot_be_added(self):
        Product.objects.filter(pk=self.eggs.pk).update(is_active=False)

        with self.assertRaises(ProductUnavailableError):
            add_item(customer=self.customer, product_id=self.eggs.pk)

    def test_update_to_zero_removes_line(self):
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)

        result = update_item_quantity(customer=self.customer, product_id=self.eggs.pk, quantity=0)

        self.assertIsNone(result)
        self.assertFalse(Cart.objects.get(customer=self.customer).items.exists())

    def test_refresh_reprices_clamps_and_drops(self):
        honey = make_product("Raw Honey", price="2500.00", stock=3)
        gone = make_product("Old Stock", price="100.00", stock=3)
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)
        add_item(customer=self.customer, product_id=honey.pk, quantity=3)
        add_item(customer=self.customer, product_id=gone.pk, quantity=1)

        Product.objects.filter(pk=self.eggs.pk).update(price=Decimal("1100.00"))
        Product.objects.filter(pk=honey.pk).update(stock_quantity=1)
        Product.objects.filter(pk=gone.pk).update(is_active=False)

        result = refresh_cart(self.customer)

        lines = {i.product_id: i for i in result.cart.items.all()}
        self.assertEqual(set(lines), {self.eggs.pk, honey.pk})
        self.assertEqual(lines[self.eggs.pk].unit_price, Decimal("1100.00"))
        self.assertEqual(lines[honey.pk].quantity, 1)
        self.assertEqual(len(result.changes), 3)

    def test_refresh_drops_out_of_stock_lines(self):
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)
        Product.objects.filter(pk=self.eggs.pk).update(stock_quantity=0)

        result = refresh_cart(self.customer)

        self.assertFalse(result.cart.items.exists())


class CartApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = make_customer()
        self.client.force_authenticate(user=self.customer)
        self.eggs = make_product("Fresh Eggs", price="1000.00", stock=5)

    def test_requires_authentication(self):
        res = APIClient().get(CART_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_add_update_remove_clear(self):
        res = self.client.post(CART_URL, {"product_id": str(self.eggs.pk), "quantity": 2}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["item_count"], 2)
        self.assertEqual(res.data["subtotal"], "2000.00")

        res = self.client.put(CART_URL, {"product_id": str(self.eggs.pk), "quantity": 4}, format="json")
        self.assertEqual(res.data["item_count"], 4)

        res = self.client.put(CART_URL, {"product_id": str(self.eggs.pk), "quantity": 9}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["available"], 5)

        res = self.client.delete(CART_URL, {"product_id": str(self.eggs.pk)}, format="json")
        self.assertEqual(res.data["item_count"], 0)

        self.client.post(CART_URL, {"product_id": str(self.eggs.pk), "quantity": 1}, format="json")
        res = self.client.delete(CART_URL, {"clear": True}, format="json")
        self.assertEqual(res.data["items"], [])

    def test_get_reports_refresh_changes(self):
        add_item(customer=self.customer, product_id=self.eggs.pk, quantity=2)
        Product.objects.filter(pk=self.eggs.pk).update(price=Decimal("900.00"))

        res = self.client.get(CART_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["subtotal"], "1800.00")
        self.assertEqual(len(res.data["changes"]), 1)

    def test_unknown_product_is_404(self):
        res = self.client.post(
            CART_URL,
            {"product_id": "6f1c3c8e-6d0b-4f0e-9a55-1f1f1f1f1f1f", "quantity": 1},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class PurgeStaleCartsCommandTests(TestCase):
    def test_deletes_only_idle_carts(self):
        fresh = Cart.objects.create(customer=make_customer("fresh@example.com"))
        stale = Cart.objects.create(customer=make_customer("stale@example.com"))
        Cart.objects.filter(pk=stale.pk).update(last_activity=timezone.now() - timedelta(days=45))

        out = StringIO()
        call_command("purge_stale_carts", "--days", "30", stdout=out)

        self.assertTrue(Cart.objects.filter(pk=fresh.pk).exists())
        self.assertFalse(Cart.objects.filter(pk=stale.pk).exists())
        self.assertIn("Deleted 1 cart(s)", out.getvalue())
