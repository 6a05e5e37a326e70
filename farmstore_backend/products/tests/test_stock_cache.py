# products/tests/test_stock_cache.py

from django.test import TestCase

from orders.tests.utils import make_product
from products.models import Product
from products.services.stock_cache import (
    _to_int_qty,
    available_quantity,
    decrement_stock,
    increment_stock,
    set_stock_for_inventory_item,
)


class StockCacheTests(TestCase):
    def setUp(self):
        self.eggs = make_product("Fresh Eggs", stock=5, source_ref="inv-eggs")

    def test_decrement_floors_at_zero(self):
        decrement_stock(product_id=self.eggs.pk, quantity=8)
        self.eggs.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 0)

    def test_increment_adds_back(self):
        increment_stock(product_id=self.eggs.pk, quantity=3)
        self.eggs.refresh_from_db()
        self.assertEqual(self.eggs.stock_quantity, 8)

    def test_untracked_products_are_left_alone(self):
        tour = make_product(
            "Farm Tour",
            stock=0,
            track_inventory=False,
            source_kind=Product.SourceKind.SERVICE,
            source_ref="svc-tour",
        )

        self.assertEqual(decrement_stock(product_id=tour.pk, quantity=1), 0)
        self.assertIsNone(available_quantity(tour))

    def test_resync_overwrites_every_linked_product(self):
        twin = make_product("Eggs (half crate)", stock=1, source_ref="inv-eggs")

        updated = set_stock_for_inventory_item(inventory_item_ref="inv-eggs", quantity=12)

        self.assertEqual(updated, 2)
        self.assertEqual(
            set(Product.objects.filter(source_ref="inv-eggs").values_list("stock_quantity", flat=True)),
            {12},
        )
        twin.refresh_from_db()
        self.assertEqual(twin.stock_quantity, 12)

    def test_quantities_must_be_whole_units(self):
        self.assertEqual(_to_int_qty("4"), 4)
        for bad in ("2.5", True, 1.5, "abc"):
            with self.assertRaises(ValueError):
                _to_int_qty(bad)
