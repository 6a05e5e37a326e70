# customers/tests/test_addresses.py

from django.test import TestCase, override_settings

from customers.models import CustomerAddress
from customers.services.addresses import normalize_address, save_checkout_address
from orders.tests.utils import make_customer


@override_settings(STORE_DEFAULT_COUNTRY="Nigeria")
class CheckoutAddressTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.address = {"street": " 1 Farm Road ", "city": "Ibadan", "state": "Oyo"}

    def test_normalize_fills_default_country(self):
        normalized = normalize_address(self.address)
        self.assertEqual(normalized["street"], "1 Farm Road")
        self.assertEqual(normalized["country"], "Nigeria")

    def test_first_address_becomes_default(self):
        saved = save_checkout_address(customer=self.customer, address=self.address)

        self.assertTrue(saved.is_default)
        self.assertEqual(saved.label, "Checkout Address")

    def test_known_address_not_duplicated(self):
        save_checkout_address(customer=self.customer, address=self.address)
        again = save_checkout_address(customer=self.customer, address=self.address)

        self.assertIsNone(again)
        self.assertEqual(CustomerAddress.objects.filter(customer=self.customer).count(), 1)

    def test_incomplete_address_skipped(self):
        self.assertIsNone(save_checkout_address(customer=self.customer, address={"street": "x"}))
        self.assertFalse(CustomerAddress.objects.exists())
