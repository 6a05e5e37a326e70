from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product


class Command(BaseCommand):
    help = "Seed a handful of storefront products (one per source kind)"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding storefront products..."))

        # (name, source_kind, source_ref, price, cost, unit, stock, track_inventory)
        products_data = [
            ("Fresh Eggs (crate)", Product.SourceKind.INVENTORY, "inv-eggs-crate", 4500, 3200, "Crate", 40, True),
            ("Raw Honey 1L", Product.SourceKind.INVENTORY, "inv-honey-1l", 6000, 4100, "Bottle", 15, True),
            ("Catfish (smoked)", Product.SourceKind.CATALOG, "", 3500, 2000, "Kg", 25, True),
            ("Farm Tour", Product.SourceKind.SERVICE, "svc-farm-tour", 10000, 0, "Booking", 0, False),
            ("Broiler (live)", Product.SourceKind.LIVESTOCK, "lvs-broiler", 8500, 6000, "Bird", 12, True),
        ]

        created_count = 0
        for name, kind, ref, price, cost, unit, stock, tracked in products_data:
            _, created = Product.objects.get_or_create(
                name=name,
                source_kind=kind,
                defaults={
                    "source_ref": ref,
                    "price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "unit": unit,
                    "stock_quantity": stock,
                    "track_inventory": tracked,
                },
            )
            created_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded ({created_count} new).")
        )
