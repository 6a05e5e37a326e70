from django.core.management.base import BaseCommand, CommandError

from farm.client import FarmAPIError
from farm.services.stock_sync import sync_stock_from_farm


class Command(BaseCommand):
    help = "Resync the local stock cache of inventory-linked products from the farm manager"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Syncing stock from farm manager..."))

        try:
            result = sync_stock_from_farm()
        except FarmAPIError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {result.total_checked} linked item(s), "
                f"updated {result.updated_count} product(s)."
            )
        )
