from django.conf import settings
from django.core.management.base import BaseCommand

from cart.services.cart_service import purge_stale_carts


class Command(BaseCommand):
    help = "Delete carts that have been idle longer than CART_IDLE_DAYS"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Override CART_IDLE_DAYS for this run",
        )

    def handle(self, *args, **options):
        days = options["days"] or int(getattr(settings, "CART_IDLE_DAYS", 30))
        deleted = purge_stale_carts(idle_days=days)
        self.stdout.write(
            self.style.SUCCESS(f"Deleted {deleted} cart(s) idle for more than {days} day(s).")
        )
