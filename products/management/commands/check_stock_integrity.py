from __future__ import annotations

from django.core.management.base import BaseCommand

from products.inventory import check_stock_integrity


class Command(BaseCommand):
    help = "Report products whose aggregate stock differs from the sum of their variant stocks."

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Rewrite the aggregate stock from the variant stocks.",
        )

    def handle(self, *args, **options):
        fix: bool = options["fix"]

        drifts = check_stock_integrity(fix=fix)
        if not drifts:
            self.stdout.write(self.style.SUCCESS("All product stock aggregates match their variants."))
            return

        for d in drifts:
            self.stdout.write(f"Product {d.product_id} ({d.name}): stored={d.stored} variants={d.expected}")

        if fix:
            self.stdout.write(self.style.SUCCESS(f"Fixed {len(drifts)} product(s)."))
        else:
            self.stdout.write(
                self.style.WARNING(f"{len(drifts)} product(s) out of sync. Re-run with --fix to repair.")
            )
