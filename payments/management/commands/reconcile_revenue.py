from __future__ import annotations

from django.core.management.base import BaseCommand

from payments.services import get_revenue_cents, reconcile_revenue
from payments.utils import cents_to_money


class Command(BaseCommand):
    help = "Compare the revenue ledger with order statuses and optionally post adjustment entries."

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Post one adjustment entry per drifting order.",
        )

    def handle(self, *args, **options):
        fix: bool = options["fix"]

        drifts = reconcile_revenue(fix=fix)
        if not drifts:
            self.stdout.write(self.style.SUCCESS("Revenue ledger matches order statuses."))
            self.stdout.write(f"Total revenue: ${cents_to_money(get_revenue_cents()):,.2f}")
            return

        for d in drifts:
            self.stdout.write(
                f"{d.order_number} [{d.status}]: expected={d.expected_cents} ledger={d.actual_cents} "
                f"delta={d.delta_cents:+d}"
            )

        if fix:
            self.stdout.write(self.style.SUCCESS(f"Posted {len(drifts)} adjustment(s)."))
            self.stdout.write(f"Total revenue: ${cents_to_money(get_revenue_cents()):,.2f}")
        else:
            self.stdout.write(
                self.style.WARNING(f"{len(drifts)} order(s) drifted. Re-run with --fix to post adjustments.")
            )
