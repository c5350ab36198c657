"""
Generate career outcome snapshots for the previous period.

Usage:
    python manage.py generate_snapshots
    python manage.py generate_snapshots --period quarterly
    python manage.py generate_snapshots --tenant unilag
"""
from django.core.management.base import BaseCommand, CommandError

from analytics.models import CareerOutcomeSnapshot
from analytics.services import (
    CareerOutcomeAnalyticsService,
    generate_snapshots_for_all_tenants,
    previous_period,
)
from tenant.models import Tenant


class Command(BaseCommand):
    help = "Generate the previous period's career outcome snapshot per tenant"

    def add_arguments(self, parser):
        parser.add_argument(
            "--period",
            choices=CareerOutcomeSnapshot.PeriodType.values,
            default=CareerOutcomeSnapshot.PeriodType.MONTHLY,
        )
        parser.add_argument(
            "--tenant",
            type=str,
            help="Only this tenant (slug)",
        )

    def handle(self, *args, **options):
        period_type = options["period"]

        if not options["tenant"]:
            result = generate_snapshots_for_all_tenants(period_type)
            for slug, outcome in result["tenants"].items():
                self._report(slug, outcome)
            return

        tenant = Tenant.objects.filter(slug=options["tenant"]).first()
        if tenant is None:
            raise CommandError(f"Tenant '{options['tenant']}' not found")

        period_start, period_end = previous_period(period_type)
        with tenant.run():
            snapshot = CareerOutcomeAnalyticsService().generate_snapshot(period_type, period_start, period_end)
        self._report(
            tenant.slug,
            {"status": "created", "snapshot_id": snapshot["id"]} if snapshot else {"status": "no_data"},
        )

    def _report(self, slug, outcome):
        if outcome["status"] == "created":
            self.stdout.write(self.style.SUCCESS(f"  {slug}: snapshot {outcome['snapshot_id']}"))
        elif outcome["status"] == "no_data":
            self.stdout.write(self.style.WARNING(f"  {slug}: no graduates"))
        else:
            self.stdout.write(self.style.ERROR(f"  {slug}: {outcome['error']}"))
