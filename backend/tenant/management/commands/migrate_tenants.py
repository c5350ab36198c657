"""
Run migrations on every tenant database.

Tenant apps (graduates, analytics) migrate on all databases; system apps
only on "default" (see tenant.router.TenantDatabaseRouter.allow_migrate).

Usage:
    python manage.py migrate_tenants
    python manage.py migrate_tenants --database tenant_unilag
"""
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError

from tenant.router import get_tenant_databases


class Command(BaseCommand):
    help = "Apply migrations to all dedicated tenant databases"

    def add_arguments(self, parser):
        parser.add_argument(
            "--database",
            type=str,
            help="Migrate a single tenant database alias",
        )
        parser.add_argument(
            "--include-default",
            action="store_true",
            help="Also migrate the default (system) database first",
        )

    def handle(self, *args, **options):
        aliases = get_tenant_databases()

        if options["database"]:
            if options["database"] not in aliases:
                raise CommandError(
                    f"Unknown tenant database '{options['database']}'. Available: {aliases}"
                )
            aliases = [options["database"]]

        if options["include_default"]:
            aliases = ["default"] + aliases

        if not aliases:
            self.stdout.write(self.style.WARNING("No tenant databases configured."))
            return

        for alias in aliases:
            self.stdout.write(f"Migrating {alias}...")
            call_command("migrate", database=alias, interactive=False, verbosity=options["verbosity"])
            self.stdout.write(self.style.SUCCESS(f"  {alias} up to date"))
