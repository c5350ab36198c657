"""
Create an institution (tenant).

Usage:
    python manage.py create_tenant "University of Lagos" --slug unilag --domain careers.unilag.edu.ng

    # Dedicated database (DATABASE_URL_TENANT_UNILAG must be set)
    python manage.py create_tenant "University of Lagos" --slug unilag --dedicated --db-alias tenant_unilag
"""
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError

from tenant.commands import create_tenant
from tenant.models import Tenant


class Command(BaseCommand):
    help = "Create an institution (tenant) with optional domain and dedicated database"

    def add_arguments(self, parser):
        parser.add_argument("name", type=str, help="Institution name")
        parser.add_argument("--slug", type=str, default="", help="Tenant slug (default: from name)")
        parser.add_argument("--domain", type=str, default="", help="Primary domain")
        parser.add_argument("--email", type=str, default="", help="Contact email")
        parser.add_argument(
            "--dedicated",
            action="store_true",
            help="Place tenant data in a dedicated database",
        )
        parser.add_argument(
            "--db-alias",
            type=str,
            default="default",
            help="Database alias for dedicated tenants (e.g., tenant_unilag)",
        )
        parser.add_argument(
            "--skip-migrate",
            action="store_true",
            help="Do not run migrations on the dedicated database",
        )

    def handle(self, *args, **options):
        mode = Tenant.IsolationMode.DEDICATED_DB if options["dedicated"] else Tenant.IsolationMode.SHARED

        result = create_tenant(
            None,
            name=options["name"],
            slug=options["slug"],
            mode=mode,
            db_alias=options["db_alias"],
            domain=options["domain"],
            contact_email=options["email"],
        )
        if not result.success:
            raise CommandError(result.error)

        tenant = result.data["tenant"]
        self.stdout.write(self.style.SUCCESS(f"Created tenant {tenant.slug} (id={tenant.id})"))

        if tenant.is_dedicated and not options["skip_migrate"]:
            self.stdout.write(f"Running migrations on {tenant.db_alias}...")
            call_command("migrate", database=tenant.db_alias, interactive=False, verbosity=0)
            self.stdout.write(self.style.SUCCESS(f"Migrated {tenant.db_alias}"))
