# accounts/management/commands/seed_permissions.py
from django.core.management.base import BaseCommand

from accounts.permissions import seed_roles_and_permissions


class Command(BaseCommand):
    help = "Seed default roles and permissions to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            "--overwrite",
            action="store_true",
            help="Remove role permissions that are no longer in the defaults",
        )

    def handle(self, *args, **options):
        result = seed_roles_and_permissions(overwrite=options["overwrite"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Done! Roles created {result['roles_created']}, "
                f"permission links created {result['links_created']}."
            )
        )
