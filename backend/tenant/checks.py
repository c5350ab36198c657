"""Consistency checks between the tenant directory and configured databases."""
from django.conf import settings

from tenant.models import Tenant


def find_routing_errors() -> list[str]:
    """Return a list of human-readable routing problems (empty when healthy)."""
    available = set(settings.DATABASES.keys())
    errors = []

    for tenant in Tenant.objects.active():
        if tenant.is_dedicated and tenant.db_alias not in available:
            errors.append(
                f"Invalid db_alias: {tenant.slug} has mode=DEDICATED_DB "
                f"but db_alias='{tenant.db_alias}' not in DATABASES "
                f"(available: {sorted(available)})"
            )
        elif tenant.is_shared and tenant.db_alias != "default":
            errors.append(
                f"Invalid db_alias: {tenant.slug} has mode=SHARED "
                f"but db_alias='{tenant.db_alias}' (should be 'default')"
            )

    return errors
