"""
Command layer for tenant administration.

Creating a tenant also provisions its default component theme so every
institution renders with a complete theme from day one.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils.text import slugify

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from tenant.models import Domain, Tenant

logger = logging.getLogger(__name__)


def _validate_routing(mode: str, db_alias: str) -> str | None:
    if mode == Tenant.IsolationMode.DEDICATED_DB:
        if db_alias == "default":
            return "Dedicated tenants need their own db_alias."
        if db_alias not in settings.DATABASES:
            return f"Database alias '{db_alias}' is not configured."
    elif db_alias != "default":
        return "Shared tenants must use the default database."
    return None


@transaction.atomic
def create_tenant(
    actor: ActorContext | None,
    name: str,
    slug: str = "",
    mode: str = Tenant.IsolationMode.SHARED,
    db_alias: str = "default",
    domain: str = "",
    contact_email: str = "",
) -> CommandResult:
    """
    Create an institution.

    actor=None is allowed for management commands.
    """
    if actor is not None:
        require(actor, "tenants.manage")

    slug = slugify(slug or name)
    if not slug:
        return CommandResult.fail("A tenant needs a name or slug.")
    if Tenant.objects.filter(slug=slug).exists():
        return CommandResult.fail(f"Tenant '{slug}' already exists.")

    error = _validate_routing(mode, db_alias)
    if error:
        return CommandResult.fail(error)

    if domain and Domain.objects.filter(domain=domain.lower().strip()).exists():
        return CommandResult.fail(f"Domain '{domain}' is already in use.")

    tenant = Tenant.objects.create(
        name=name,
        slug=slug,
        mode=mode,
        db_alias=db_alias,
        contact_email=contact_email,
    )
    if domain:
        Domain.objects.create(tenant=tenant, domain=domain, is_primary=True)

    from themes.services import create_default_theme

    create_default_theme(tenant)

    logger.info(f"Tenant {tenant.slug} created ({tenant.mode} -> {tenant.db_alias})")
    return CommandResult.ok(data={"tenant": tenant})


def update_tenant(actor: ActorContext, tenant: Tenant, **changes) -> CommandResult:
    require(actor, "tenants.manage")

    mode = changes.get("mode", tenant.mode)
    db_alias = changes.get("db_alias", tenant.db_alias)
    error = _validate_routing(mode, db_alias)
    if error:
        return CommandResult.fail(error)

    allowed = {"name", "mode", "db_alias", "status", "contact_email", "data"}
    fields = []
    for key, value in changes.items():
        if key in allowed:
            setattr(tenant, key, value)
            fields.append(key)

    if fields:
        tenant.save(update_fields=fields + ["updated_at"])
        logger.info(f"Tenant {tenant.slug} updated: {', '.join(sorted(fields))}")
    return CommandResult.ok(data={"tenant": tenant})


def add_domain(actor: ActorContext, tenant: Tenant, domain: str, is_primary: bool = False) -> CommandResult:
    require(actor, "tenants.manage")

    domain = domain.lower().strip()
    if Domain.objects.filter(domain=domain).exists():
        return CommandResult.fail(f"Domain '{domain}' is already in use.")

    with transaction.atomic():
        if is_primary:
            tenant.domains.update(is_primary=False)
        entry = Domain.objects.create(tenant=tenant, domain=domain, is_primary=is_primary)

    logger.info(f"Domain {domain} added to tenant {tenant.slug}")
    return CommandResult.ok(data={"domain": entry})
