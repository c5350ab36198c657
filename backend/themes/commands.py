"""
Command layer for component themes.

A tenant has at most one default theme; promoting a theme demotes the
previous default in the same transaction.
"""
import logging

from django.db import transaction
from django.utils.text import slugify

from accounts.authz import ActorContext, require, require_tenant
from accounts.commands import CommandResult
from themes.models import ComponentTheme

logger = logging.getLogger(__name__)


def _make_default(theme: ComponentTheme) -> None:
    ComponentTheme.objects.filter(tenant_id=theme.tenant_id, is_default=True).exclude(pk=theme.pk).update(
        is_default=False
    )


def create_theme(actor: ActorContext, name: str, config: dict, slug: str = "", is_default: bool = False) -> CommandResult:
    require(actor, "themes.manage")
    tenant = require_tenant(actor)

    slug = slug or slugify(name)
    if not slug:
        return CommandResult.fail("A theme needs a name or slug.")
    if ComponentTheme.objects.filter(tenant=tenant, slug=slug).exists():
        return CommandResult.fail(f"A theme with slug '{slug}' already exists.")

    # The first theme of a tenant becomes its default
    if not ComponentTheme.objects.filter(tenant=tenant, is_default=True).exists():
        is_default = True

    with transaction.atomic():
        theme = ComponentTheme.objects.create(
            tenant=tenant,
            name=name,
            slug=slug,
            config=config,
            is_default=is_default,
        )
        if is_default:
            _make_default(theme)

    logger.info(f"Theme {theme.slug} created in tenant {tenant.slug}")
    return CommandResult.ok(data={"theme": theme})


def update_theme(actor: ActorContext, theme: ComponentTheme, **changes) -> CommandResult:
    require(actor, "themes.manage")
    require_tenant(actor)

    slug = changes.get("slug")
    if slug and ComponentTheme.objects.filter(tenant_id=theme.tenant_id, slug=slug).exclude(pk=theme.pk).exists():
        return CommandResult.fail(f"A theme with slug '{slug}' already exists.")
    if theme.is_default and changes.get("is_default") is False:
        return CommandResult.fail("Promote another theme to default instead of demoting the default.")

    with transaction.atomic():
        for key, value in changes.items():
            setattr(theme, key, value)
        theme.save()
        if theme.is_default:
            _make_default(theme)

    return CommandResult.ok(data={"theme": theme})


def set_default_theme(actor: ActorContext, theme: ComponentTheme) -> CommandResult:
    return update_theme(actor, theme, is_default=True)


def delete_theme(actor: ActorContext, theme: ComponentTheme) -> CommandResult:
    require(actor, "themes.manage")
    require_tenant(actor)

    if theme.is_default:
        return CommandResult.fail("The default theme cannot be deleted.")

    slug = theme.slug
    theme.delete()
    logger.info(f"Theme {slug} deleted by {actor.user.email}")
    return CommandResult.ok()
