# accounts/permissions.py
from __future__ import annotations

from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.models import Permission, Role, RolePermission, UserPermission
from accounts.permission_defaults import ROLE_PERMISSIONS, all_permission_codes

User = get_user_model()


def _ensure_permissions(codes: Iterable[str]) -> list[Permission]:
    """Make sure Permission rows exist for codes; returns them."""
    codes = set(codes)
    existing = set(Permission.objects.filter(code__in=codes).values_list("code", flat=True))
    missing = [c for c in codes if c not in existing]
    if missing:
        Permission.objects.bulk_create(
            [Permission(code=c, module=c.split(".")[0]) for c in missing],
            ignore_conflicts=True,
        )
    return list(Permission.objects.filter(code__in=codes))


@transaction.atomic
def sync_role_permissions(role: Role, overwrite: bool = False) -> int:
    """
    Attach the default permission codes for role.name.

    - Idempotent: only missing links are created.
    - overwrite=True drops links that are no longer in the defaults.
    Returns number of links newly created.
    """
    default_codes = ROLE_PERMISSIONS.get(role.name, set())
    perms = _ensure_permissions(default_codes)

    if overwrite:
        RolePermission.objects.filter(role=role).exclude(permission__code__in=default_codes).delete()

    already = set(
        RolePermission.objects.filter(role=role, permission__in=perms).values_list(
            "permission__code", flat=True
        )
    )
    to_link = [p for p in perms if p.code not in already]
    if not to_link:
        return 0

    RolePermission.objects.bulk_create(
        [RolePermission(role=role, permission=p) for p in to_link],
        ignore_conflicts=True,
    )
    return len(to_link)


@transaction.atomic
def seed_roles_and_permissions(overwrite: bool = False) -> dict[str, int]:
    """Create every permission code and the four roles with their defaults."""
    _ensure_permissions(all_permission_codes())

    roles_created = 0
    links_created = 0
    for name in Role.NAMES:
        role, created = Role.objects.get_or_create(name=name)
        roles_created += int(created)
        links_created += sync_role_permissions(role, overwrite=overwrite)

    return {"roles_created": roles_created, "links_created": links_created}


def get_role(name: str) -> Role:
    """
    Fetch a role, seeding it from defaults on first use.

    Fresh databases (tests, new deployments before seed_permissions) get the
    role created on demand.
    """
    if name not in Role.NAMES:
        raise ValueError(f"Unknown role: {name}")
    role, created = Role.objects.get_or_create(name=name)
    if created:
        sync_role_permissions(role)
    return role


@transaction.atomic
def grant_user_permission(user, code: str, granted_by: Optional[User] = None) -> bool:
    """Grant a single permission directly to a user. Returns True if newly granted."""
    permission = _ensure_permissions([code])[0]
    _, created = UserPermission.objects.get_or_create(
        user=user,
        permission=permission,
        defaults={
            "granted_by": granted_by if (granted_by and granted_by.is_authenticated) else None,
        },
    )
    return created


def effective_permission_codes(user) -> frozenset[str]:
    """Union of role permissions and direct grants, read fresh from the database."""
    from_roles = Permission.objects.filter(roles__user_roles__user=user).values_list("code", flat=True)
    direct = UserPermission.objects.filter(user=user).values_list("permission__code", flat=True)
    return frozenset(from_roles) | frozenset(direct)
