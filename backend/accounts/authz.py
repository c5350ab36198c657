# accounts/authz.py
"""
Authorization utilities for Gradlink.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require / require_any / require_role: raise if not granted
- require_tenant: raise if the request has no institution context
- HasRole: DRF permission class for role-gated views

Permissions are checked:
1. super-admin: implicit allow
2. everyone else: role permissions + direct grants, loaded fresh per request
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission

from accounts.models import Role
from accounts.permissions import effective_permission_codes
from tenant.context import get_current_tenant_id
from tenant.models import Tenant


class TenantRequired(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This endpoint requires an institution context (X-Tenant-ID header or tenant domain)."
    default_code = "tenant_required"


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + tenant).

    Attributes:
        user: The authenticated user
        tenant: The tenant resolved for this request (None on central routes)
        roles: Role names held by the user
        perms: Effective permission codes (roles + direct grants)
    """
    user: object  # User model
    tenant: Optional[Tenant]
    roles: FrozenSet[str]
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if self.is_super_admin:
            return True
        return code in self.perms

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_super_admin(self) -> bool:
        return Role.SUPER_ADMIN in self.roles

    @property
    def primary_role(self) -> Optional[str]:
        """Highest-privilege role, used to pick the dashboard."""
        for role in (Role.SUPER_ADMIN, Role.INSTITUTION_ADMIN, Role.EMPLOYER, Role.GRADUATE):
            if role in self.roles:
                return role
        return None

    @property
    def tenant_id(self) -> Optional[int]:
        return self.tenant.id if self.tenant else None


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Roles and permissions are loaded FRESH from the database so that
    changes take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If the user is suspended or belongs to another institution
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    if getattr(user, "is_suspended", False):
        raise PermissionDenied("Your account has been suspended.")

    roles = frozenset(user.user_roles.values_list("role__name", flat=True))

    tenant = _current_tenant(request)
    if (
        tenant is not None
        and Role.SUPER_ADMIN not in roles
        and user.institution_id is not None
        and user.institution_id != tenant.id
    ):
        raise PermissionDenied("Your account does not belong to this institution.")

    return ActorContext(
        user=user,
        tenant=tenant,
        roles=roles,
        perms=effective_permission_codes(user),
    )


def _current_tenant(request) -> Optional[Tenant]:
    tenant = getattr(request, "tenant", None)
    if tenant is None:
        tenant_id = get_current_tenant_id()
        if tenant_id is not None:
            tenant = Tenant.objects.filter(id=tenant_id).first()
    return tenant


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Example:
        require(actor, "analytics.view")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")


def require_any(actor: ActorContext, *codes: str) -> None:
    """Require that the actor has AT LEAST ONE of the specified permissions."""
    for code in codes:
        if actor.has(code):
            return

    raise PermissionDenied(f"Permission denied: requires one of {', '.join(codes)}")


def require_role(actor: ActorContext, *roles: str) -> None:
    """Require one of the given roles. super-admin always passes."""
    if actor.is_super_admin:
        return
    if not any(actor.has_role(r) for r in roles):
        raise PermissionDenied(f"Requires role: {' or '.join(roles)}")


def require_tenant(actor: ActorContext) -> Tenant:
    """Return the request tenant or raise TenantRequired."""
    if actor.tenant is None:
        raise TenantRequired()
    return actor.tenant


class HasRole(BasePermission):
    """
    DRF permission class gating a view on roles.

    Usage:
        permission_classes = [IsAuthenticated, HasRole.of("employer")]
    """

    roles: tuple = ()
    message = "You do not have the role required for this page."

    @classmethod
    def of(cls, *roles: str):
        return type(f"HasRole_{'_'.join(r.replace('-', '_') for r in roles)}", (cls,), {"roles": roles})

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        names = set(user.user_roles.values_list("role__name", flat=True))
        return Role.SUPER_ADMIN in names or bool(names & set(self.roles))
