"""
Tenant resolution middleware.

Binds every request to at most one institution before any view runs and
sets the tenant context used by the database router and tenant-scoped
managers.

Resolution order (first hit wins):
1. Request host matched against Domain (CENTRAL_DOMAINS are skipped)
2. X-Tenant-ID header (tenant slug or numeric id)
3. tenant_id claim of the JWT access token

Outcomes:
- Identifier given but unknown -> 404 tenant_not_found
- Tenant SUSPENDED -> 403 tenant_suspended
- Tenant READ_ONLY and unsafe method -> 503 tenant_read_only
- Token user bound to another institution (not super-admin) -> 403 tenant_mismatch
- No identifier at all -> request proceeds without tenant context;
  tenant-only views reject it via accounts.authz.require_tenant

The context is ALWAYS cleared in a finally block so a worker thread never
carries one request's tenant into the next.
"""
import logging

from django.conf import settings
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver
from django.http import JsonResponse
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework.exceptions import AuthenticationFailed

from tenant.context import clear_tenant_context, set_tenant_context
from tenant.models import Domain, Tenant

logger = logging.getLogger(__name__)

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")
SUPER_ADMIN_ROLE = "super-admin"

# Per-process caches, cleared whenever a Tenant or Domain row changes
_tenant_cache: dict[int, dict] = {}
_host_cache: dict[str, int | None] = {}


def invalidate_tenant_cache(tenant_id: int | None = None) -> None:
    """
    Invalidate cached tenant lookups.

    Args:
        tenant_id: Specific tenant to invalidate, or None to clear all
    """
    if tenant_id is None:
        _tenant_cache.clear()
    else:
        _tenant_cache.pop(tenant_id, None)
    _host_cache.clear()


@receiver(post_save, sender=Tenant)
@receiver(post_delete, sender=Tenant)
def _tenant_changed(sender, instance, **kwargs):
    invalidate_tenant_cache(instance.id)


@receiver(post_save, sender=Domain)
@receiver(post_delete, sender=Domain)
def _domain_changed(sender, instance, **kwargs):
    _host_cache.clear()


class TenantNotFound(Exception):
    def __init__(self, identifier, source: str):
        super().__init__(f"No tenant for {source} '{identifier}'")
        self.identifier = identifier
        self.source = source


class TenantResolutionMiddleware:
    """
    Resolve the tenant for the request and scope the request to it.

    Flow:
    1. Public path -> no tenant, proceed
    2. Resolve tenant (host, header, token claim)
    3. Enforce tenant status and user/tenant binding
    4. Set tenant context, process request
    5. Clear context in finally block
    """

    PUBLIC_PATHS = (
        "/api/auth/register/",
        "/api/auth/login/",
        "/api/auth/refresh/",
        "/admin/",
        "/media/",
        "/static/",
        "/_health/",
        "/_metrics/",
    )

    def __init__(self, get_response):
        self.get_response = get_response
        self.jwt_auth = JWTAuthentication()

    def __call__(self, request):
        request.tenant = None

        if self._is_public_path(request.path):
            try:
                return self.get_response(request)
            finally:
                clear_tenant_context()

        token = self._authenticate(request)

        try:
            tenant = self._resolve_tenant(request, token)
        except TenantNotFound as exc:
            logger.info(f"Tenant resolution failed: {exc}")
            return JsonResponse(
                {
                    "detail": "tenant_not_found",
                    "message": f"No institution matches {exc.source} '{exc.identifier}'.",
                },
                status=404,
            )

        if tenant is None:
            try:
                return self.get_response(request)
            finally:
                clear_tenant_context()

        info = self._get_tenant_info(tenant)

        if info["status"] == Tenant.Status.SUSPENDED:
            return JsonResponse(
                {
                    "detail": "tenant_suspended",
                    "message": "This institution has been suspended.",
                },
                status=403,
            )

        if not info["is_writable"] and request.method not in SAFE_METHODS:
            return JsonResponse(
                {
                    "detail": "tenant_read_only",
                    "message": "This institution is currently read-only.",
                },
                status=503,
            )

        if token is not None and self._is_foreign_user(request.user, token, info["tenant_id"]):
            return JsonResponse(
                {
                    "detail": "tenant_mismatch",
                    "message": "Your account does not belong to this institution.",
                },
                status=403,
            )

        request.tenant = tenant
        set_tenant_context(
            tenant_id=info["tenant_id"],
            db_alias=info["db_alias"],
            is_shared=info["is_shared"],
        )
        try:
            return self.get_response(request)
        finally:
            clear_tenant_context()

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _authenticate(self, request):
        """Authenticate a bearer token if present; DRF re-checks on the view."""
        try:
            result = self.jwt_auth.authenticate(request)
        except (InvalidToken, TokenError, AuthenticationFailed):
            # Let DRF permission classes answer with 401
            return None
        if not result:
            return None
        user, token = result
        request.user = user
        return token

    def _resolve_tenant(self, request, token) -> Tenant | None:
        host = request.get_host().split(":")[0].lower()
        central = {d.lower() for d in getattr(settings, "CENTRAL_DOMAINS", [])}
        if host and host not in central:
            tenant = self._tenant_for_host(host)
            if tenant is not None:
                return tenant

        header_name = getattr(settings, "TENANT_HEADER", "X-Tenant-ID")
        identifier = request.headers.get(header_name)
        if identifier:
            tenant = Tenant.resolve_identifier(identifier)
            if tenant is None:
                raise TenantNotFound(identifier, "identifier")
            return tenant

        if token is not None:
            claim = token.get("tenant_id")
            if claim not in (None, "", "None"):
                tenant = Tenant.resolve_identifier(claim)
                if tenant is None:
                    raise TenantNotFound(claim, "token")
                return tenant

        return None

    def _tenant_for_host(self, host: str) -> Tenant | None:
        if host in _host_cache:
            tenant_id = _host_cache[host]
            return Tenant.objects.filter(id=tenant_id).first() if tenant_id else None
        tenant = Domain.resolve_host(host)
        _host_cache[host] = tenant.id if tenant else None
        return tenant

    def _get_tenant_info(self, tenant: Tenant) -> dict:
        if tenant.id not in _tenant_cache:
            _tenant_cache[tenant.id] = tenant.get_tenant_info()
        return _tenant_cache[tenant.id]

    def _is_foreign_user(self, user, token, tenant_id: int) -> bool:
        if SUPER_ADMIN_ROLE in (token.get("roles") or []):
            return False
        institution_id = getattr(user, "institution_id", None)
        return institution_id is not None and institution_id != tenant_id

    def _is_public_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.PUBLIC_PATHS)
