"""
Tenant context held in a ContextVar.

The resolver middleware sets the context once per request; the database
router and TenantScopedManager read it to pick the database alias and the
tenant filter.

Usage:
    # In middleware
    set_tenant_context(tenant_id=3, db_alias="tenant_unilag", is_shared=False)

    # In application code
    db_alias = get_current_db_alias()  # "tenant_unilag"

    # Explicit scoping (tasks, commands, cross-tenant dashboards)
    with tenant_context(tenant_id=3, db_alias="tenant_unilag", is_shared=False):
        Graduate.objects.count()
"""
from contextvars import ContextVar
from contextlib import contextmanager
from typing import Optional, NamedTuple


class TenantContext(NamedTuple):
    """Immutable tenant context for a request."""

    tenant_id: int
    db_alias: str
    is_shared: bool  # True if the tenant lives in the shared database


# None means no tenant context (system operations)
_current_tenant: ContextVar[Optional[TenantContext]] = ContextVar(
    "current_tenant",
    default=None,
)


def get_current_tenant() -> Optional[TenantContext]:
    """
    Get the current tenant context.

    Returns None outside a request or during system operations.
    """
    return _current_tenant.get()


def get_current_db_alias() -> str:
    """
    Get the current database alias.

    Returns 'default' if no tenant context is set.
    """
    ctx = _current_tenant.get()
    return ctx.db_alias if ctx else "default"


def get_current_tenant_id() -> Optional[int]:
    """Get the current tenant ID, or None."""
    ctx = _current_tenant.get()
    return ctx.tenant_id if ctx else None


def is_shared_tenant() -> bool:
    """
    Check if the current tenant lives in the shared database.

    True when no tenant context is set.
    """
    ctx = _current_tenant.get()
    return ctx.is_shared if ctx else True


def set_tenant_context(
    tenant_id: int,
    db_alias: str,
    is_shared: bool = True,
) -> None:
    """
    Set the current tenant context.

    Called by TenantResolutionMiddleware after the tenant is resolved.
    """
    _current_tenant.set(
        TenantContext(
            tenant_id=tenant_id,
            db_alias=db_alias,
            is_shared=is_shared,
        )
    )


def clear_tenant_context() -> None:
    """
    Clear the current tenant context.

    Called by middleware in its finally block.
    """
    _current_tenant.set(None)


@contextmanager
def tenant_context(tenant_id: int, db_alias: str, is_shared: bool = True):
    """
    Context manager for setting tenant context.

    Restores the previous context on exit, even on exception.
    """
    token = _current_tenant.set(
        TenantContext(
            tenant_id=tenant_id,
            db_alias=db_alias,
            is_shared=is_shared,
        )
    )
    try:
        yield
    finally:
        _current_tenant.reset(token)


@contextmanager
def system_db_context():
    """
    Context manager for system database operations.

    Temporarily clears tenant context so everything goes to 'default'
    and tenant-scoped managers stop filtering.

    Usage:
        with system_db_context():
            tenant = Tenant.objects.get(slug=slug)
    """
    token = _current_tenant.set(None)
    try:
        yield
    finally:
        _current_tenant.reset(token)
