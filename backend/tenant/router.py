"""
Django Database Router for multi-tenant isolation.

Routes database operations based on model classification:
- SYSTEM_APPS -> always to "default" database
- TENANT_APPS -> to the tenant database from context

Institutions on the shared plan use "default" for everything; institutions
with a dedicated database get graduates, applications and analytics routed
to their alias while users, employers and jobs stay in the system database.

Usage:
    # In settings.py
    DATABASE_ROUTERS = ['tenant.router.TenantDatabaseRouter']
"""
import logging
from typing import Optional, Type

from django.conf import settings
from django.db.models import Model

from tenant.context import get_current_db_alias, is_shared_tenant

logger = logging.getLogger(__name__)


# =============================================================================
# Model Classification
# =============================================================================

# Apps that ALWAYS live in the default database
SYSTEM_APPS = frozenset({
    "auth",
    "contenttypes",
    "sessions",
    "admin",
    "token_blacklist",  # SimpleJWT token blacklist
    "django_celery_beat",
    "django_celery_results",
    "tenant",
    "accounts",
    "employers",
    "notifications",
    "themes",
})

# Apps whose rows belong to one institution and follow the tenant context
TENANT_APPS = frozenset({
    "graduates",
    "analytics",
})


# =============================================================================
# Router Implementation
# =============================================================================

class TenantDatabaseRouter:
    """
    Routes database operations based on tenant context.

    Thread-safe via contextvars (see tenant.context module).
    """

    def _get_model_label(self, model: Type[Model]) -> str:
        return f"{model._meta.app_label}.{model._meta.object_name}"

    def _is_tenant_model(self, model: Type[Model]) -> bool:
        # SimpleLazyObject and friends have no _meta
        if not hasattr(model, "_meta"):
            return False
        return model._meta.app_label in TENANT_APPS

    def db_for_read(self, model: Type[Model], **hints) -> Optional[str]:
        if self._is_tenant_model(model):
            return get_current_db_alias()
        return "default"

    def db_for_write(self, model: Type[Model], **hints) -> Optional[str]:
        if not self._is_tenant_model(model):
            return "default"

        db_alias = get_current_db_alias()
        if db_alias == "default" and not is_shared_tenant():
            logger.warning(
                "Writing tenant model %s to default for a dedicated tenant. "
                "This may indicate missing tenant context.",
                self._get_model_label(model),
            )
        return db_alias

    def allow_relation(self, obj1: Model, obj2: Model, **hints) -> Optional[bool]:
        """
        Allow every relation.

        Cross-tier FKs (JobApplication -> Job, Graduate -> User) are declared
        with db_constraint=False.
        """
        return True

    def allow_migrate(
        self,
        db: str,
        app_label: str,
        model_name: Optional[str] = None,
        **hints,
    ) -> Optional[bool]:
        """
        System apps migrate on 'default' only; tenant apps on every database.
        """
        if app_label in TENANT_APPS:
            return True
        return db == "default"


def get_tenant_databases() -> list[str]:
    """
    Get list of all configured tenant database aliases.

    Useful for running migrations on all tenant databases:
        for db in get_tenant_databases():
            call_command('migrate', database=db)
    """
    return [
        alias
        for alias in settings.DATABASES.keys()
        if alias.startswith("tenant_")
    ]
