import logging
import os
import sys

from django.apps import AppConfig


logger = logging.getLogger(__name__)


class TenantConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tenant"
    verbose_name = "Tenant Isolation"

    def ready(self):
        """
        Register cache-invalidation signals and run the startup routing check.

        The check validates that every tenant's db_alias is configured.
        Behavior controlled by TENANT_HEALTH_CHECK env var:
        - "warn" (default): Logs a warning but allows startup
        - "error": Raises RuntimeError on inconsistency
        - "skip": Skips check entirely
        """
        # Signal receivers live in the middleware module
        from tenant import middleware  # noqa: F401

        if "migrate" in sys.argv or "makemigrations" in sys.argv:
            return
        if "test" in sys.argv or "pytest" in sys.modules:
            return

        health_check_mode = os.environ.get("TENANT_HEALTH_CHECK", "warn")
        if health_check_mode == "skip":
            logger.debug("Tenant health check skipped (TENANT_HEALTH_CHECK=skip)")
            return

        self._check_tenant_routing(health_check_mode)

    def _check_tenant_routing(self, mode: str):
        """
        Verify tenant routing consistency:
        1. DEDICATED_DB mode -> db_alias exists in settings.DATABASES
        2. SHARED mode -> db_alias == "default"
        """
        from django.db.utils import OperationalError, ProgrammingError

        from tenant.checks import find_routing_errors

        try:
            errors = find_routing_errors()
        except (OperationalError, ProgrammingError):
            # Tables don't exist yet (initial setup)
            logger.debug("Tenant health check skipped (database not ready)")
            return

        if not errors:
            logger.info("Tenant health check passed")
            return

        message = (
            f"TENANT HEALTH CHECK FAILED ({len(errors)} issues):\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
        if mode == "error":
            raise RuntimeError(message)
        logger.warning(message)
