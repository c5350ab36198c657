"""
Health checks served under /_health/.

- live:  the process answers
- ready: the system database and every tenant database answer
- full:  databases (with the institutions each one serves), the Celery
         broker and tenant routing
"""
import logging
import time
from typing import Any, Dict

import redis
from django.conf import settings
from django.db import connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
SKIPPED = "skipped"


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


def _institutions_by_alias() -> Dict[str, list]:
    from tenant.models import Tenant

    served: Dict[str, list] = {}
    for slug, alias in Tenant.objects.active().values_list("slug", "db_alias"):
        served.setdefault(alias, []).append(slug)
    return served


class HealthCheck:

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        start = time.monotonic()
        try:
            with connections[alias].cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except Exception as e:
            logger.warning(f"Database '{alias}' failed its health check: {e}")
            return {"status": UNHEALTHY, "alias": alias, "error": str(e), "duration_ms": _elapsed_ms(start)}
        return {"status": HEALTHY, "alias": alias, "duration_ms": _elapsed_ms(start)}

    @staticmethod
    def check_all_databases(with_institutions: bool = False) -> Dict[str, Any]:
        results = {alias: HealthCheck.check_database(alias) for alias in settings.DATABASES}
        if with_institutions and results["default"]["status"] == HEALTHY:
            served = _institutions_by_alias()
            for alias, result in results.items():
                result["institutions"] = served.get(alias, [])

        healthy = all(r["status"] == HEALTHY for r in results.values())
        return {"status": HEALTHY if healthy else UNHEALTHY, "databases": results}

    @staticmethod
    def check_broker() -> Dict[str, Any]:
        """Ping the Celery broker; notifications and snapshots queue through it."""
        if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
            return {"status": SKIPPED, "reason": "tasks run eagerly"}
        broker_url = getattr(settings, "CELERY_BROKER_URL", "")
        if not broker_url.startswith(("redis://", "rediss://")):
            return {"status": SKIPPED, "reason": "broker is not Redis"}

        start = time.monotonic()
        try:
            redis.from_url(broker_url).ping()
        except redis.RedisError as e:
            logger.warning(f"Celery broker failed its health check: {e}")
            return {"status": UNHEALTHY, "error": str(e), "duration_ms": _elapsed_ms(start)}
        return {"status": HEALTHY, "duration_ms": _elapsed_ms(start)}

    @staticmethod
    def check_tenant_directory() -> Dict[str, Any]:
        """Every active institution must route to a configured database."""
        from tenant.checks import find_routing_errors
        from tenant.models import Tenant

        errors = find_routing_errors()
        count = Tenant.objects.active().count()
        if errors:
            return {"status": UNHEALTHY, "tenants": count, "errors": errors[:10]}
        return {"status": HEALTHY, "tenants": count}

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        databases = HealthCheck.check_all_databases(with_institutions=True)
        checks = {
            "databases": databases,
            "broker": HealthCheck.check_broker(),
        }
        # Routing is read from the system database
        if databases["databases"]["default"]["status"] == HEALTHY:
            checks["tenant_directory"] = HealthCheck.check_tenant_directory()

        healthy = all(c["status"] in (HEALTHY, SKIPPED) for c in checks.values())
        return {
            "status": HEALTHY if healthy else UNHEALTHY,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
        }


class LivenessView(View):
    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """Ready only when every database answers, tenant databases included."""

    def get(self, request):
        result = HealthCheck.check_all_databases()
        ready = result["status"] == HEALTHY
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", "databases": result["databases"]},
            status=200 if ready else 503,
        )


class FullHealthView(View):
    def get(self, request):
        health = HealthCheck.get_full_health()
        return JsonResponse(health, status=200 if health["status"] == HEALTHY else 503)
