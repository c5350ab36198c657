"""
Prometheus metrics served at /_metrics/.

Per-institution gauges are recomputed on every scrape:
- gradlink_graduates_total{tenant_slug}
- gradlink_applications_total{tenant_slug, status}
- gradlink_snapshots_total{tenant_slug}
- gradlink_tenant_mode{tenant_slug, db_alias}: 0 shared, 1 dedicated

Request metrics come from the `track_request_metrics` middleware:
- gradlink_request_duration_seconds{method, endpoint, status}
- gradlink_active_requests
"""
import logging
import re
import time

from django.db.models import Count
from django.http import HttpResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)

GRADUATES = Gauge("gradlink_graduates_total", "Graduates per institution", ["tenant_slug"])
APPLICATIONS = Gauge(
    "gradlink_applications_total", "Job applications per institution and status", ["tenant_slug", "status"]
)
SNAPSHOTS = Gauge("gradlink_snapshots_total", "Career outcome snapshots per institution", ["tenant_slug"])
TENANT_MODE = Gauge(
    "gradlink_tenant_mode", "Institution isolation mode (0=shared, 1=dedicated)", ["tenant_slug", "db_alias"]
)

REQUEST_DURATION = Histogram(
    "gradlink_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
ACTIVE_REQUESTS = Gauge("gradlink_active_requests", "Requests currently in flight")

_PER_TENANT = (GRADUATES, APPLICATIONS, SNAPSHOTS, TENANT_MODE)


def collect_metrics() -> None:
    """Refresh the per-institution gauges from every active tenant."""
    from analytics.models import CareerOutcomeSnapshot
    from graduates.models import Graduate, JobApplication
    from tenant.models import Tenant

    # Suspended or deleted institutions drop out of the scrape
    for gauge in _PER_TENANT:
        gauge.clear()

    for tenant in Tenant.objects.active():
        TENANT_MODE.labels(tenant_slug=tenant.slug, db_alias=tenant.db_alias).set(int(tenant.is_dedicated))
        try:
            with tenant.run():
                GRADUATES.labels(tenant_slug=tenant.slug).set(Graduate.objects.count())
                SNAPSHOTS.labels(tenant_slug=tenant.slug).set(CareerOutcomeSnapshot.objects.count())
                rows = JobApplication.objects.values("status").annotate(count=Count("id")).order_by()
                for row in rows:
                    APPLICATIONS.labels(tenant_slug=tenant.slug, status=row["status"]).set(row["count"])
        except Exception as e:
            # An unreachable tenant database leaves the other institutions' gauges intact
            logger.error(f"Metrics collection failed for tenant {tenant.slug}: {e}")


class MetricsView(View):
    def get(self, request):
        collect_metrics()
        return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)


def _normalize_endpoint(path: str) -> str:
    # Numeric ids and uuids collapse so label cardinality stays bounded
    path = re.sub(r"/\d+/", "/{id}/", path)
    path = re.sub(r"/[0-9a-f-]{36}/", "/{uuid}/", path)
    return path[:50]


def track_request_metrics(get_response):
    def middleware(request):
        start = time.monotonic()
        status = 500
        ACTIVE_REQUESTS.inc()
        try:
            response = get_response(request)
            status = response.status_code
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=_normalize_endpoint(request.path),
                status=f"{status // 100}xx",
            ).observe(time.monotonic() - start)

    return middleware
