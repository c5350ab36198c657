# tests/test_ops.py
"""
Tests for the operations endpoints and structured logging.
"""

import json
import logging
import pytest

from ops.health import HealthCheck
from ops.logging_config import JsonFormatter, get_logging_config
from ops.metrics import _normalize_endpoint
from tenant.models import Tenant


# =============================================================================
# Health
# =============================================================================

@pytest.mark.django_db
class TestHealth:

    def test_liveness(self, api_client):
        response = api_client.get("/_health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness_checks_databases(self, api_client):
        response = api_client.get("/_health/ready")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["databases"]["default"]["status"] == "healthy"

    def test_tenant_directory_check(self, tenant):
        result = HealthCheck.check_tenant_directory()
        assert result == {"status": "healthy", "tenants": 1}

    def test_unknown_alias_is_unhealthy(self):
        result = HealthCheck.check_database("missing")
        assert result["status"] == "unhealthy"

    def test_full_health_lists_institutions(self, tenant):
        health = HealthCheck.get_full_health()
        assert health["status"] == "healthy"
        checks = health["checks"]
        assert checks["broker"]["status"] == "skipped"
        assert checks["databases"]["databases"]["default"]["institutions"] == ["unilag"]
        assert checks["tenant_directory"]["tenants"] == 1

    def test_full_health_endpoint(self, api_client, tenant):
        response = api_client.get("/_health/full")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# =============================================================================
# Metrics
# =============================================================================

@pytest.mark.django_db
class TestMetrics:

    def test_metrics_endpoint(self, api_client, tenant, graduate):
        response = api_client.get("/_metrics/")
        assert response.status_code == 200
        body = response.content.decode()
        assert 'gradlink_graduates_total{tenant_slug="unilag"} 1.0' in body
        assert "gradlink_request_duration_seconds" in body

    def test_suspended_institution_drops_out(self, api_client, tenant, graduate):
        api_client.get("/_metrics/")
        tenant.status = Tenant.Status.SUSPENDED
        tenant.save()
        body = api_client.get("/_metrics/").content.decode()
        assert 'tenant_slug="unilag"' not in body

    def test_endpoint_normalization(self):
        assert _normalize_endpoint("/api/jobs/42/apply/") == "/api/jobs/{id}/apply/"


# =============================================================================
# Logging
# =============================================================================

class TestLogging:

    def _record(self, **extra):
        record = logging.LogRecord("graduates", logging.INFO, __file__, 10, "applied %s", ("ok",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        entry = json.loads(JsonFormatter().format(self._record(application_id=7)))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "graduates"
        assert entry["message"] == "applied ok"
        assert entry["extra"]["application_id"] == 7
        assert "tenant_id" not in entry

    @pytest.mark.django_db
    def test_json_formatter_adds_tenant(self, tenant):
        with tenant.run():
            entry = json.loads(JsonFormatter().format(self._record()))
        assert entry["tenant_id"] == tenant.id

    def test_console_format_in_debug(self, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        config = get_logging_config(debug=True)
        assert "graduates" in config["loggers"]
