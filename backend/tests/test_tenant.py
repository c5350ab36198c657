# tests/test_tenant.py
"""
Tests for tenant resolution, scoping and routing.

Tests cover:
- Resolution by domain, header and token claim
- Status enforcement (suspended, read-only)
- Tenant mismatch for institution-bound users
- TenantScopedManager filtering and stamping
- Router classification and routing checks
- Tenant administration commands
"""

import pytest

from accounts.serializers import tokens_for_user
from graduates.models import Course, Graduate
from tenant.checks import find_routing_errors
from tenant.commands import create_tenant, update_tenant
from tenant.context import get_current_db_alias, get_current_tenant_id, tenant_context
from tenant.models import Tenant
from tenant.router import SYSTEM_APPS, TENANT_APPS, TenantDatabaseRouter
from themes.models import ComponentTheme

from tests.conftest import make_actor


# =============================================================================
# Resolution
# =============================================================================

@pytest.mark.django_db
class TestTenantResolution:

    def test_no_identifier_leaves_request_unscoped(self, client_for, super_admin):
        response = client_for(super_admin).get("/api/tenant/")
        assert response.status_code == 200
        assert response.json() == {"tenant": None}

    def test_header_resolves_by_slug(self, client_for, super_admin, tenant):
        response = client_for(super_admin, tenant).get("/api/tenant/")
        assert response.status_code == 200
        assert response.json()["tenant"]["slug"] == "unilag"

    def test_header_resolves_by_numeric_id(self, api_client, super_admin, tenant):
        api_client.force_authenticate(user=super_admin)
        response = api_client.get("/api/tenant/", HTTP_X_TENANT_ID=str(tenant.id))
        assert response.json()["tenant"]["id"] == tenant.id

    def test_domain_resolves_before_header(self, settings, api_client, super_admin, tenant, second_tenant):
        settings.ALLOWED_HOSTS = ["*"]
        api_client.force_authenticate(user=super_admin)
        response = api_client.get(
            "/api/tenant/",
            HTTP_HOST="careers.unilag.edu.ng",
            HTTP_X_TENANT_ID=second_tenant.slug,
        )
        assert response.json()["tenant"]["slug"] == "unilag"

    def test_unknown_identifier_is_404(self, api_client, super_admin, tenant):
        api_client.force_authenticate(user=super_admin)
        response = api_client.get("/api/tenant/", HTTP_X_TENANT_ID="nowhere")
        assert response.status_code == 404
        assert response.json()["detail"] == "tenant_not_found"

    def test_token_claim_resolves_tenant(self, api_client, graduate_user, tenant):
        access = tokens_for_user(graduate_user)["access"]
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        response = api_client.get("/api/tenant/")
        assert response.status_code == 200
        assert response.json()["tenant"]["slug"] == "unilag"

    def test_context_cleared_after_request(self, client_for, super_admin, tenant):
        client_for(super_admin, tenant).get("/api/tenant/")
        assert get_current_tenant_id() is None
        assert get_current_db_alias() == "default"


@pytest.mark.django_db
class TestTenantStatusEnforcement:

    def test_suspended_tenant_is_403(self, client_for, super_admin, tenant):
        tenant.status = Tenant.Status.SUSPENDED
        tenant.save()
        response = client_for(super_admin, tenant).get("/api/tenant/")
        assert response.status_code == 403
        assert response.json()["detail"] == "tenant_suspended"

    def test_read_only_tenant_allows_reads(self, client_for, institution_admin, tenant):
        tenant.status = Tenant.Status.READ_ONLY
        tenant.save()
        response = client_for(institution_admin, tenant).get("/api/courses/")
        assert response.status_code == 200

    def test_read_only_tenant_blocks_writes(self, client_for, institution_admin, tenant):
        tenant.status = Tenant.Status.READ_ONLY
        tenant.save()
        response = client_for(institution_admin, tenant).post(
            "/api/courses/", {"name": "Physics", "code": "PHY"}, format="json"
        )
        assert response.status_code == 503
        assert response.json()["detail"] == "tenant_read_only"

    def test_token_for_other_institution_is_mismatch(self, api_client, graduate_user, second_tenant):
        access = tokens_for_user(graduate_user)["access"]
        api_client.credentials(
            HTTP_AUTHORIZATION=f"Bearer {access}",
            HTTP_X_TENANT_ID=second_tenant.slug,
        )
        response = api_client.get("/api/tenant/")
        assert response.status_code == 403
        assert response.json()["detail"] == "tenant_mismatch"

    def test_super_admin_token_may_enter_any_tenant(self, api_client, super_admin, second_tenant):
        access = tokens_for_user(super_admin)["access"]
        api_client.credentials(
            HTTP_AUTHORIZATION=f"Bearer {access}",
            HTTP_X_TENANT_ID=second_tenant.slug,
        )
        response = api_client.get("/api/tenant/")
        assert response.status_code == 200

    def test_public_paths_skip_resolution(self, api_client):
        response = api_client.get("/_health/live", HTTP_X_TENANT_ID="nowhere")
        assert response.status_code == 200


# =============================================================================
# Scoping
# =============================================================================

@pytest.mark.django_db
class TestTenantScopedManager:

    def test_queries_are_narrowed_to_current_tenant(self, tenant, second_tenant):
        with tenant.run():
            Course.objects.create(name="Law", code="LAW")
        with second_tenant.run():
            Course.objects.create(name="Medicine", code="MED")

        with tenant.run():
            assert list(Course.objects.values_list("code", flat=True)) == ["LAW"]
        with second_tenant.run():
            assert list(Course.objects.values_list("code", flat=True)) == ["MED"]

    def test_no_context_sees_every_tenant(self, tenant, second_tenant):
        with tenant.run():
            Course.objects.create(name="Law", code="LAW")
        with second_tenant.run():
            Course.objects.create(name="Medicine", code="MED")
        assert Course.objects.count() == 2
        assert Course.all_tenants.count() == 2

    def test_save_stamps_tenant_from_context(self, tenant):
        with tenant.run():
            course = Course.objects.create(name="Law", code="LAW")
        assert course.tenant_id == tenant.id

    def test_save_without_context_raises(self, db):
        with pytest.raises(ValueError):
            Graduate(name="Nobody", email="n@x.test", graduation_year=2020).save()

    def test_nested_context_restores_outer(self, tenant, second_tenant):
        with tenant.run():
            with second_tenant.run():
                assert get_current_tenant_id() == second_tenant.id
            assert get_current_tenant_id() == tenant.id
        assert get_current_tenant_id() is None

    def test_active_excludes_suspended(self, tenant, second_tenant):
        second_tenant.status = Tenant.Status.SUSPENDED
        second_tenant.save()
        assert list(Tenant.objects.active()) == [tenant]


# =============================================================================
# Routing
# =============================================================================

class TestTenantRouter:

    def test_app_classification_is_disjoint(self):
        assert not SYSTEM_APPS & TENANT_APPS

    def test_system_models_always_use_default(self):
        router = TenantDatabaseRouter()
        with tenant_context(tenant_id=9, db_alias="tenant_unilag", is_shared=False):
            assert router.db_for_read(Tenant) == "default"
            assert router.db_for_write(ComponentTheme) == "default"

    def test_tenant_models_follow_context(self):
        router = TenantDatabaseRouter()
        with tenant_context(tenant_id=9, db_alias="tenant_unilag", is_shared=False):
            assert router.db_for_read(Graduate) == "tenant_unilag"
            assert router.db_for_write(Course) == "tenant_unilag"
        assert router.db_for_read(Graduate) == "default"

    def test_migrations_are_split_by_tier(self):
        router = TenantDatabaseRouter()
        assert router.allow_migrate("tenant_unilag", "graduates") is True
        assert router.allow_migrate("tenant_unilag", "accounts") is False
        assert router.allow_migrate("default", "accounts") is True


@pytest.mark.django_db
class TestRoutingChecks:

    def test_healthy_directory_has_no_errors(self, tenant):
        assert find_routing_errors() == []

    def test_dedicated_tenant_with_unknown_alias_is_reported(self, tenant):
        Tenant.objects.filter(pk=tenant.pk).update(mode=Tenant.IsolationMode.DEDICATED_DB, db_alias="tenant_ghost")
        errors = find_routing_errors()
        assert len(errors) == 1
        assert "tenant_ghost" in errors[0]


# =============================================================================
# Administration
# =============================================================================

@pytest.mark.django_db
class TestTenantCommands:

    def test_create_provisions_default_theme(self, tenant):
        theme = ComponentTheme.objects.get(tenant=tenant)
        assert theme.is_default is True
        assert theme.slug == "default"

    def test_duplicate_slug_fails(self, tenant):
        result = create_tenant(None, name="Another Lagos", slug="unilag")
        assert result.success is False

    def test_dedicated_tenant_needs_configured_alias(self, db):
        result = create_tenant(
            None,
            name="Ghost University",
            mode=Tenant.IsolationMode.DEDICATED_DB,
            db_alias="tenant_ghost",
        )
        assert result.success is False
        assert "not configured" in result.error

    def test_shared_tenant_cannot_point_elsewhere(self, tenant, super_admin):
        result = update_tenant(make_actor(super_admin), tenant, db_alias="tenant_x")
        assert result.success is False

    def test_super_admin_creates_tenant_over_api(self, client_for, super_admin):
        response = client_for(super_admin).post(
            "/api/tenants/",
            {"name": "Babcock University", "contact_email": "ict@babcock.test"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["slug"] == "babcock-university"

    def test_institution_admin_cannot_list_tenants(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).get("/api/tenants/")
        assert response.status_code == 403
