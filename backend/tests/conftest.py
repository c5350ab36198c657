# tests/conftest.py
"""
Pytest fixtures for Gradlink tests.

Tenants are created through tenant.commands.create_tenant (shared mode, so
every tenant-scoped row lands in the test database), users through the
accounts commands so roles and profiles match what registration produces.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.authz import ActorContext
from accounts.commands import assign_role, register_user
from accounts.models import Role
from accounts.permissions import effective_permission_codes
from employers.models import Employer, Job
from graduates.models import Course, Graduate
from tenant.commands import create_tenant
from tenant.context import clear_tenant_context


User = get_user_model()


@pytest.fixture(autouse=True)
def _clean_tenant_context():
    """No test leaks its tenant context into the next one."""
    clear_tenant_context()
    yield
    clear_tenant_context()


def make_actor(user, tenant=None) -> ActorContext:
    return ActorContext(
        user=user,
        tenant=tenant,
        roles=frozenset(user.user_roles.values_list("role__name", flat=True)),
        perms=effective_permission_codes(user),
    )


# =============================================================================
# Tenant Fixtures
# =============================================================================

@pytest.fixture
def tenant(db):
    """Create a shared-database institution."""
    result = create_tenant(None, name="University of Lagos", slug="unilag", domain="careers.unilag.edu.ng")
    assert result.success, result.error
    return result.data["tenant"]


@pytest.fixture
def second_tenant(db):
    """Create a second institution for isolation tests."""
    result = create_tenant(None, name="Covenant University", slug="covenant")
    assert result.success, result.error
    return result.data["tenant"]


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def super_admin(db):
    user = User.objects.create_superuser(email="root@gradlink.test", password="testpass123", name="Root")
    assign_role(None, user, Role.SUPER_ADMIN)
    return user


@pytest.fixture
def institution_admin(db, tenant):
    user = User.objects.create_user(email="admin@unilag.test", password="testpass123", name="Unilag Admin")
    result = assign_role(None, user, Role.INSTITUTION_ADMIN, institution=tenant)
    assert result.success, result.error
    return user


@pytest.fixture
def course(db, tenant):
    with tenant.run():
        return Course.objects.create(
            tenant_id=tenant.id,
            name="Computer Science",
            code="CSC",
            department="Engineering",
        )


@pytest.fixture
def graduate_user(db, tenant):
    result = register_user(
        email="ada@unilag.test",
        password="testpass123",
        name="Ada Obi",
        role=Role.GRADUATE,
        institution=tenant,
        profile={"graduation_year": 2022},
    )
    assert result.success, result.error
    return result.data["user"]


@pytest.fixture
def graduate(db, tenant, graduate_user, course):
    """The graduate profile created at registration, filled in."""
    with tenant.run():
        graduate = Graduate.objects.get(user_id=graduate_user.id)
        graduate.course = course
        graduate.skills = ["Python", "SQL"]
        graduate.gpa = Decimal("3.60")
        graduate.save()
    return graduate


@pytest.fixture
def employer_user(db):
    result = register_user(
        email="hr@acme.test",
        password="testpass123",
        name="Acme HR",
        role=Role.EMPLOYER,
        profile={"company_name": "Acme Ltd", "industry": "Technology"},
    )
    assert result.success, result.error
    return result.data["user"]


@pytest.fixture
def employer(db, employer_user):
    employer = Employer.objects.get(user=employer_user)
    employer.verification_status = Employer.VerificationStatus.VERIFIED
    employer.verified_at = timezone.now()
    employer.save()
    return employer


@pytest.fixture
def job(db, employer):
    return Job.objects.create(
        employer=employer,
        title="Junior Backend Engineer",
        description="Build APIs.",
        target_programs=["Computer Science"],
        required_skills=["python", "django"],
        status=Job.Status.ACTIVE,
        application_deadline=timezone.localdate() + timedelta(days=30),
    )


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Create a DRF API client."""
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """
    Authenticate the client as `user`, scoped to `tenant` via the tenant header.

    Usage:
        client = client_for(user, tenant)
    """
    def _client_for(user, tenant=None):
        api_client.force_authenticate(user=user)
        if tenant is not None:
            api_client.credentials(HTTP_X_TENANT_ID=tenant.slug)
        else:
            api_client.credentials()
        return api_client

    return _client_for
