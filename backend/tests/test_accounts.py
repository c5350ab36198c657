# tests/test_accounts.py
"""
Tests for the accounts module.

Tests cover:
- Self-registration for graduates and employers
- Login tokens and their tenant/role claims
- Role defaults, assignment and revocation
- Suspension
"""

import pytest

from django.contrib.auth import get_user_model
from rest_framework.exceptions import PermissionDenied
from rest_framework_simplejwt.tokens import AccessToken

from accounts.authz import ActorContext, require, require_role
from accounts.commands import assign_role, register_user, revoke_role, suspend_user
from accounts.models import Role
from accounts.permission_defaults import ROLE_PERMISSIONS, all_permission_codes
from accounts.permissions import grant_user_permission, seed_roles_and_permissions
from employers.models import Employer
from graduates.models import Graduate

from tests.conftest import make_actor


User = get_user_model()


# =============================================================================
# Registration
# =============================================================================

@pytest.mark.django_db
class TestRegistration:

    def test_graduate_registration_creates_tenant_profile(self, api_client, tenant):
        response = api_client.post(
            "/api/auth/register/",
            {
                "email": "Chidi@Unilag.test",
                "name": "Chidi Okeke",
                "password": "strongpass1",
                "role": "graduate",
                "institution": "unilag",
                "graduation_year": 2021,
            },
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["access"] and body["refresh"]
        assert body["user"]["email"] == "chidi@unilag.test"

        user = User.objects.get(email="chidi@unilag.test")
        assert user.institution_id == tenant.id
        assert user.has_role(Role.GRADUATE)
        with tenant.run():
            graduate = Graduate.objects.get(user_id=user.id)
        assert graduate.graduation_year == 2021
        assert graduate.tenant_id == tenant.id

    def test_employer_registration_creates_pending_employer(self, api_client):
        response = api_client.post(
            "/api/auth/register/",
            {
                "email": "jobs@globex.test",
                "name": "Globex Recruiting",
                "password": "strongpass1",
                "role": "employer",
                "company_name": "Globex",
            },
            format="json",
        )
        assert response.status_code == 201
        employer = Employer.objects.get(user__email="jobs@globex.test")
        assert employer.company_name == "Globex"
        assert employer.verification_status == Employer.VerificationStatus.PENDING
        assert employer.user.institution_id is None

    def test_graduate_needs_known_institution(self, api_client, tenant):
        response = api_client.post(
            "/api/auth/register/",
            {
                "email": "x@x.test",
                "name": "X",
                "password": "strongpass1",
                "role": "graduate",
                "institution": "atlantis",
            },
            format="json",
        )
        assert response.status_code == 400
        assert "institution" in response.json()

    def test_cannot_self_register_as_admin(self, api_client):
        response = api_client.post(
            "/api/auth/register/",
            {"email": "a@a.test", "name": "A", "password": "strongpass1", "role": "super-admin"},
            format="json",
        )
        assert response.status_code == 400

    def test_duplicate_email_fails(self, graduate_user, tenant):
        result = register_user(
            email="ADA@unilag.test",
            password="testpass123",
            name="Ada Again",
            role=Role.GRADUATE,
            institution=tenant,
        )
        assert result.success is False
        assert "already exists" in result.error


# =============================================================================
# Login
# =============================================================================

@pytest.mark.django_db
class TestLogin:

    def test_login_returns_claims(self, api_client, graduate_user, tenant):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "ada@unilag.test", "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 200
        token = AccessToken(response.json()["access"])
        assert token["tenant_id"] == tenant.id
        assert token["roles"] == ["graduate"]

    def test_wrong_password_is_rejected(self, api_client, graduate_user):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "ada@unilag.test", "password": "nope-nope"},
            format="json",
        )
        assert response.status_code == 401

    def test_suspended_user_cannot_login(self, api_client, graduate_user):
        graduate_user.is_suspended = True
        graduate_user.save()
        response = api_client.post(
            "/api/auth/login/",
            {"email": "ada@unilag.test", "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 401

    def test_me_reports_primary_role_and_tenant(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).get("/api/auth/me/")
        assert response.status_code == 200
        body = response.json()
        assert body["primary_role"] == Role.INSTITUTION_ADMIN
        assert body["tenant"]["slug"] == "unilag"
        assert "graduates.manage" in body["permissions"]


# =============================================================================
# Roles and permissions
# =============================================================================

@pytest.mark.django_db
class TestRolesAndPermissions:

    def test_seed_is_idempotent(self, db):
        first = seed_roles_and_permissions()
        second = seed_roles_and_permissions()
        assert first["roles_created"] == len(Role.NAMES)
        assert second == {"roles_created": 0, "links_created": 0}

    def test_every_role_has_defaults(self):
        assert set(ROLE_PERMISSIONS) == set(Role.NAMES)
        assert "analytics.export" in all_permission_codes()

    def test_graduate_cannot_manage_graduates(self, graduate_user, tenant):
        actor = make_actor(graduate_user, tenant)
        with pytest.raises(PermissionDenied):
            require(actor, "graduates.manage")

    def test_direct_grant_extends_role(self, graduate_user, tenant):
        grant_user_permission(graduate_user, "analytics.view")
        actor = make_actor(graduate_user, tenant)
        require(actor, "analytics.view")

    def test_super_admin_passes_everything(self, super_admin):
        actor = make_actor(super_admin)
        assert actor.has("anything.at_all")
        require_role(actor, Role.EMPLOYER)

    def test_primary_role_prefers_highest_privilege(self, graduate_user, tenant):
        assign_role(None, graduate_user, Role.INSTITUTION_ADMIN, institution=tenant)
        assert make_actor(graduate_user, tenant).primary_role == Role.INSTITUTION_ADMIN

    def test_institution_admin_requires_institution(self, employer_user):
        result = assign_role(None, employer_user, Role.INSTITUTION_ADMIN)
        assert result.success is False

    def test_role_assignment_over_api(self, client_for, super_admin, employer_user, tenant):
        response = client_for(super_admin).post(
            f"/api/users/{employer_user.id}/roles/",
            {"role": "institution-admin", "institution": "unilag"},
            format="json",
        )
        assert response.status_code == 201
        employer_user.refresh_from_db()
        assert employer_user.institution_id == tenant.id
        assert employer_user.has_role(Role.INSTITUTION_ADMIN)

    def test_cannot_revoke_own_super_admin(self, super_admin):
        result = revoke_role(make_actor(super_admin), super_admin, Role.SUPER_ADMIN)
        assert result.success is False

    def test_revoking_missing_role_is_not_found(self, super_admin, graduate_user):
        result = revoke_role(make_actor(super_admin), graduate_user, Role.EMPLOYER)
        assert result.not_found is True

    def test_actor_is_frozen(self, graduate_user):
        actor = ActorContext(user=graduate_user, tenant=None, roles=frozenset(), perms=frozenset())
        with pytest.raises(AttributeError):
            actor.perms = frozenset({"x"})


# =============================================================================
# Suspension
# =============================================================================

@pytest.mark.django_db
class TestSuspension:

    def test_suspended_user_is_denied(self, client_for, super_admin, graduate_user, tenant):
        result = suspend_user(make_actor(super_admin), graduate_user, "spam")
        assert result.success
        response = client_for(graduate_user, tenant).get("/api/auth/me/")
        assert response.status_code == 403

    def test_cannot_suspend_self(self, super_admin):
        result = suspend_user(make_actor(super_admin), super_admin)
        assert result.success is False

    def test_graduate_of_other_institution_is_denied(self, client_for, graduate_user, second_tenant):
        response = client_for(graduate_user, second_tenant).get("/api/auth/me/")
        assert response.status_code == 403
