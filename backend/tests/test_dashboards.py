# tests/test_dashboards.py
"""
Tests for the role dashboards.

Every dashboard answers with a page payload: the component to mount,
its props, the request url and the payload version.
"""

import pytest

from accounts.models import Role
from employers.models import Job
from graduates.commands import apply_to_job
from graduates.models import Graduate

from tests.conftest import make_actor


def _apply(graduate_user, tenant, job):
    with tenant.run():
        result = apply_to_job(make_actor(graduate_user, tenant), job, "Please consider me.")
    assert result.success, result.error
    return result.data["application"]


# =============================================================================
# Dispatch
# =============================================================================

@pytest.mark.django_db
class TestDashboardDispatch:

    def test_page_payload_shape(self, client_for, graduate_user, tenant, graduate):
        response = client_for(graduate_user, tenant).get("/api/dashboard/")
        assert response.status_code == 200
        body = response.json()
        assert body["component"] == "Dashboard/Graduate"
        assert body["url"] == "/api/dashboard/"
        assert body["version"] == "1"
        assert "statistics" in body["props"]

    @pytest.mark.parametrize("fixture_name,component", [
        ("institution_admin", "InstitutionAdmin/Dashboard"),
        ("employer_user", "Dashboard/Employer"),
        ("super_admin", "SuperAdmin/Dashboard"),
    ])
    def test_primary_role_picks_component(self, request, client_for, tenant, employer, fixture_name, component):
        user = request.getfixturevalue(fixture_name)
        response = client_for(user, tenant).get("/api/dashboard/")
        assert response.status_code == 200
        assert response.json()["component"] == component

    def test_role_route_refuses_other_roles(self, client_for, graduate_user, tenant, graduate):
        response = client_for(graduate_user, tenant).get("/api/dashboard/employer/")
        assert response.status_code == 403

    def test_super_admin_route_is_role_gated(self, client_for, institution_admin, super_admin, tenant):
        refused = client_for(institution_admin, tenant).get("/api/dashboard/super-admin/")
        assert refused.status_code == 403
        assert refused.json()["detail"] == "You do not have the role required for this page."

        response = client_for(super_admin).get("/api/dashboard/super-admin/")
        assert response.status_code == 200
        assert response.json()["component"] == "SuperAdmin/Dashboard"

    def test_graduate_without_profile_gets_404(self, client_for, graduate_user, tenant):
        with tenant.run():
            Graduate.objects.filter(user_id=graduate_user.id).delete()
        response = client_for(graduate_user, tenant).get("/api/dashboard/graduate/")
        assert response.status_code == 404

    def test_graduate_dashboard_needs_institution(self, client_for, graduate_user):
        response = client_for(graduate_user).get("/api/dashboard/graduate/")
        assert response.status_code == 400


# =============================================================================
# Props
# =============================================================================

@pytest.mark.django_db
class TestDashboardProps:

    def test_graduate_recommendations_exclude_applied_jobs(self, client_for, graduate_user, tenant, graduate, job, employer):
        other = Job.objects.create(
            employer=employer,
            title="Data Engineer",
            description="Pipelines.",
            required_skills=["sql"],
            status=Job.Status.ACTIVE,
        )
        _apply(graduate_user, tenant, job)

        props = client_for(graduate_user, tenant).get("/api/dashboard/").json()["props"]
        assert [j["id"] for j in props["jobRecommendations"]] == [other.id]
        assert props["statistics"]["total_applications"] == 1
        assert props["statistics"]["pending_applications"] == 1
        assert props["recentApplications"][0]["job_title"] == job.title

    def test_employer_sees_applications_from_institutions(
        self, client_for, graduate_user, employer_user, tenant, graduate, job
    ):
        _apply(graduate_user, tenant, job)
        props = client_for(employer_user).get("/api/dashboard/employer/").json()["props"]
        assert props["statistics"]["total_applications"] == 1
        assert props["recentApplications"][0]["institution"] == "unilag"
        assert props["jobMetrics"]["most_popular_job"]["id"] == job.id

    def test_institution_employment_stats(self, client_for, institution_admin, tenant, graduate):
        with tenant.run():
            graduate.employment_status = Graduate.EmploymentStatus.EMPLOYED
            graduate.current_salary = 45000
            graduate.save()

        props = client_for(institution_admin, tenant).get("/api/dashboard/").json()["props"]
        assert props["employmentStats"]["employment_rate"] == 100.0
        assert props["coursePerformance"][0]["employed"] == 1
        assert {"range": "$30K - $50K", "count": 1} in props["salaryRanges"]

    def test_super_admin_sees_every_institution(self, client_for, super_admin, tenant, second_tenant, graduate):
        props = client_for(super_admin).get("/api/dashboard/").json()["props"]
        by_slug = {row["slug"]: row for row in props["institutionStats"]}
        assert by_slug["unilag"]["graduates_count"] == 1
        assert by_slug["covenant"]["graduates_count"] == 0
        assert props["systemStats"]["active_institutions"] == 2
