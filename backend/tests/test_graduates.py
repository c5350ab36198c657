# tests/test_graduates.py
"""
Tests for courses, graduates and job applications.

Tests cover:
- Course and graduate management inside one institution
- Isolation of graduate data between institutions
- Applying to jobs, match scores and duplicate protection
- The employer's review pipeline and the hire side effects
- Notifications raised by applications
"""

import pytest
from datetime import timedelta

from django.core import mail
from django.utils import timezone

from accounts.models import Role
from employers.models import Employer, Job
from graduates.commands import (
    apply_to_job,
    create_course,
    create_graduate,
    update_application_status,
    update_graduate,
    withdraw_application,
)
from graduates.models import Course, Graduate, JobApplication
from notifications.models import Notification

from tests.conftest import make_actor


def _apply(graduate_user, tenant, job, cover_letter="I would love to join."):
    with tenant.run():
        return apply_to_job(make_actor(graduate_user, tenant), job, cover_letter)


# =============================================================================
# Courses
# =============================================================================

@pytest.mark.django_db
class TestCourses:

    def test_admin_creates_course(self, institution_admin, tenant):
        with tenant.run():
            result = create_course(
                make_actor(institution_admin, tenant),
                name="Economics",
                code="ECO",
                department="Social Sciences",
            )
            assert result.success, result.error
            assert Course.objects.filter(code="ECO").count() == 1
        assert result.data["course"].tenant_id == tenant.id

    def test_duplicate_code_is_rejected(self, institution_admin, tenant, course):
        with tenant.run():
            result = create_course(make_actor(institution_admin, tenant), name="CS again", code="csc")
        assert result.success is False

    def test_same_code_allowed_in_other_institution(self, institution_admin, tenant, second_tenant, course):
        admin = institution_admin
        admin.institution = second_tenant
        admin.save()
        with second_tenant.run():
            result = create_course(make_actor(admin, second_tenant), name="Computer Science", code="CSC")
        assert result.success, result.error

    def test_graduate_cannot_create_course(self, client_for, graduate_user, tenant):
        response = client_for(graduate_user, tenant).post(
            "/api/courses/",
            {"name": "Law", "code": "LAW"},
            format="json",
        )
        assert response.status_code == 403

    def test_course_list_over_api(self, client_for, institution_admin, tenant, course):
        response = client_for(institution_admin, tenant).get("/api/courses/")
        assert response.status_code == 200
        assert [c["code"] for c in response.json()] == ["CSC"]

    def test_course_with_graduates_cannot_be_deleted(self, client_for, institution_admin, tenant, graduate):
        response = client_for(institution_admin, tenant).delete(f"/api/courses/{graduate.course_id}/")
        assert response.status_code == 400

    def test_course_endpoint_needs_institution(self, client_for, institution_admin):
        response = client_for(institution_admin).get("/api/courses/")
        assert response.status_code == 400


# =============================================================================
# Graduates
# =============================================================================

@pytest.mark.django_db
class TestGraduates:

    def test_admin_creates_graduate(self, institution_admin, tenant, course):
        with tenant.run():
            result = create_graduate(
                make_actor(institution_admin, tenant),
                name="Bola Ade",
                email="bola@unilag.test",
                graduation_year=2020,
                course=course,
            )
        assert result.success, result.error
        assert result.data["graduate"].tenant_id == tenant.id

    def test_duplicate_graduate_email_rejected(self, institution_admin, tenant, graduate):
        with tenant.run():
            result = create_graduate(
                make_actor(institution_admin, tenant),
                name="Ada Clone",
                email="ADA@unilag.test",
                graduation_year=2020,
            )
        assert result.success is False

    def test_graduates_are_isolated_per_institution(self, tenant, second_tenant, graduate):
        with second_tenant.run():
            assert Graduate.objects.count() == 0
        with tenant.run():
            assert Graduate.objects.count() == 1

    def test_graduate_edits_own_profile(self, client_for, graduate_user, tenant, graduate):
        response = client_for(graduate_user, tenant).patch(
            "/api/graduates/me/",
            {"skills": ["Python", "Django", "SQL"], "phone": "+2348000000000"},
            format="json",
        )
        assert response.status_code == 200
        with tenant.run():
            graduate.refresh_from_db()
        assert "Django" in graduate.skills
        assert graduate.last_profile_update is not None

    def test_own_profile_edit_ignores_course(self, client_for, graduate_user, tenant, graduate, course):
        with tenant.run():
            other_course = Course.objects.create(
                tenant_id=tenant.id, name="Economics", code="ECO101", department="Social Sciences"
            )
        response = client_for(graduate_user, tenant).patch(
            "/api/graduates/me/",
            {"course": other_course.id, "name": "Ada L."},
            format="json",
        )
        assert response.status_code == 200
        with tenant.run():
            graduate.refresh_from_db()
        assert graduate.name == "Ada L."
        assert graduate.course_id == course.id

    def test_graduate_cannot_edit_someone_else(self, graduate_user, tenant, graduate, course):
        with tenant.run():
            other = Graduate.objects.create(
                tenant_id=tenant.id, name="Other", email="other@unilag.test", graduation_year=2021
            )
            result = update_graduate(make_actor(graduate_user, tenant), other, name="Hacked")
        assert result.success is False

    def test_graduate_list_is_admin_only(self, client_for, graduate_user, institution_admin, tenant, graduate):
        assert client_for(graduate_user, tenant).get("/api/graduates/").status_code == 403
        response = client_for(institution_admin, tenant).get("/api/graduates/?search=ada")
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_foreign_course_is_rejected(self, client_for, institution_admin, tenant, second_tenant):
        with second_tenant.run():
            foreign = Course.objects.create(tenant_id=second_tenant.id, name="Law", code="LAW")
        response = client_for(institution_admin, tenant).post(
            "/api/graduates/",
            {"name": "Kemi", "email": "kemi@unilag.test", "graduation_year": 2022, "course": foreign.id},
            format="json",
        )
        assert response.status_code == 400

    def test_profile_completion(self, graduate):
        # name, email, graduation_year, course, gpa, employment_status, skills
        assert graduate.profile_completion == 70.0

    def test_employer_search_skips_private_profiles(self, client_for, employer_user, tenant, graduate):
        client = client_for(employer_user)
        assert len(client.get("/api/graduates/search/?skill=python").json()) == 1

        with tenant.run():
            graduate.profile_visibility = Graduate.Visibility.PRIVATE
            graduate.save()
        assert client.get("/api/graduates/search/?skill=python").json() == []


# =============================================================================
# Applications
# =============================================================================

@pytest.mark.django_db
class TestApplications:

    def test_apply_records_match_score(self, graduate_user, tenant, graduate, job):
        result = _apply(graduate_user, tenant, job)
        assert result.success, result.error

        application = result.data["application"]
        # course 40 + skills 1/2 * 30 + completion 0.7 * 20 + gpa 3.6/4 * 10
        assert float(application.match_score) == 78.0
        assert application.match_factors["matching_skills"] == ["python"]
        job.refresh_from_db()
        assert job.total_applications == 1

    def test_duplicate_application_rejected(self, graduate_user, tenant, graduate, job):
        assert _apply(graduate_user, tenant, job).success
        result = _apply(graduate_user, tenant, job)
        assert result.success is False
        assert "already applied" in result.error

    def test_closed_job_rejects_applications(self, graduate_user, tenant, graduate, job):
        job.application_deadline = timezone.localdate() - timedelta(days=1)
        job.save()
        assert _apply(graduate_user, tenant, job).success is False

    def test_job_targeted_elsewhere_rejects(self, graduate_user, tenant, second_tenant, graduate, job):
        job.tenant_id = second_tenant.id
        job.save()
        result = _apply(graduate_user, tenant, job)
        assert result.success is False
        assert "not open to your institution" in result.error

    def test_apply_over_api(self, client_for, graduate_user, tenant, graduate, job):
        response = client_for(graduate_user, tenant).post(
            f"/api/jobs/{job.id}/apply/",
            {"cover_letter": "Hello"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["status"] == JobApplication.Status.PENDING

    def test_employer_cannot_apply(self, client_for, employer_user, tenant, job):
        response = client_for(employer_user, tenant).post(
            f"/api/jobs/{job.id}/apply/",
            {"cover_letter": "Hello"},
            format="json",
        )
        assert response.status_code == 403

    def test_hire_updates_graduate_and_employer(self, graduate_user, employer_user, tenant, graduate, employer, job):
        application = _apply(graduate_user, tenant, job).data["application"]

        with tenant.run():
            result = update_application_status(
                make_actor(employer_user, tenant), application, JobApplication.Status.HIRED, notes="Great fit"
            )
            assert result.success, result.error
            graduate.refresh_from_db()

        assert application.hired_at is not None
        assert graduate.employment_status == Graduate.EmploymentStatus.EMPLOYED
        assert graduate.current_company == "Acme Ltd"
        employer.refresh_from_db()
        assert employer.total_hires == 1

    def test_final_status_is_locked(self, graduate_user, employer_user, tenant, graduate, job):
        application = _apply(graduate_user, tenant, job).data["application"]
        actor = make_actor(employer_user, tenant)
        with tenant.run():
            assert update_application_status(actor, application, JobApplication.Status.REJECTED).success
            result = update_application_status(actor, application, JobApplication.Status.SHORTLISTED)
        assert result.success is False

    def test_other_employer_cannot_review(self, graduate_user, tenant, graduate, job):
        from accounts.commands import register_user

        rival = register_user(
            email="hr@rival.test", password="testpass123", name="Rival", role=Role.EMPLOYER,
            profile={"company_name": "Rival"},
        ).data["user"]
        application = _apply(graduate_user, tenant, job).data["application"]
        with tenant.run():
            result = update_application_status(
                make_actor(rival, tenant), application, JobApplication.Status.REVIEWED
            )
        assert result.success is False

    def test_withdraw(self, graduate_user, tenant, graduate, job):
        application = _apply(graduate_user, tenant, job).data["application"]
        with tenant.run():
            result = withdraw_application(make_actor(graduate_user, tenant), application)
            assert result.success
            assert withdraw_application(make_actor(graduate_user, tenant), application).success is False

    def test_employer_sees_applications_across_institutions(
        self, client_for, graduate_user, employer_user, tenant, graduate, job
    ):
        _apply(graduate_user, tenant, job)
        response = client_for(employer_user).get(f"/api/jobs/{job.id}/applications/")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["results"][0]["institution"] == "unilag"

    def test_my_applications_stats(self, client_for, graduate_user, tenant, graduate, job):
        _apply(graduate_user, tenant, job)
        response = client_for(graduate_user, tenant).get("/api/applications/mine/")
        assert response.status_code == 200
        assert response.json()["stats"]["total"] == 1
        assert response.json()["stats"]["pending"] == 1


# =============================================================================
# Notifications
# =============================================================================

@pytest.mark.django_db
class TestApplicationNotifications:

    def test_employer_notified_after_commit(
        self, graduate_user, employer_user, tenant, graduate, job, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            assert _apply(graduate_user, tenant, job).success

        assert len(callbacks) == 1
        notification = Notification.objects.get(user=employer_user)
        assert notification.notification_type == Notification.Type.APPLICATION_RECEIVED
        assert notification.data["tenant_slug"] == "unilag"
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["hr@acme.test"]

    def test_notification_task_is_idempotent(self, graduate_user, employer_user, tenant, graduate, job):
        from notifications.tasks import notify_employer_of_application

        application = _apply(graduate_user, tenant, job).data["application"]
        first = notify_employer_of_application.apply(args=(application.id, tenant.id)).get()
        second = notify_employer_of_application.apply(args=(application.id, tenant.id)).get()
        assert first["notification_id"] == second["notification_id"]
        assert Notification.objects.filter(user=employer_user).count() == 1

    def test_status_change_notifies_graduate(
        self, graduate_user, employer_user, tenant, graduate, job, django_capture_on_commit_callbacks
    ):
        application = _apply(graduate_user, tenant, job).data["application"]
        with django_capture_on_commit_callbacks(execute=True):
            with tenant.run():
                update_application_status(
                    make_actor(employer_user, tenant), application, JobApplication.Status.SHORTLISTED
                )

        notification = Notification.objects.get(user=graduate_user)
        assert notification.data["status"] == JobApplication.Status.SHORTLISTED

    def test_inbox_endpoints(self, client_for, employer_user):
        Notification.objects.create(user=employer_user, title="One")
        second = Notification.objects.create(user=employer_user, title="Two")
        client = client_for(employer_user)

        assert client.get("/api/notifications/unread-count/").json() == {"unread": 2}
        assert client.post(f"/api/notifications/{second.id}/read/").status_code == 200
        assert client.get("/api/notifications/?unread=1").json()[0]["title"] == "One"
        assert client.post("/api/notifications/read-all/").json() == {"updated": 1}

    def test_cannot_read_someone_elses_notification(self, client_for, employer_user, graduate_user):
        notification = Notification.objects.create(user=graduate_user, title="Private")
        response = client_for(employer_user).post(f"/api/notifications/{notification.id}/read/")
        assert response.status_code == 404
