# tests/test_employers.py
"""
Tests for employers and job postings.

Tests cover:
- Posting jobs as verified and unverified employers
- The job lifecycle (approve, reject, pause, resume, fill, extend)
- Deadline expiry
- Employer verification
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from employers.commands import (
    create_job,
    delete_job,
    expire_overdue_jobs,
    transition_job,
    update_employer_profile,
    verify_employer,
)
from employers.models import Employer, Job
from employers.tasks import expire_jobs

from tests.conftest import make_actor


def _post(user, **fields):
    fields.setdefault("title", "Data Analyst")
    fields.setdefault("description", "Crunch numbers.")
    return create_job(make_actor(user), **fields)


# =============================================================================
# Posting
# =============================================================================

@pytest.mark.django_db
class TestJobPosting:

    def test_verified_employer_goes_live(self, employer_user, employer):
        result = _post(employer_user)
        assert result.success, result.error
        assert result.data["job"].status == Job.Status.ACTIVE
        employer.refresh_from_db()
        assert employer.active_jobs_count == 1

    def test_unverified_employer_needs_approval(self, employer_user):
        result = _post(employer_user)
        assert result.data["job"].status == Job.Status.PENDING_APPROVAL

    def test_rejected_employer_cannot_post(self, employer_user):
        Employer.objects.filter(user=employer_user).update(
            verification_status=Employer.VerificationStatus.REJECTED
        )
        assert _post(employer_user).success is False

    def test_post_limit(self, employer_user, employer):
        employer.job_post_limit = 1
        employer.save()
        assert _post(employer_user).success
        result = _post(employer_user, title="Another")
        assert result.success is False
        assert "limit" in result.error

    def test_pending_postings_count_towards_limit(self, employer_user):
        Employer.objects.filter(user=employer_user).update(job_post_limit=1)
        assert _post(employer_user).data["job"].status == Job.Status.PENDING_APPROVAL

        result = _post(employer_user, title="Another")
        assert result.success is False
        assert "limit" in result.error
        assert Employer.objects.get(user=employer_user).remaining_job_posts == 0

    def test_salary_range_validated(self, employer_user, employer):
        result = _post(employer_user, salary_min=Decimal("5000"), salary_max=Decimal("1000"))
        assert result.success is False

    def test_graduate_cannot_post(self, client_for, graduate_user):
        response = client_for(graduate_user).post(
            "/api/jobs/", {"title": "X", "description": "Y"}, format="json"
        )
        assert response.status_code == 403

    def test_deadline_in_past_rejected(self, client_for, employer_user, employer):
        response = client_for(employer_user).post(
            "/api/jobs/",
            {
                "title": "Late",
                "description": "Too late.",
                "application_deadline": (timezone.localdate() - timedelta(days=1)).isoformat(),
            },
            format="json",
        )
        assert response.status_code == 400

    def test_job_with_applications_cannot_be_deleted(self, employer_user, job):
        job.total_applications = 1
        job.save()
        assert delete_job(make_actor(employer_user), job).success is False


# =============================================================================
# Listing
# =============================================================================

@pytest.mark.django_db
class TestJobListing:

    def test_graduate_sees_open_jobs_for_institution(self, client_for, graduate_user, tenant, second_tenant, job, employer):
        Job.objects.create(
            employer=employer, title="Covenant only", description="-", status=Job.Status.ACTIVE,
            tenant=second_tenant,
        )
        Job.objects.create(employer=employer, title="Paused", description="-", status=Job.Status.PAUSED)

        response = client_for(graduate_user, tenant).get("/api/jobs/")
        assert response.status_code == 200
        assert [j["title"] for j in response.json()] == ["Junior Backend Engineer"]

    def test_employer_sees_own_postings(self, client_for, employer_user, job):
        job.status = Job.Status.PAUSED
        job.save()
        response = client_for(employer_user).get("/api/jobs/?mine=1")
        assert [j["id"] for j in response.json()] == [job.id]

    def test_viewing_counts_for_non_owner(self, client_for, graduate_user, tenant, job):
        client_for(graduate_user, tenant).get(f"/api/jobs/{job.id}/")
        job.refresh_from_db()
        assert job.view_count == 1


# =============================================================================
# Lifecycle
# =============================================================================

@pytest.mark.django_db
class TestJobLifecycle:

    def test_super_admin_approves(self, super_admin, employer_user):
        job = _post(employer_user).data["job"]
        result = transition_job(make_actor(super_admin), job, "approve")
        assert result.success, result.error
        assert job.status == Job.Status.ACTIVE
        assert job.approved_by == super_admin

    def test_employer_cannot_approve_own_job(self, client_for, employer_user):
        job = _post(employer_user).data["job"]
        response = client_for(employer_user).post(f"/api/jobs/{job.id}/approve/")
        assert response.status_code == 403

    def test_reject_needs_reason(self, super_admin, employer_user):
        job = _post(employer_user).data["job"]
        assert transition_job(make_actor(super_admin), job, "reject").success is False
        assert transition_job(make_actor(super_admin), job, "reject", reason="Spam").success
        assert job.status == Job.Status.CANCELLED

    def test_pause_and_resume(self, employer_user, job):
        actor = make_actor(employer_user)
        assert transition_job(actor, job, "pause").success
        assert job.status == Job.Status.PAUSED
        assert transition_job(actor, job, "pause").success is False
        assert transition_job(actor, job, "resume").success
        assert job.status == Job.Status.ACTIVE

    def test_approval_respects_post_limit(self, super_admin, employer_user, employer):
        pending = Job.objects.create(
            employer=employer, title="Queued", description="-", status=Job.Status.PENDING_APPROVAL
        )
        Job.objects.create(employer=employer, title="Live", description="-", status=Job.Status.ACTIVE)
        employer.job_post_limit = 1
        employer.save()

        result = transition_job(make_actor(super_admin), pending, "approve")
        assert result.success is False
        assert "limit" in result.error
        pending.refresh_from_db()
        assert pending.status == Job.Status.PENDING_APPROVAL

    def test_resume_respects_post_limit(self, employer_user, employer, job):
        actor = make_actor(employer_user)
        assert transition_job(actor, job, "pause").success
        employer.job_post_limit = 1
        employer.save()
        assert _post(employer_user, title="Replacement").success

        result = transition_job(actor, job, "resume")
        assert result.success is False
        assert "limit" in result.error
        job.refresh_from_db()
        assert job.status == Job.Status.PAUSED

    def test_extend_reopens_expired_job(self, employer_user, job):
        job.status = Job.Status.EXPIRED
        job.application_deadline = timezone.localdate() - timedelta(days=3)
        job.save()

        result = transition_job(make_actor(employer_user), job, "extend", days=10)
        assert result.success, result.error
        assert job.status == Job.Status.ACTIVE
        assert job.application_deadline == timezone.localdate() + timedelta(days=10)

    def test_extend_bounds(self, employer_user, job):
        assert transition_job(make_actor(employer_user), job, "extend", days=400).success is False

    def test_fill_over_api(self, client_for, employer_user, job):
        response = client_for(employer_user).post(f"/api/jobs/{job.id}/fill/")
        assert response.status_code == 200
        assert response.json()["status"] == Job.Status.FILLED

    def test_filled_job_cannot_be_edited(self, client_for, employer_user, job):
        job.status = Job.Status.FILLED
        job.save()
        response = client_for(employer_user).patch(f"/api/jobs/{job.id}/", {"title": "New"}, format="json")
        assert response.status_code == 400


# =============================================================================
# Expiry
# =============================================================================

@pytest.mark.django_db
class TestJobExpiry:

    def test_overdue_jobs_expire(self, job, employer):
        job.application_deadline = timezone.localdate() - timedelta(days=1)
        job.save()
        employer.update_job_stats()

        assert expire_overdue_jobs() == 1
        job.refresh_from_db()
        employer.refresh_from_db()
        assert job.status == Job.Status.EXPIRED
        assert employer.active_jobs_count == 0

    def test_jobs_without_deadline_stay_open(self, job):
        job.application_deadline = None
        job.save()
        assert expire_overdue_jobs() == 0

    def test_periodic_task(self, job):
        job.application_deadline = timezone.localdate() - timedelta(days=1)
        job.save()
        assert expire_jobs.apply().get() == {"expired": 1}


# =============================================================================
# Verification
# =============================================================================

@pytest.mark.django_db
class TestEmployerVerification:

    def test_super_admin_verifies(self, super_admin, employer_user):
        employer = Employer.objects.get(user=employer_user)
        result = verify_employer(make_actor(super_admin), employer, Employer.VerificationStatus.VERIFIED)
        assert result.success
        assert employer.is_verified
        assert employer.verified_by == super_admin

    def test_rejection_needs_reason(self, super_admin, employer_user):
        employer = Employer.objects.get(user=employer_user)
        assert verify_employer(make_actor(super_admin), employer, "rejected").success is False

    def test_verify_over_api(self, client_for, super_admin, employer_user):
        employer = Employer.objects.get(user=employer_user)
        response = client_for(super_admin).post(
            f"/api/employers/{employer.id}/verify/",
            {"decision": "under_review"},
            format="json",
        )
        assert response.status_code == 200
        employer.refresh_from_db()
        assert employer.verification_status == Employer.VerificationStatus.UNDER_REVIEW

    def test_employer_cannot_verify_itself(self, client_for, employer_user):
        employer = Employer.objects.get(user=employer_user)
        response = client_for(employer_user).post(
            f"/api/employers/{employer.id}/verify/", {"decision": "verified"}, format="json"
        )
        assert response.status_code == 403

    def test_profile_update(self, employer_user, employer):
        assert update_employer_profile(make_actor(employer_user), employer, industry="Fintech").success
        employer.refresh_from_db()
        assert employer.industry == "Fintech"
