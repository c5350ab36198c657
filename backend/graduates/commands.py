"""
Command layer for graduates, courses and job applications.

Everything here runs inside a tenant context: Graduate, Course and
JobApplication rows live in the institution's database. Jobs and
employers live in the system database and are only referenced by id.
"""
import logging

from django.db import transaction
from django.db.models import Avg, Count, F, Q
from django.utils import timezone

from accounts.authz import ActorContext, require, require_tenant
from accounts.commands import CommandResult
from employers.models import Employer, Job
from graduates.models import Course, Graduate, JobApplication
from tenant.context import get_current_db_alias

logger = logging.getLogger(__name__)


# =============================================================================
# Courses
# =============================================================================

def create_course(actor: ActorContext, **fields) -> CommandResult:
    require(actor, "courses.manage")
    tenant = require_tenant(actor)

    code = fields.get("code", "").strip()
    if Course.objects.filter(code__iexact=code).exists():
        return CommandResult.fail(f"Course code '{code}' already exists.")

    course = Course.objects.create(tenant_id=tenant.id, **fields)
    logger.info(f"Course {course.code} created in tenant {tenant.slug}")
    return CommandResult.ok(data={"course": course})


def update_course(actor: ActorContext, course: Course, **changes) -> CommandResult:
    require(actor, "courses.manage")
    require_tenant(actor)

    code = changes.get("code")
    if code and Course.objects.filter(code__iexact=code).exclude(pk=course.pk).exists():
        return CommandResult.fail(f"Course code '{code}' already exists.")

    for key, value in changes.items():
        setattr(course, key, value)
    course.save()
    return CommandResult.ok(data={"course": course})


def delete_course(actor: ActorContext, course: Course) -> CommandResult:
    require(actor, "courses.manage")
    require_tenant(actor)

    if course.graduates.exists():
        return CommandResult.fail("Courses with graduates cannot be deleted; deactivate the course instead.")

    course.delete()
    return CommandResult.ok()


# =============================================================================
# Graduates
# =============================================================================

def _check_email_free(email: str, exclude_pk=None) -> str | None:
    qs = Graduate.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        return f"A graduate with email {email} already exists."
    return None


def create_graduate(actor: ActorContext, **fields) -> CommandResult:
    require(actor, "graduates.manage")
    tenant = require_tenant(actor)

    error = _check_email_free(fields.get("email", ""))
    if error:
        return CommandResult.fail(error)

    graduate = Graduate(tenant_id=tenant.id, last_profile_update=timezone.now(), **fields)
    graduate.save()
    logger.info(f"Graduate {graduate.id} created in tenant {tenant.slug}")
    return CommandResult.ok(data={"graduate": graduate})


def update_graduate(actor: ActorContext, graduate: Graduate, **changes) -> CommandResult:
    """
    Update a graduate record.

    Institution admins may edit any graduate of their institution;
    a graduate may only edit their own profile.
    """
    require_tenant(actor)
    if not actor.has("graduates.manage"):
        require(actor, "profile.manage_own")
        if graduate.user_id != actor.user.id:
            return CommandResult.fail("You can only edit your own profile.")

    if "email" in changes:
        error = _check_email_free(changes["email"], exclude_pk=graduate.pk)
        if error:
            return CommandResult.fail(error)

    for key, value in changes.items():
        setattr(graduate, key, value)
    graduate.last_profile_update = timezone.now()
    graduate.save()
    return CommandResult.ok(data={"graduate": graduate})


def delete_graduate(actor: ActorContext, graduate: Graduate) -> CommandResult:
    require(actor, "graduates.manage")
    require_tenant(actor)

    graduate_id = graduate.id
    graduate.delete()
    logger.info(f"Graduate {graduate_id} deleted by {actor.user.email}")
    return CommandResult.ok()


def graduate_for_user(user) -> Graduate | None:
    """The current tenant's graduate profile for a user, if any."""
    return Graduate.objects.select_related("course").filter(user_id=user.id).first()


# =============================================================================
# Applications
# =============================================================================

def apply_to_job(actor: ActorContext, job: Job, cover_letter: str) -> CommandResult:
    """
    Submit the actor's application for a job.

    The employer is notified after the transaction commits; delivery runs
    in a Celery task and never affects this command's outcome.
    """
    require(actor, "applications.create")
    tenant = require_tenant(actor)

    graduate = graduate_for_user(actor.user)
    if graduate is None:
        return CommandResult.fail("Graduate profile not found.", not_found=True)

    if not job.is_open:
        return CommandResult.fail("This job is no longer accepting applications.")
    if job.tenant_id is not None and job.tenant_id != tenant.id:
        return CommandResult.fail("This job is not open to your institution.")

    if JobApplication.objects.filter(job_id=job.id, graduate=graduate).exists():
        return CommandResult.fail("You have already applied for this job.")

    match = job.calculate_match_score(graduate)

    with transaction.atomic(using=get_current_db_alias()):
        application = JobApplication.objects.create(
            tenant_id=tenant.id,
            job_id=job.id,
            graduate=graduate,
            cover_letter=cover_letter,
            status=JobApplication.Status.PENDING,
            application_source="web",
            match_score=match["score"],
            match_factors=match["factors"],
        )
        transaction.on_commit(
            lambda: _dispatch("notify_employer_of_application", application.id, tenant.id),
            using=get_current_db_alias(),
        )

    Job.objects.filter(pk=job.pk).update(total_applications=F("total_applications") + 1)

    logger.info(f"Graduate {graduate.id} applied to job {job.id} (match {match['score']})")
    return CommandResult.ok(data={"application": application})


def _dispatch(task_name: str, application_id: int, tenant_id: int) -> None:
    from notifications import tasks

    try:
        getattr(tasks, task_name).delay(application_id, tenant_id)
    except Exception as exc:
        # Broker unavailable: the application stands without a notification
        logger.error(f"Could not enqueue notification for application {application_id}: {exc}")


def update_application_status(
    actor: ActorContext,
    application: JobApplication,
    status: str,
    notes: str = "",
) -> CommandResult:
    """
    Move an application through the hiring pipeline.

    Only the employer that owns the job (or a super-admin) may do this.
    """
    require(actor, "applications.review")

    if status not in JobApplication.Status.values:
        return CommandResult.fail(f"Invalid status: {status}")

    job = Job.objects.select_related("employer").filter(pk=application.job_id).first()
    if job is None:
        return CommandResult.fail("Job not found.", not_found=True)
    if not actor.is_super_admin and job.employer.user_id != actor.user.id:
        return CommandResult.fail("You can only review applications for your own jobs.")
    if application.is_final and application.status != status:
        return CommandResult.fail(f"Application is already {application.status}.")

    now = timezone.now()
    application.status = status
    application.status_changed_at = now
    application.status_changed_by_id = actor.user.id
    if notes:
        application.employer_notes = notes
    fields = ["status", "status_changed_at", "status_changed_by_id", "employer_notes", "updated_at"]

    if status == JobApplication.Status.HIRED and application.hired_at is None:
        application.hired_at = now
        fields.append("hired_at")
        Employer.objects.filter(pk=job.employer_id).update(total_hires=F("total_hires") + 1)

        graduate = application.graduate
        graduate.employment_status = Graduate.EmploymentStatus.EMPLOYED
        graduate.current_job_title = job.title
        graduate.current_company = job.employer.company_name
        graduate.employment_start_date = timezone.localdate()
        graduate.save(update_fields=[
            "employment_status", "current_job_title", "current_company",
            "employment_start_date", "updated_at",
        ])

    application.save(update_fields=fields)
    transaction.on_commit(
        lambda: _dispatch("notify_graduate_of_status_change", application.id, application.tenant_id),
        using=get_current_db_alias(),
    )
    logger.info(f"Application {application.id} -> {status} by {actor.user.email}")
    return CommandResult.ok(data={"application": application})


def withdraw_application(actor: ActorContext, application: JobApplication) -> CommandResult:
    require(actor, "applications.view_own")

    if application.graduate.user_id != actor.user.id:
        return CommandResult.fail("You can only withdraw your own applications.")
    if application.is_final:
        return CommandResult.fail(f"Application is already {application.status}.")

    application.status = JobApplication.Status.WITHDRAWN
    application.status_changed_at = timezone.now()
    application.status_changed_by_id = actor.user.id
    application.save(update_fields=["status", "status_changed_at", "status_changed_by_id", "updated_at"])
    return CommandResult.ok(data={"application": application})


def application_stats(queryset) -> dict:
    """Counts per pipeline stage plus the average match score."""
    S = JobApplication.Status
    stats = queryset.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=S.PENDING)),
        reviewed=Count("id", filter=Q(status=S.REVIEWED)),
        shortlisted=Count("id", filter=Q(status=S.SHORTLISTED)),
        interviewed=Count("id", filter=Q(status__in=[S.INTERVIEW_SCHEDULED, S.INTERVIEWED])),
        hired=Count("id", filter=Q(status=S.HIRED)),
        rejected=Count("id", filter=Q(status=S.REJECTED)),
        flagged=Count("id", filter=Q(is_flagged=True)),
        avg_match_score=Avg("match_score"),
    )
    avg = stats["avg_match_score"]
    stats["avg_match_score"] = round(float(avg), 2) if avg is not None else 0.0
    return stats
