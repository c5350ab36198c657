"""
Command layer for employers and job postings.

Views never change job status directly; every transition goes through a
command so ownership and state rules are checked in one place.
"""
import logging

from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from employers.models import Employer, Job

logger = logging.getLogger(__name__)


def _owned_employer(actor: ActorContext) -> Employer | None:
    return Employer.objects.filter(user=actor.user).first()


def _check_owner(actor: ActorContext, job: Job) -> str | None:
    if actor.is_super_admin:
        return None
    if job.employer.user_id != actor.user.id:
        return "You can only manage your own job postings."
    return None


# =============================================================================
# Jobs
# =============================================================================

@transaction.atomic
def create_job(actor: ActorContext, **fields) -> CommandResult:
    """
    Post a job for the actor's employer profile.

    Unverified employers (or postings flagged requires_approval) start in
    pending_approval; verified employers go live immediately.
    """
    require(actor, "jobs.manage_own")

    employer = _owned_employer(actor)
    if employer is None:
        return CommandResult.fail("Create an employer profile before posting jobs.")
    if employer.verification_status == Employer.VerificationStatus.REJECTED:
        return CommandResult.fail("Rejected employers cannot post jobs.")
    if not employer.can_post_jobs():
        return CommandResult.fail(
            f"Job post limit reached ({employer.job_post_limit} active or pending jobs)."
        )

    salary_min = fields.get("salary_min")
    salary_max = fields.get("salary_max")
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        return CommandResult.fail("salary_min cannot exceed salary_max.")

    needs_approval = fields.get("requires_approval", False) or not employer.is_verified
    job = Job.objects.create(
        employer=employer,
        status=Job.Status.PENDING_APPROVAL if needs_approval else Job.Status.ACTIVE,
        **fields,
    )
    employer.update_job_stats()

    logger.info(f"Job {job.id} posted by {employer.company_name} ({job.status})")
    return CommandResult.ok(data={"job": job})


def update_job(actor: ActorContext, job: Job, **changes) -> CommandResult:
    require(actor, "jobs.manage_own")
    error = _check_owner(actor, job)
    if error:
        return CommandResult.fail(error)

    if job.status in (Job.Status.FILLED, Job.Status.CANCELLED):
        return CommandResult.fail(f"A {job.status} job cannot be edited.")

    salary_min = changes.get("salary_min", job.salary_min)
    salary_max = changes.get("salary_max", job.salary_max)
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        return CommandResult.fail("salary_min cannot exceed salary_max.")

    for key, value in changes.items():
        setattr(job, key, value)
    job.save()
    return CommandResult.ok(data={"job": job})


def delete_job(actor: ActorContext, job: Job) -> CommandResult:
    require(actor, "jobs.manage_own")
    error = _check_owner(actor, job)
    if error:
        return CommandResult.fail(error)
    if job.total_applications:
        return CommandResult.fail("Jobs with applications cannot be deleted; cancel or mark filled instead.")

    employer = job.employer
    job.delete()
    employer.update_job_stats()
    return CommandResult.ok()


# Allowed source states per transition
_TRANSITIONS = {
    "approve": (Job.Status.PENDING_APPROVAL,),
    "reject": (Job.Status.PENDING_APPROVAL,),
    "pause": (Job.Status.ACTIVE,),
    "resume": (Job.Status.PAUSED,),
    "fill": (Job.Status.ACTIVE, Job.Status.PAUSED, Job.Status.EXPIRED),
    "extend": (Job.Status.ACTIVE, Job.Status.PAUSED, Job.Status.EXPIRED),
}


@transaction.atomic
def transition_job(actor: ActorContext, job: Job, action: str, reason: str = "", days: int = 30) -> CommandResult:
    """
    Apply a lifecycle action to a job.

    approve / reject: super-admin (jobs.approve)
    pause / resume / fill / extend: owning employer
    """
    if action not in _TRANSITIONS:
        return CommandResult.fail(f"Unknown action: {action}")

    if action in ("approve", "reject"):
        require(actor, "jobs.approve")
    else:
        require(actor, "jobs.manage_own")
        error = _check_owner(actor, job)
        if error:
            return CommandResult.fail(error)

    if job.status not in _TRANSITIONS[action]:
        return CommandResult.fail(f"Cannot {action} a job that is {job.status}.")

    goes_live = action in ("approve", "resume") or (action == "extend" and job.status == Job.Status.EXPIRED)
    if goes_live:
        employer = job.employer
        live = employer.jobs.filter(status=Job.Status.ACTIVE).exclude(pk=job.pk).count()
        if live >= employer.job_post_limit:
            return CommandResult.fail(f"Job post limit reached ({employer.job_post_limit} active jobs).")

    if action == "approve":
        job.approve(actor.user)
    elif action == "reject":
        if not reason:
            return CommandResult.fail("A rejection reason is required.")
        job.reject(reason)
    elif action == "pause":
        job.pause()
    elif action == "resume":
        if job.is_expired:
            return CommandResult.fail("Extend the deadline before resuming an expired job.")
        job.resume()
    elif action == "fill":
        job.mark_as_filled()
    elif action == "extend":
        if days < 1 or days > 365:
            return CommandResult.fail("Extension must be between 1 and 365 days.")
        job.extend_deadline(days)

    job.employer.update_job_stats()
    logger.info(f"Job {job.id} {action} by {actor.user.email} -> {job.status}")
    return CommandResult.ok(data={"job": job})


def expire_overdue_jobs() -> int:
    """Mark every active job past its deadline as expired."""
    today = timezone.localdate()
    overdue = Job.objects.filter(status=Job.Status.ACTIVE, application_deadline__lt=today)
    employer_ids = set(overdue.values_list("employer_id", flat=True))
    count = overdue.update(status=Job.Status.EXPIRED, updated_at=timezone.now())

    for employer in Employer.objects.filter(id__in=employer_ids):
        employer.update_job_stats()

    if count:
        logger.info(f"Expired {count} overdue jobs")
    return count


# =============================================================================
# Employer verification
# =============================================================================

def verify_employer(actor: ActorContext, employer: Employer, decision: str, reason: str = "") -> CommandResult:
    """
    Record the verification decision for an employer.

    decision: "verified", "rejected" or "under_review"
    """
    require(actor, "employers.verify")

    allowed = (
        Employer.VerificationStatus.VERIFIED,
        Employer.VerificationStatus.REJECTED,
        Employer.VerificationStatus.UNDER_REVIEW,
    )
    if decision not in allowed:
        return CommandResult.fail(f"Invalid decision: {decision}")
    if decision == Employer.VerificationStatus.REJECTED and not reason:
        return CommandResult.fail("A rejection reason is required.")

    employer.verification_status = decision
    employer.rejection_reason = reason if decision == Employer.VerificationStatus.REJECTED else ""
    if decision == Employer.VerificationStatus.VERIFIED:
        employer.verified_at = timezone.now()
        employer.verified_by = actor.user
    employer.save()

    logger.info(f"Employer {employer.company_name} -> {decision} by {actor.user.email}")
    return CommandResult.ok(data={"employer": employer})


def update_employer_profile(actor: ActorContext, employer: Employer, **changes) -> CommandResult:
    require(actor, "employer_profile.manage")
    if not actor.is_super_admin and employer.user_id != actor.user.id:
        return CommandResult.fail("You can only edit your own company profile.")

    for key, value in changes.items():
        setattr(employer, key, value)
    employer.save()
    return CommandResult.ok(data={"employer": employer})
