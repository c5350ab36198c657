"""
Employers and their job postings.

These live in the SYSTEM database: an employer recruits across
institutions, and a Job may optionally target one institution.
"""
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import models
from django.utils import timezone


class Employer(models.Model):
    class CompanySize(models.TextChoices):
        STARTUP = "startup", "Startup (1-10)"
        SMALL = "small", "Small (11-50)"
        MEDIUM = "medium", "Medium (51-200)"
        LARGE = "large", "Large (201-1000)"
        ENTERPRISE = "enterprise", "Enterprise (1000+)"

    class VerificationStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        UNDER_REVIEW = "under_review", "Under Review"
        VERIFIED = "verified", "Verified"
        REJECTED = "rejected", "Rejected"

    class SubscriptionPlan(models.TextChoices):
        FREE = "free", "Free"
        BASIC = "basic", "Basic"
        PREMIUM = "premium", "Premium"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="employer",
    )

    company_name = models.CharField(max_length=255)
    industry = models.CharField(max_length=100, blank=True, default="")
    company_size = models.CharField(max_length=20, choices=CompanySize.choices, default=CompanySize.SMALL)
    website = models.URLField(blank=True, default="")
    description = models.TextField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    contact_person_name = models.CharField(max_length=255, blank=True, default="")
    contact_email = models.EmailField(blank=True, default="")
    contact_phone = models.CharField(max_length=30, blank=True, default="")

    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    rejection_reason = models.TextField(blank=True, default="")

    subscription_plan = models.CharField(
        max_length=20,
        choices=SubscriptionPlan.choices,
        default=SubscriptionPlan.FREE,
    )
    job_post_limit = models.PositiveIntegerField(default=5)

    # Denormalized counters, refreshed by update_job_stats()
    total_jobs_posted = models.PositiveIntegerField(default=0)
    active_jobs_count = models.PositiveIntegerField(default=0)
    total_hires = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["company_name"]
        indexes = [
            models.Index(fields=["verification_status"], name="employer_verification_idx"),
        ]

    def __str__(self):
        return self.company_name

    @property
    def is_verified(self) -> bool:
        return self.verification_status == self.VerificationStatus.VERIFIED

    @property
    def open_postings_count(self) -> int:
        """Live jobs plus postings still waiting for approval."""
        return self.jobs.filter(status__in=(Job.Status.ACTIVE, Job.Status.PENDING_APPROVAL)).count()

    @property
    def remaining_job_posts(self) -> int:
        return max(self.job_post_limit - self.open_postings_count, 0)

    def can_post_jobs(self) -> bool:
        return self.remaining_job_posts > 0

    def update_job_stats(self) -> None:
        self.total_jobs_posted = self.jobs.count()
        self.active_jobs_count = self.jobs.filter(status=Job.Status.ACTIVE).count()
        self.save(update_fields=["total_jobs_posted", "active_jobs_count", "updated_at"])


class JobQuerySet(models.QuerySet):
    def open(self):
        """Active and not past the application deadline."""
        today = timezone.localdate()
        return self.filter(status=Job.Status.ACTIVE).filter(
            models.Q(application_deadline__isnull=True) | models.Q(application_deadline__gte=today)
        )

    def for_tenant(self, tenant_id):
        """Jobs open to every institution or targeted at this one."""
        return self.filter(models.Q(tenant_id__isnull=True) | models.Q(tenant_id=tenant_id))


class Job(models.Model):
    class Status(models.TextChoices):
        PENDING_APPROVAL = "pending_approval", "Pending Approval"
        ACTIVE = "active", "Active"
        PAUSED = "paused", "Paused"
        FILLED = "filled", "Filled"
        CANCELLED = "cancelled", "Cancelled"
        EXPIRED = "expired", "Expired"

    class JobType(models.TextChoices):
        FULL_TIME = "full_time", "Full Time"
        PART_TIME = "part_time", "Part Time"
        CONTRACT = "contract", "Contract"
        INTERNSHIP = "internship", "Internship"
        TEMPORARY = "temporary", "Temporary"

    class WorkArrangement(models.TextChoices):
        ON_SITE = "on_site", "On Site"
        REMOTE = "remote", "Remote"
        HYBRID = "hybrid", "Hybrid"

    class ExperienceLevel(models.TextChoices):
        ENTRY = "entry", "Entry Level"
        JUNIOR = "junior", "Junior"
        MID = "mid", "Mid Level"
        SENIOR = "senior", "Senior"
        EXECUTIVE = "executive", "Executive"

    class SalaryType(models.TextChoices):
        HOURLY = "hourly", "Hourly"
        MONTHLY = "monthly", "Monthly"
        ANNUAL = "annual", "Annual"

    employer = models.ForeignKey(Employer, on_delete=models.CASCADE, related_name="jobs")
    tenant = models.ForeignKey(
        "tenant.Tenant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="jobs",
        help_text="Restrict the posting to one institution; empty means open to all.",
    )

    title = models.CharField(max_length=255)
    description = models.TextField()
    location = models.CharField(max_length=255, blank=True, default="")
    target_programs = models.JSONField(default=list, blank=True)
    required_skills = models.JSONField(default=list, blank=True)
    preferred_qualifications = models.JSONField(default=list, blank=True)
    experience_level = models.CharField(max_length=20, choices=ExperienceLevel.choices, default=ExperienceLevel.ENTRY)
    min_experience_years = models.PositiveSmallIntegerField(default=0)

    salary_min = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    salary_max = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    salary_type = models.CharField(max_length=20, choices=SalaryType.choices, default=SalaryType.ANNUAL)
    salary_negotiable = models.BooleanField(default=False)

    job_type = models.CharField(max_length=20, choices=JobType.choices, default=JobType.FULL_TIME)
    work_arrangement = models.CharField(max_length=20, choices=WorkArrangement.choices, default=WorkArrangement.ON_SITE)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_APPROVAL)
    requires_approval = models.BooleanField(default=False)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    rejection_reason = models.TextField(blank=True, default="")

    application_deadline = models.DateField(null=True, blank=True)
    view_count = models.PositiveIntegerField(default=0)
    total_applications = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = JobQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "application_deadline"], name="job_status_deadline_idx"),
        ]

    def __str__(self):
        return f"{self.title} @ {self.employer.company_name}"

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def is_expired(self) -> bool:
        return bool(self.application_deadline and self.application_deadline < timezone.localdate())

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.ACTIVE and not self.is_expired

    @property
    def days_until_deadline(self) -> int | None:
        if not self.application_deadline:
            return None
        return (self.application_deadline - timezone.localdate()).days

    @property
    def salary_range(self) -> str:
        if self.salary_min is None and self.salary_max is None:
            return "Negotiable"
        if self.salary_min is not None and self.salary_max is not None:
            return f"{_money(self.salary_min)} - {_money(self.salary_max)}"
        if self.salary_min is not None:
            return f"From {_money(self.salary_min)}"
        return f"Up to {_money(self.salary_max)}"

    @property
    def application_rate(self) -> float:
        """Applications per view, as a percentage."""
        if not self.view_count:
            return 0.0
        return round(self.total_applications / self.view_count * 100, 2)

    def calculate_match_score(self, graduate) -> dict:
        """
        Score how well a graduate fits this job (0-100).

        Weights: course match 40, skill overlap 30, profile completion 20, GPA 10.
        """
        factors = {}

        programs = {str(p).strip().lower() for p in (self.target_programs or [])}
        course_name = graduate.course.name.strip().lower() if graduate.course_id and graduate.course else ""
        course_match = bool(course_name) and (not programs or course_name in programs)
        factors["course_match"] = course_match

        required = {str(s).strip().lower() for s in (self.required_skills or []) if str(s).strip()}
        if required:
            overlap = required & graduate.skill_set()
            skills_ratio = len(overlap) / len(required)
            factors["matching_skills"] = sorted(overlap)
        else:
            skills_ratio = 0.0
            factors["matching_skills"] = []
        factors["skills_match"] = round(skills_ratio * 100, 2)

        completion = graduate.profile_completion / 100
        factors["profile_completion"] = graduate.profile_completion

        gpa_ratio = float(graduate.gpa) / 4 if graduate.gpa is not None else 0.0
        factors["gpa"] = float(graduate.gpa) if graduate.gpa is not None else None

        score = (40 if course_match else 0) + skills_ratio * 30 + completion * 20 + gpa_ratio * 10
        return {
            "score": float(Decimal(str(score)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
            "factors": factors,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def approve(self, user) -> None:
        self.status = self.Status.ACTIVE
        self.approved_at = timezone.now()
        self.approved_by = user
        self.rejection_reason = ""
        self.save(update_fields=["status", "approved_at", "approved_by", "rejection_reason", "updated_at"])

    def reject(self, reason: str) -> None:
        self.status = self.Status.CANCELLED
        self.rejection_reason = reason
        self.save(update_fields=["status", "rejection_reason", "updated_at"])

    def pause(self) -> None:
        self.status = self.Status.PAUSED
        self.save(update_fields=["status", "updated_at"])

    def resume(self) -> None:
        self.status = self.Status.ACTIVE
        self.save(update_fields=["status", "updated_at"])

    def mark_as_filled(self) -> None:
        self.status = self.Status.FILLED
        self.save(update_fields=["status", "updated_at"])

    def extend_deadline(self, days: int) -> None:
        base = max(self.application_deadline or timezone.localdate(), timezone.localdate())
        self.application_deadline = base + timedelta(days=days)
        fields = ["application_deadline", "updated_at"]
        if self.status == self.Status.EXPIRED:
            self.status = self.Status.ACTIVE
            fields.append("status")
        self.save(update_fields=fields)

    def check_and_update_expiry(self) -> bool:
        """Flip an active job past its deadline to expired. Returns True if changed."""
        if self.status == self.Status.ACTIVE and self.is_expired:
            self.status = self.Status.EXPIRED
            self.save(update_fields=["status", "updated_at"])
            return True
        return False

    def increment_view_count(self) -> None:
        Job.objects.filter(pk=self.pk).update(view_count=models.F("view_count") + 1)
        self.refresh_from_db(fields=["view_count"])


def _money(value) -> str:
    return f"{Decimal(value):,.0f}"
