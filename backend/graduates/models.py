"""
Graduate records owned by an institution.

All models here are tenant-scoped and routed to the institution's database.
References to system rows (User, Job, the previous institution) are plain
columns without database constraints so they work across databases.
"""
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from tenant.models import TenantScopedModel


def max_graduation_year() -> int:
    return timezone.now().year + 1


class Course(TenantScopedModel):
    class Level(models.TextChoices):
        CERTIFICATE = "certificate", "Certificate"
        DIPLOMA = "diploma", "Diploma"
        BACHELOR = "bachelor", "Bachelor"
        MASTER = "master", "Master"
        DOCTORATE = "doctorate", "Doctorate"

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50)
    department = models.CharField(max_length=255, blank=True, default="")
    level = models.CharField(max_length=20, choices=Level.choices, default=Level.BACHELOR)
    description = models.TextField(blank=True, default="")
    duration_months = models.PositiveSmallIntegerField(null=True, blank=True)
    skills_gained = models.JSONField(default=list, blank=True)
    career_paths = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "code"], name="uniq_course_code_per_tenant"),
        ]

    def __str__(self):
        return f"{self.code} {self.name}"


class Graduate(TenantScopedModel):
    class EmploymentStatus(models.TextChoices):
        UNEMPLOYED = "unemployed", "Unemployed"
        EMPLOYED = "employed", "Employed"
        SELF_EMPLOYED = "self_employed", "Self Employed"
        FURTHER_STUDIES = "further_studies", "Further Studies"
        OTHER = "other", "Other"

    class AcademicStanding(models.TextChoices):
        EXCELLENT = "excellent", "Excellent"
        VERY_GOOD = "very_good", "Very Good"
        GOOD = "good", "Good"
        SATISFACTORY = "satisfactory", "Satisfactory"
        PASS = "pass", "Pass"

    class Visibility(models.TextChoices):
        PUBLIC = "public", "Public"
        ALUMNI_ONLY = "alumni_only", "Alumni Only"
        PRIVATE = "private", "Private"

    previous_institution = models.ForeignKey(
        "tenant.Tenant",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="+",
    )
    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="+",
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="graduates",
    )

    # Identity
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True, default="")
    student_id = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")

    # Academics
    graduation_year = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1900), MaxValueValidator(max_graduation_year)],
    )
    gpa = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("4"))],
    )
    academic_standing = models.CharField(
        max_length=20,
        choices=AcademicStanding.choices,
        blank=True,
        default="",
    )

    # Employment
    employment_status = models.CharField(
        max_length=20,
        choices=EmploymentStatus.choices,
        default=EmploymentStatus.UNEMPLOYED,
    )
    current_job_title = models.CharField(max_length=255, blank=True, default="")
    current_company = models.CharField(max_length=255, blank=True, default="")
    current_salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    employment_start_date = models.DateField(null=True, blank=True)

    # Profile
    skills = models.JSONField(default=list, blank=True)
    certifications = models.JSONField(default=list, blank=True)
    demographics = models.JSONField(default=dict, blank=True)
    profile_visibility = models.CharField(
        max_length=20,
        choices=Visibility.choices,
        default=Visibility.ALUMNI_ONLY,
    )
    allow_employer_contact = models.BooleanField(default=True)
    job_search_active = models.BooleanField(default=True)
    last_profile_update = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-graduation_year", "name"]
        indexes = [
            models.Index(fields=["tenant", "graduation_year"], name="graduate_tenant_year_idx"),
            models.Index(fields=["tenant", "employment_status"], name="graduate_tenant_status_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.graduation_year})"

    PROFILE_FIELDS = (
        "name",
        "email",
        "phone",
        "graduation_year",
        "course_id",
        "gpa",
        "academic_standing",
        "employment_status",
        "skills",
        "certifications",
    )

    @property
    def profile_completion(self) -> float:
        """Percentage (0-100) of profile fields filled in."""
        filled = sum(1 for f in self.PROFILE_FIELDS if getattr(self, f) not in (None, "", [], {}))
        return round(filled / len(self.PROFILE_FIELDS) * 100, 2)

    @property
    def is_employed(self) -> bool:
        return self.employment_status in (
            self.EmploymentStatus.EMPLOYED,
            self.EmploymentStatus.SELF_EMPLOYED,
        )

    def skill_set(self) -> set[str]:
        return {str(s).strip().lower() for s in (self.skills or []) if str(s).strip()}


class JobApplication(TenantScopedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        REVIEWED = "reviewed", "Reviewed"
        SHORTLISTED = "shortlisted", "Shortlisted"
        INTERVIEW_SCHEDULED = "interview_scheduled", "Interview Scheduled"
        INTERVIEWED = "interviewed", "Interviewed"
        OFFER_MADE = "offer_made", "Offer Made"
        HIRED = "hired", "Hired"
        REJECTED = "rejected", "Rejected"
        WITHDRAWN = "withdrawn", "Withdrawn"

    FINAL_STATUSES = (Status.HIRED, Status.REJECTED, Status.WITHDRAWN)

    job = models.ForeignKey(
        "employers.Job",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    graduate = models.ForeignKey(
        Graduate,
        on_delete=models.CASCADE,
        related_name="applications",
    )

    cover_letter = models.TextField(max_length=2000)
    status = models.CharField(max_length=30, choices=Status.choices, default=Status.PENDING)
    application_source = models.CharField(max_length=30, default="web")

    match_score = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    match_factors = models.JSONField(default=dict, blank=True)

    employer_notes = models.TextField(blank=True, default="")
    status_changed_at = models.DateTimeField(null=True, blank=True)
    status_changed_by_id = models.BigIntegerField(null=True, blank=True)
    hired_at = models.DateTimeField(null=True, blank=True)
    is_flagged = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["job", "graduate"], name="uniq_application_per_job"),
        ]
        indexes = [
            models.Index(fields=["job", "status"], name="application_job_status_idx"),
        ]

    def __str__(self):
        return f"Application {self.id} ({self.status})"

    @property
    def is_final(self) -> bool:
        return self.status in self.FINAL_STATUSES
