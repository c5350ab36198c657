"""
Career outcome analytics models.

Source data (EmploymentRecord, SalaryRecord, CareerPath) is recorded per
graduate; the remaining models hold aggregates produced by
analytics.services and are rebuilt on demand or on a schedule.

All models are tenant-scoped and live in the institution's database.
"""
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from tenant.models import TenantScopedModel

HOURS_PER_YEAR = 2080
MONTHS_PER_YEAR = 12


# =============================================================================
# Source records
# =============================================================================

class EmploymentRecord(TenantScopedModel):
    """One position held by a graduate."""

    graduate = models.ForeignKey(
        "graduates.Graduate",
        on_delete=models.CASCADE,
        related_name="employment_records",
    )
    company = models.CharField(max_length=255)
    title = models.CharField(max_length=255)
    industry = models.CharField(max_length=100, blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    is_current = models.BooleanField(default=False)
    job_satisfaction = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    is_leadership = models.BooleanField(default=False)
    skills = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["tenant", "is_current"], name="employment_tenant_current_idx"),
            models.Index(fields=["industry"], name="employment_industry_idx"),
        ]

    def __str__(self):
        return f"{self.title} @ {self.company}"


class SalaryRecord(TenantScopedModel):
    """A salary data point. annualized_salary is always kept in sync on save."""

    class SalaryType(models.TextChoices):
        HOURLY = "hourly", "Hourly"
        MONTHLY = "monthly", "Monthly"
        ANNUAL = "annual", "Annual"

    graduate = models.ForeignKey(
        "graduates.Graduate",
        on_delete=models.CASCADE,
        related_name="salary_records",
    )
    salary = models.DecimalField(max_digits=12, decimal_places=2)
    salary_type = models.CharField(max_length=10, choices=SalaryType.choices, default=SalaryType.ANNUAL)
    annualized_salary = models.DecimalField(max_digits=14, decimal_places=2, editable=False)
    currency = models.CharField(max_length=3, default="USD")
    effective_date = models.DateField()
    industry = models.CharField(max_length=100, blank=True, default="")
    years_since_graduation = models.PositiveSmallIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-effective_date"]
        indexes = [
            models.Index(fields=["graduate", "effective_date"], name="salary_graduate_date_idx"),
        ]

    def __str__(self):
        return f"{self.salary} {self.currency} ({self.salary_type})"

    @staticmethod
    def annualize(salary, salary_type: str) -> Decimal:
        salary = Decimal(salary)
        if salary_type == SalaryRecord.SalaryType.HOURLY:
            return salary * HOURS_PER_YEAR
        if salary_type == SalaryRecord.SalaryType.MONTHLY:
            return salary * MONTHS_PER_YEAR
        return salary

    def save(self, *args, **kwargs):
        self.annualized_salary = self.annualize(self.salary, self.salary_type)
        if self.years_since_graduation is None and self.graduate_id and self.effective_date:
            self.years_since_graduation = max(self.effective_date.year - self.graduate.graduation_year, 0)
        super().save(*args, **kwargs)


class CareerPath(TenantScopedModel):
    """Summary of a graduate's career trajectory."""

    class PathType(models.TextChoices):
        LINEAR = "linear", "Linear"
        LATERAL = "lateral", "Lateral"
        ENTREPRENEURIAL = "entrepreneurial", "Entrepreneurial"
        CAREER_CHANGE = "career_change", "Career Change"
        FURTHER_EDUCATION = "further_education", "Further Education"
        PORTFOLIO = "portfolio", "Portfolio"

    graduate = models.OneToOneField(
        "graduates.Graduate",
        on_delete=models.CASCADE,
        related_name="career_path",
    )
    path_type = models.CharField(max_length=30, choices=PathType.choices, default=PathType.LINEAR)
    total_positions = models.PositiveSmallIntegerField(default=0)
    promotions = models.PositiveSmallIntegerField(default=0)
    industry_changes = models.PositiveSmallIntegerField(default=0)
    leadership_roles = models.PositiveSmallIntegerField(default=0)
    years_to_first_promotion = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    success_score = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.graduate_id}: {self.path_type}"


# =============================================================================
# Aggregates
# =============================================================================

class ProgramEffectiveness(TenantScopedModel):
    program_name = models.CharField(max_length=255)
    department = models.CharField(max_length=255, blank=True, default="")
    graduation_year = models.PositiveSmallIntegerField()
    total_graduates = models.PositiveIntegerField(default=0)

    employment_rate_6_months = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    employment_rate_1_year = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    employment_rate_2_years = models.DecimalField(max_digits=5, decimal_places=2, default=0)

    avg_starting_salary = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    avg_salary_1_year = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    avg_salary_2_years = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    top_employers = models.JSONField(default=dict, blank=True)
    skills_gaps = models.JSONField(default=list, blank=True)
    overall_effectiveness_score = models.DecimalField(max_digits=5, decimal_places=2, default=0)

    generated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "program effectiveness"
        ordering = ["-overall_effectiveness_score"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "program_name", "graduation_year"],
                name="uniq_program_effectiveness",
            ),
        ]

    def __str__(self):
        return f"{self.program_name} {self.graduation_year}"


class IndustryPlacement(TenantScopedModel):
    industry = models.CharField(max_length=100)
    graduation_year = models.PositiveSmallIntegerField()
    program = models.CharField(max_length=255)
    placement_count = models.PositiveIntegerField(default=0)
    avg_starting_salary = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    avg_current_salary = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    retention_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    top_companies = models.JSONField(default=dict, blank=True)
    skills_in_demand = models.JSONField(default=list, blank=True)

    generated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-placement_count"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "industry", "graduation_year", "program"],
                name="uniq_industry_placement",
            ),
        ]

    def __str__(self):
        return f"{self.industry} / {self.program} {self.graduation_year}"


class DemographicOutcome(TenantScopedModel):
    demographic_type = models.CharField(max_length=50)
    demographic_value = models.CharField(max_length=100)
    graduation_year = models.PositiveSmallIntegerField(null=True, blank=True)
    program = models.CharField(max_length=255, blank=True, default="")
    total_graduates = models.PositiveIntegerField(default=0)
    employed_count = models.PositiveIntegerField(default=0)
    employment_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    avg_salary = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    generated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-employment_rate"]
        indexes = [
            models.Index(fields=["demographic_type", "graduation_year"], name="demographic_type_year_idx"),
        ]

    def __str__(self):
        return f"{self.demographic_type}={self.demographic_value}"


class CareerTrend(TenantScopedModel):
    trend_type = models.CharField(max_length=50)
    category = models.CharField(max_length=50, default="overall")
    category_value = models.CharField(max_length=255, blank=True, default="")
    period_start = models.DateField()
    period_end = models.DateField()
    value = models.DecimalField(max_digits=14, decimal_places=2)
    change_percentage = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-period_start"]
        indexes = [
            models.Index(fields=["trend_type", "period_start"], name="trend_type_period_idx"),
        ]

    def __str__(self):
        return f"{self.trend_type} {self.period_start}"


class CareerOutcomeSnapshot(TenantScopedModel):
    class PeriodType(models.TextChoices):
        MONTHLY = "monthly", "Monthly"
        QUARTERLY = "quarterly", "Quarterly"
        YEARLY = "yearly", "Yearly"

    period_type = models.CharField(max_length=10, choices=PeriodType.choices)
    period_start = models.DateField()
    period_end = models.DateField()

    graduation_year = models.PositiveSmallIntegerField(null=True, blank=True)
    program = models.CharField(max_length=255, blank=True, default="")
    department = models.CharField(max_length=255, blank=True, default="")
    demographic_group = models.CharField(max_length=150, blank=True, default="")

    metrics = models.JSONField(default=dict)
    total_graduates = models.PositiveIntegerField(default=0)
    tracked_graduates = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-period_start"]
        indexes = [
            models.Index(fields=["period_type", "period_start"], name="snapshot_period_idx"),
        ]

    def __str__(self):
        return f"{self.period_type} {self.period_start} - {self.period_end}"

    @property
    def scope(self) -> dict:
        return {
            "graduation_year": self.graduation_year,
            "program": self.program,
            "department": self.department,
            "demographic_group": self.demographic_group,
        }
