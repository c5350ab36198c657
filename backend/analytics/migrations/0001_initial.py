import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


def _tenant_field():
    return models.ForeignKey(
        db_constraint=False,
        on_delete=django.db.models.deletion.DO_NOTHING,
        related_name="+",
        to="tenant.tenant",
    )


def _id_field():
    return models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")


def _rate_field():
    return models.DecimalField(decimal_places=2, default=0, max_digits=5)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("graduates", "0001_initial"),
        ("tenant", "0001_initial"),
    ]

    operations = [
        # =====================================================================
        # Source records
        # =====================================================================
        migrations.CreateModel(
            name="EmploymentRecord",
            fields=[
                ("id", _id_field()),
                ("company", models.CharField(max_length=255)),
                ("title", models.CharField(max_length=255)),
                ("industry", models.CharField(blank=True, default="", max_length=100)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, null=True)),
                ("is_current", models.BooleanField(default=False)),
                (
                    "job_satisfaction",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("is_leadership", models.BooleanField(default=False)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
                (
                    "graduate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employment_records",
                        to="graduates.graduate",
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date"],
                "indexes": [
                    models.Index(fields=["tenant", "is_current"], name="employment_tenant_current_idx"),
                    models.Index(fields=["industry"], name="employment_industry_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalaryRecord",
            fields=[
                ("id", _id_field()),
                ("salary", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "salary_type",
                    models.CharField(
                        choices=[("hourly", "Hourly"), ("monthly", "Monthly"), ("annual", "Annual")],
                        default="annual",
                        max_length=10,
                    ),
                ),
                ("annualized_salary", models.DecimalField(decimal_places=2, editable=False, max_digits=14)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("effective_date", models.DateField()),
                ("industry", models.CharField(blank=True, default="", max_length=100)),
                ("years_since_graduation", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tenant", _tenant_field()),
                (
                    "graduate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="salary_records",
                        to="graduates.graduate",
                    ),
                ),
            ],
            options={
                "ordering": ["-effective_date"],
                "indexes": [
                    models.Index(fields=["graduate", "effective_date"], name="salary_graduate_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CareerPath",
            fields=[
                ("id", _id_field()),
                (
                    "path_type",
                    models.CharField(
                        choices=[
                            ("linear", "Linear"),
                            ("lateral", "Lateral"),
                            ("entrepreneurial", "Entrepreneurial"),
                            ("career_change", "Career Change"),
                            ("further_education", "Further Education"),
                            ("portfolio", "Portfolio"),
                        ],
                        default="linear",
                        max_length=30,
                    ),
                ),
                ("total_positions", models.PositiveSmallIntegerField(default=0)),
                ("promotions", models.PositiveSmallIntegerField(default=0)),
                ("industry_changes", models.PositiveSmallIntegerField(default=0)),
                ("leadership_roles", models.PositiveSmallIntegerField(default=0)),
                ("years_to_first_promotion", models.DecimalField(blank=True, decimal_places=1, max_digits=4, null=True)),
                ("success_score", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
                (
                    "graduate",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="career_path",
                        to="graduates.graduate",
                    ),
                ),
            ],
        ),
        # =====================================================================
        # Aggregates
        # =====================================================================
        migrations.CreateModel(
            name="ProgramEffectiveness",
            fields=[
                ("id", _id_field()),
                ("program_name", models.CharField(max_length=255)),
                ("department", models.CharField(blank=True, default="", max_length=255)),
                ("graduation_year", models.PositiveSmallIntegerField()),
                ("total_graduates", models.PositiveIntegerField(default=0)),
                ("employment_rate_6_months", _rate_field()),
                ("employment_rate_1_year", _rate_field()),
                ("employment_rate_2_years", _rate_field()),
                ("avg_starting_salary", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("avg_salary_1_year", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("avg_salary_2_years", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("top_employers", models.JSONField(blank=True, default=dict)),
                ("skills_gaps", models.JSONField(blank=True, default=list)),
                ("overall_effectiveness_score", _rate_field()),
                ("generated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "verbose_name_plural": "program effectiveness",
                "ordering": ["-overall_effectiveness_score"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "program_name", "graduation_year"),
                        name="uniq_program_effectiveness",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="IndustryPlacement",
            fields=[
                ("id", _id_field()),
                ("industry", models.CharField(max_length=100)),
                ("graduation_year", models.PositiveSmallIntegerField()),
                ("program", models.CharField(max_length=255)),
                ("placement_count", models.PositiveIntegerField(default=0)),
                ("avg_starting_salary", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("avg_current_salary", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("retention_rate", _rate_field()),
                ("top_companies", models.JSONField(blank=True, default=dict)),
                ("skills_in_demand", models.JSONField(blank=True, default=list)),
                ("generated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "ordering": ["-placement_count"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "industry", "graduation_year", "program"),
                        name="uniq_industry_placement",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DemographicOutcome",
            fields=[
                ("id", _id_field()),
                ("demographic_type", models.CharField(max_length=50)),
                ("demographic_value", models.CharField(max_length=100)),
                ("graduation_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("program", models.CharField(blank=True, default="", max_length=255)),
                ("total_graduates", models.PositiveIntegerField(default=0)),
                ("employed_count", models.PositiveIntegerField(default=0)),
                ("employment_rate", _rate_field()),
                ("avg_salary", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("generated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "ordering": ["-employment_rate"],
                "indexes": [
                    models.Index(fields=["demographic_type", "graduation_year"], name="demographic_type_year_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CareerTrend",
            fields=[
                ("id", _id_field()),
                ("trend_type", models.CharField(max_length=50)),
                ("category", models.CharField(default="overall", max_length=50)),
                ("category_value", models.CharField(blank=True, default="", max_length=255)),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("value", models.DecimalField(decimal_places=2, max_digits=14)),
                ("change_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "ordering": ["-period_start"],
                "indexes": [
                    models.Index(fields=["trend_type", "period_start"], name="trend_type_period_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CareerOutcomeSnapshot",
            fields=[
                ("id", _id_field()),
                (
                    "period_type",
                    models.CharField(
                        choices=[("monthly", "Monthly"), ("quarterly", "Quarterly"), ("yearly", "Yearly")],
                        max_length=10,
                    ),
                ),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("graduation_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("program", models.CharField(blank=True, default="", max_length=255)),
                ("department", models.CharField(blank=True, default="", max_length=255)),
                ("demographic_group", models.CharField(blank=True, default="", max_length=150)),
                ("metrics", models.JSONField(default=dict)),
                ("total_graduates", models.PositiveIntegerField(default=0)),
                ("tracked_graduates", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "ordering": ["-period_start"],
                "indexes": [
                    models.Index(fields=["period_type", "period_start"], name="snapshot_period_idx"),
                ],
            },
        ),
    ]
