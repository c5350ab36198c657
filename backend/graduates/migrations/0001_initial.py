from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import graduates.models


def _tenant_field():
    return models.ForeignKey(
        db_constraint=False,
        on_delete=django.db.models.deletion.DO_NOTHING,
        related_name="+",
        to="tenant.tenant",
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("employers", "0001_initial"),
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=50)),
                ("department", models.CharField(blank=True, default="", max_length=255)),
                (
                    "level",
                    models.CharField(
                        choices=[
                            ("certificate", "Certificate"),
                            ("diploma", "Diploma"),
                            ("bachelor", "Bachelor"),
                            ("master", "Master"),
                            ("doctorate", "Doctorate"),
                        ],
                        default="bachelor",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("duration_months", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("skills_gained", models.JSONField(blank=True, default=list)),
                ("career_paths", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("tenant", "code"), name="uniq_course_code_per_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Graduate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=30)),
                ("student_id", models.CharField(blank=True, default="", max_length=50)),
                ("address", models.TextField(blank=True, default="")),
                (
                    "graduation_year",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1900),
                            django.core.validators.MaxValueValidator(graduates.models.max_graduation_year),
                        ],
                    ),
                ),
                (
                    "gpa",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=3,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("4")),
                        ],
                    ),
                ),
                (
                    "academic_standing",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("excellent", "Excellent"),
                            ("very_good", "Very Good"),
                            ("good", "Good"),
                            ("satisfactory", "Satisfactory"),
                            ("pass", "Pass"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                (
                    "employment_status",
                    models.CharField(
                        choices=[
                            ("unemployed", "Unemployed"),
                            ("employed", "Employed"),
                            ("self_employed", "Self Employed"),
                            ("further_studies", "Further Studies"),
                            ("other", "Other"),
                        ],
                        default="unemployed",
                        max_length=20,
                    ),
                ),
                ("current_job_title", models.CharField(blank=True, default="", max_length=255)),
                ("current_company", models.CharField(blank=True, default="", max_length=255)),
                ("current_salary", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("employment_start_date", models.DateField(blank=True, null=True)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("certifications", models.JSONField(blank=True, default=list)),
                ("demographics", models.JSONField(blank=True, default=dict)),
                (
                    "profile_visibility",
                    models.CharField(
                        choices=[("public", "Public"), ("alumni_only", "Alumni Only"), ("private", "Private")],
                        default="alumni_only",
                        max_length=20,
                    ),
                ),
                ("allow_employer_contact", models.BooleanField(default=True)),
                ("job_search_active", models.BooleanField(default=True)),
                ("last_profile_update", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
                (
                    "previous_institution",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="tenant.tenant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="graduates",
                        to="graduates.course",
                    ),
                ),
            ],
            options={
                "ordering": ["-graduation_year", "name"],
                "indexes": [
                    models.Index(fields=["tenant", "graduation_year"], name="graduate_tenant_year_idx"),
                    models.Index(fields=["tenant", "employment_status"], name="graduate_tenant_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JobApplication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cover_letter", models.TextField(max_length=2000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("reviewed", "Reviewed"),
                            ("shortlisted", "Shortlisted"),
                            ("interview_scheduled", "Interview Scheduled"),
                            ("interviewed", "Interviewed"),
                            ("offer_made", "Offer Made"),
                            ("hired", "Hired"),
                            ("rejected", "Rejected"),
                            ("withdrawn", "Withdrawn"),
                        ],
                        default="pending",
                        max_length=30,
                    ),
                ),
                ("application_source", models.CharField(default="web", max_length=30)),
                ("match_score", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("match_factors", models.JSONField(blank=True, default=dict)),
                ("employer_notes", models.TextField(blank=True, default="")),
                ("status_changed_at", models.DateTimeField(blank=True, null=True)),
                ("status_changed_by_id", models.BigIntegerField(blank=True, null=True)),
                ("hired_at", models.DateTimeField(blank=True, null=True)),
                ("is_flagged", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", _tenant_field()),
                (
                    "job",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="employers.job",
                    ),
                ),
                (
                    "graduate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="applications",
                        to="graduates.graduate",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("job", "graduate"), name="uniq_application_per_job"),
                ],
                "indexes": [models.Index(fields=["job", "status"], name="application_job_status_idx")],
            },
        ),
    ]
