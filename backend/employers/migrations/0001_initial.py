import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Employer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("company_name", models.CharField(max_length=255)),
                ("industry", models.CharField(blank=True, default="", max_length=100)),
                (
                    "company_size",
                    models.CharField(
                        choices=[
                            ("startup", "Startup (1-10)"),
                            ("small", "Small (11-50)"),
                            ("medium", "Medium (51-200)"),
                            ("large", "Large (201-1000)"),
                            ("enterprise", "Enterprise (1000+)"),
                        ],
                        default="small",
                        max_length=20,
                    ),
                ),
                ("website", models.URLField(blank=True, default="")),
                ("description", models.TextField(blank=True, default="")),
                ("address", models.TextField(blank=True, default="")),
                ("contact_person_name", models.CharField(blank=True, default="", max_length=255)),
                ("contact_email", models.EmailField(blank=True, default="", max_length=254)),
                ("contact_phone", models.CharField(blank=True, default="", max_length=30)),
                (
                    "verification_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("under_review", "Under Review"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                (
                    "subscription_plan",
                    models.CharField(
                        choices=[("free", "Free"), ("basic", "Basic"), ("premium", "Premium")],
                        default="free",
                        max_length=20,
                    ),
                ),
                ("job_post_limit", models.PositiveIntegerField(default=5)),
                ("total_jobs_posted", models.PositiveIntegerField(default=0)),
                ("active_jobs_count", models.PositiveIntegerField(default=0)),
                ("total_hires", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employer",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "verified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["company_name"],
                "indexes": [models.Index(fields=["verification_status"], name="employer_verification_idx")],
            },
        ),
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("target_programs", models.JSONField(blank=True, default=list)),
                ("required_skills", models.JSONField(blank=True, default=list)),
                ("preferred_qualifications", models.JSONField(blank=True, default=list)),
                (
                    "experience_level",
                    models.CharField(
                        choices=[
                            ("entry", "Entry Level"),
                            ("junior", "Junior"),
                            ("mid", "Mid Level"),
                            ("senior", "Senior"),
                            ("executive", "Executive"),
                        ],
                        default="entry",
                        max_length=20,
                    ),
                ),
                ("min_experience_years", models.PositiveSmallIntegerField(default=0)),
                ("salary_min", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("salary_max", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "salary_type",
                    models.CharField(
                        choices=[("hourly", "Hourly"), ("monthly", "Monthly"), ("annual", "Annual")],
                        default="annual",
                        max_length=20,
                    ),
                ),
                ("salary_negotiable", models.BooleanField(default=False)),
                (
                    "job_type",
                    models.CharField(
                        choices=[
                            ("full_time", "Full Time"),
                            ("part_time", "Part Time"),
                            ("contract", "Contract"),
                            ("internship", "Internship"),
                            ("temporary", "Temporary"),
                        ],
                        default="full_time",
                        max_length=20,
                    ),
                ),
                (
                    "work_arrangement",
                    models.CharField(
                        choices=[("on_site", "On Site"), ("remote", "Remote"), ("hybrid", "Hybrid")],
                        default="on_site",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending_approval", "Pending Approval"),
                            ("active", "Active"),
                            ("paused", "Paused"),
                            ("filled", "Filled"),
                            ("cancelled", "Cancelled"),
                            ("expired", "Expired"),
                        ],
                        default="pending_approval",
                        max_length=20,
                    ),
                ),
                ("requires_approval", models.BooleanField(default=False)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("application_deadline", models.DateField(blank=True, null=True)),
                ("view_count", models.PositiveIntegerField(default=0)),
                ("total_applications", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "employer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="jobs",
                        to="employers.employer",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        blank=True,
                        help_text="Restrict the posting to one institution; empty means open to all.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="jobs",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "application_deadline"], name="job_status_deadline_idx")],
            },
        ),
    ]
