"""
Props for the per-role dashboards.

Each builder returns a plain dict that becomes the `props` of a page
payload. Graduate and institution dashboards read the tenant database in
context; employer and super-admin dashboards walk every active tenant.
"""
from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone

from accounts.models import User
from employers.models import Employer, Job
from employers.serializers import EmployerSerializer, JobSerializer
from graduates.commands import graduate_for_user
from graduates.models import Course, Graduate, JobApplication
from graduates.serializers import GraduateSerializer, JobApplicationSerializer
from tenant.models import Tenant

RECENT_LIMIT = 5
RECOMMENDATION_LIMIT = 6
CLASSMATE_LIMIT = 8
RECOMMENDATION_CANDIDATES = 100
EXPIRING_WITHIN_DAYS = 7

SALARY_BUCKETS = (
    ("Under $30K", None, 30000),
    ("$30K - $50K", 30000, 50000),
    ("$50K - $75K", 50000, 75000),
    ("$75K - $100K", 75000, 100000),
    ("Over $100K", 100000, None),
)


def _count_by(queryset, field: str = "status") -> dict:
    return {row[field]: row["count"] for row in queryset.values(field).annotate(count=Count("id")).order_by()}


def _applications_with_jobs(applications) -> list:
    applications = list(applications)
    ids = {a.job_id for a in applications}
    jobs = {j.id: j for j in Job.objects.select_related("employer").filter(id__in=ids)}
    return JobApplicationSerializer(applications, many=True, context={"jobs": jobs}).data


# =============================================================================
# Graduate
# =============================================================================

def job_recommendations(graduate: Graduate, tenant_id: int, limit: int = RECOMMENDATION_LIMIT) -> list:
    """Open jobs matching the graduate's course or skills, excluding ones already applied to."""
    applied = JobApplication.objects.filter(graduate=graduate).values_list("job_id", flat=True)
    candidates = (
        Job.objects.open()
        .for_tenant(tenant_id)
        .exclude(id__in=list(applied))
        .select_related("employer")
        .order_by("-created_at")[:RECOMMENDATION_CANDIDATES]
    )

    course_name = graduate.course.name.strip().lower() if graduate.course else ""
    skills = graduate.skill_set()
    matches = []
    for job in candidates:
        programs = {str(p).strip().lower() for p in (job.target_programs or [])}
        required = {str(s).strip().lower() for s in (job.required_skills or [])}
        if (course_name and course_name in programs) or (skills & required):
            matches.append(job)
        if len(matches) == limit:
            break
    return matches


def graduate_dashboard(actor) -> dict | None:
    """None when the user has no graduate profile at this institution."""
    graduate = graduate_for_user(actor.user)
    if graduate is None:
        return None

    applications = JobApplication.objects.filter(graduate=graduate)
    by_status = _count_by(applications)
    S = JobApplication.Status

    classmates = Graduate.objects.none()
    if graduate.course_id:
        classmates = (
            Graduate.objects.select_related("course")
            .filter(course_id=graduate.course_id, profile_visibility=Graduate.Visibility.PUBLIC)
            .exclude(pk=graduate.pk)
            .order_by("-graduation_year", "name")[:CLASSMATE_LIMIT]
        )

    return {
        "graduate": GraduateSerializer(graduate).data,
        "statistics": {
            "total_applications": sum(by_status.values()),
            "applications_by_status": by_status,
            "pending_applications": by_status.get(S.PENDING, 0),
            "interviews": by_status.get(S.INTERVIEW_SCHEDULED, 0) + by_status.get(S.INTERVIEWED, 0),
            "offers": by_status.get(S.HIRED, 0),
            "profile_completion": graduate.profile_completion,
            "available_jobs": Job.objects.open().for_tenant(actor.tenant_id).count(),
        },
        "recentApplications": _applications_with_jobs(applications.order_by("-created_at")[:RECENT_LIMIT]),
        "jobRecommendations": JobSerializer(job_recommendations(graduate, actor.tenant_id), many=True).data,
        "classmateConnections": [
            {
                "id": c.id,
                "name": c.name,
                "graduation_year": c.graduation_year,
                "current_job_title": c.current_job_title,
                "current_company": c.current_company,
            }
            for c in classmates
        ],
    }


# =============================================================================
# Employer
# =============================================================================

def _employer_applications(job_ids: list) -> list:
    """(tenant slug, application) pairs for the given jobs across active tenants."""
    rows = []
    if not job_ids:
        return rows
    for tenant in Tenant.objects.active():
        with tenant.run():
            for application in JobApplication.objects.select_related("graduate").filter(job_id__in=job_ids):
                rows.append((tenant.slug, application))
    return rows


def employer_dashboard(actor) -> dict | None:
    employer = Employer.objects.filter(user=actor.user).first()
    if employer is None:
        return None

    jobs = list(employer.jobs.select_related("employer").order_by("-created_at"))
    jobs_by_id = {job.id: job for job in jobs}
    applications = _employer_applications(list(jobs_by_id))
    S = JobApplication.Status

    recent = sorted(applications, key=lambda pair: pair[1].created_at, reverse=True)[:RECENT_LIMIT]
    recent_rows = []
    for slug, application in recent:
        row = JobApplicationSerializer(application, context={"jobs": jobs_by_id}).data
        row["institution"] = slug
        recent_rows.append(row)

    today = timezone.localdate()
    expiring = [
        job for job in jobs
        if job.status == Job.Status.ACTIVE
        and job.application_deadline
        and today <= job.application_deadline <= today + timedelta(days=EXPIRING_WITHIN_DAYS)
    ]
    most_popular = max(jobs, key=lambda j: j.total_applications, default=None)

    hired = [a for _, a in applications if a.status == S.HIRED and a.hired_at]
    days_to_hire = [(a.hired_at - a.created_at).days for a in hired]
    total = len(applications)

    return {
        "employer": EmployerSerializer(employer).data,
        "statistics": {
            "total_jobs": len(jobs),
            "active_jobs": sum(1 for j in jobs if j.status == Job.Status.ACTIVE),
            "total_applications": total,
            "pending_applications": sum(1 for _, a in applications if a.status == S.PENDING),
            "total_hires": employer.total_hires,
            "remaining_job_posts": employer.remaining_job_posts,
        },
        "recentJobs": JobSerializer(jobs[:RECENT_LIMIT], many=True).data,
        "recentApplications": recent_rows,
        "jobMetrics": {
            "average_applications_per_job": round(total / len(jobs), 1) if jobs else 0,
            "most_popular_job": (
                {"id": most_popular.id, "title": most_popular.title, "applications": most_popular.total_applications}
                if most_popular and most_popular.total_applications
                else None
            ),
            "expiring_soon": JobSerializer(expiring, many=True).data,
        },
        "hiringAnalytics": {
            "total_hires": len(hired),
            "hire_rate": round(len(hired) / total * 100, 1) if total else 0,
            "average_days_to_hire": round(sum(days_to_hire) / len(days_to_hire), 1) if days_to_hire else None,
        },
    }


# =============================================================================
# Institution admin
# =============================================================================

def _salary_ranges(graduates) -> list:
    ranges = []
    for label, low, high in SALARY_BUCKETS:
        bucket = graduates.filter(current_salary__isnull=False)
        if low is not None:
            bucket = bucket.filter(current_salary__gte=low)
        if high is not None:
            bucket = bucket.filter(current_salary__lt=high)
        ranges.append({"range": label, "count": bucket.count()})
    return ranges


def institution_dashboard(actor) -> dict:
    graduates = Graduate.objects.all()
    total = graduates.count()
    employed = graduates.filter(
        employment_status__in=[Graduate.EmploymentStatus.EMPLOYED, Graduate.EmploymentStatus.SELF_EMPLOYED]
    ).count()
    unemployed = graduates.filter(employment_status=Graduate.EmploymentStatus.UNEMPLOYED).count()

    courses = Course.objects.annotate(
        graduate_total=Count("graduates"),
        employed_total=Count(
            "graduates",
            filter=Q(graduates__employment_status__in=[
                Graduate.EmploymentStatus.EMPLOYED,
                Graduate.EmploymentStatus.SELF_EMPLOYED,
            ]),
        ),
    ).order_by("name")

    return {
        "stats": {
            "total_graduates": total,
            "total_courses": Course.objects.count(),
            "active_courses": Course.objects.filter(is_active=True).count(),
            "total_applications": JobApplication.objects.count(),
            "pending_applications": JobApplication.objects.filter(status=JobApplication.Status.PENDING).count(),
            "available_jobs": Job.objects.open().for_tenant(actor.tenant_id).count(),
        },
        "employmentStats": {
            "total": total,
            "employed": employed,
            "unemployed": unemployed,
            "employment_rate": round(employed / total * 100, 1) if total else 0,
        },
        "coursePerformance": [
            {
                "id": c.id,
                "name": c.name,
                "code": c.code,
                "graduates": c.graduate_total,
                "employed": c.employed_total,
                "employment_rate": round(c.employed_total / c.graduate_total * 100, 1) if c.graduate_total else 0,
            }
            for c in courses
        ],
        "graduatesByYear": list(
            graduates.values("graduation_year").annotate(count=Count("id")).order_by("graduation_year")
        ),
        "salaryRanges": _salary_ranges(graduates),
        "recentGraduates": GraduateSerializer(
            graduates.select_related("course").order_by("-created_at")[:RECENT_LIMIT], many=True
        ).data,
    }


# =============================================================================
# Super admin
# =============================================================================

def super_admin_dashboard(actor) -> dict:
    institutions = []
    total_graduates = 0
    total_applications = 0

    for tenant in Tenant.objects.active().order_by("name"):
        with tenant.run():
            graduates = Graduate.objects.count()
            applications = JobApplication.objects.count()
        total_graduates += graduates
        total_applications += applications
        institutions.append({
            "id": tenant.id,
            "name": tenant.name,
            "slug": tenant.slug,
            "status": tenant.status,
            "mode": tenant.mode,
            "graduates_count": graduates,
            "applications_count": applications,
            "users_count": tenant.users.count(),
        })

    verification = _count_by(Employer.objects.all(), "verification_status")
    return {
        "systemStats": {
            "total_institutions": Tenant.objects.count(),
            "active_institutions": len(institutions),
            "total_users": User.objects.count(),
            "total_graduates": total_graduates,
            "total_employers": Employer.objects.count(),
            "total_jobs": Job.objects.count(),
            "total_applications": total_applications,
        },
        "institutionStats": institutions,
        "employerStats": {
            "total": sum(verification.values()),
            "by_verification_status": verification,
            "pending_verification": verification.get(Employer.VerificationStatus.PENDING, 0)
            + verification.get(Employer.VerificationStatus.UNDER_REVIEW, 0),
        },
        "jobStats": {
            "total": Job.objects.count(),
            "by_status": _count_by(Job.objects.all()),
        },
    }