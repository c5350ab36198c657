"""
Graduate, course and job application API.

All views except the employer's cross-tenant application list require an
institution context (domain, X-Tenant-ID header or token claim).
"""
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, require_any, require_tenant, resolve_actor
from employers.models import Job
from graduates.commands import (
    application_stats,
    apply_to_job,
    create_course,
    create_graduate,
    delete_course,
    delete_graduate,
    graduate_for_user,
    update_application_status,
    update_course,
    update_graduate,
    withdraw_application,
)
from graduates.models import Course, Graduate, JobApplication
from graduates.serializers import (
    ApplicationStatusSerializer,
    ApplySerializer,
    CourseSerializer,
    CourseWriteSerializer,
    GraduateProfileSerializer,
    GraduateSerializer,
    GraduateWriteSerializer,
    JobApplicationSerializer,
)
from tenant.models import Tenant


def _fail(result):
    code = status.HTTP_404_NOT_FOUND if result.not_found else status.HTTP_400_BAD_REQUEST
    return Response({"detail": result.error}, status=code)


def _jobs_for(applications) -> dict:
    ids = {a.job_id for a in applications}
    return {j.id: j for j in Job.objects.select_related("employer").filter(id__in=ids)}


def _application_data(applications) -> list:
    applications = list(applications)
    return JobApplicationSerializer(
        applications,
        many=True,
        context={"jobs": _jobs_for(applications)},
    ).data


# =============================================================================
# Courses
# =============================================================================

class CourseListCreateView(APIView):
    """
    GET  /api/courses/    ?active=1 to hide inactive courses
    POST /api/courses/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "courses.view")
        require_tenant(actor)

        courses = Course.objects.annotate(graduate_count=Count("graduates"))
        if request.query_params.get("active"):
            courses = courses.filter(is_active=True)
        department = request.query_params.get("department")
        if department:
            courses = courses.filter(department=department)

        return Response(CourseSerializer(courses, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        require_tenant(actor)

        serializer = CourseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_course(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(CourseSerializer(result.data["course"]).data, status=status.HTTP_201_CREATED)


class CourseDetailView(APIView):
    """
    GET    /api/courses/<pk>/
    PATCH  /api/courses/<pk>/
    DELETE /api/courses/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "courses.view")
        require_tenant(actor)
        course = get_object_or_404(Course.objects.all(), pk=pk)
        return Response(CourseSerializer(course).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_tenant(actor)
        course = get_object_or_404(Course.objects.all(), pk=pk)

        serializer = CourseWriteSerializer(course, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_course(actor, course, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(CourseSerializer(result.data["course"]).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require_tenant(actor)
        course = get_object_or_404(Course.objects.all(), pk=pk)

        result = delete_course(actor, course)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Graduates
# =============================================================================

class GraduateListCreateView(APIView):
    """
    GET /api/graduates/

    Query params:
    - search: name, email or student id contains
    - course: course id
    - graduation_year
    - employment_status

    POST /api/graduates/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "graduates.view")
        require_tenant(actor)

        params = request.query_params
        graduates = Graduate.objects.select_related("course")

        search = params.get("search")
        if search:
            graduates = graduates.filter(
                Q(name__icontains=search) | Q(email__icontains=search) | Q(student_id__icontains=search)
            )
        if params.get("course"):
            graduates = graduates.filter(course_id=params["course"])
        if params.get("graduation_year"):
            graduates = graduates.filter(graduation_year=params["graduation_year"])
        if params.get("employment_status"):
            graduates = graduates.filter(employment_status=params["employment_status"])

        return Response(GraduateSerializer(graduates, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        require_tenant(actor)

        serializer = GraduateWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_graduate(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(GraduateSerializer(result.data["graduate"]).data, status=status.HTTP_201_CREATED)


class GraduateDetailView(APIView):
    """
    GET    /api/graduates/<pk>/
    PATCH  /api/graduates/<pk>/
    DELETE /api/graduates/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def _get(self, pk):
        return get_object_or_404(Graduate.objects.select_related("course"), pk=pk)

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "graduates.view")
        require_tenant(actor)
        return Response(GraduateSerializer(self._get(pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "graduates.manage")
        require_tenant(actor)
        graduate = self._get(pk)

        serializer = GraduateWriteSerializer(graduate, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_graduate(actor, graduate, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(GraduateSerializer(result.data["graduate"]).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require_tenant(actor)

        result = delete_graduate(actor, self._get(pk))
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class GraduateProfileView(APIView):
    """
    GET   /api/graduates/me/
    PATCH /api/graduates/me/
    """
    permission_classes = [IsAuthenticated]

    def _get(self, actor):
        require_tenant(actor)
        return graduate_for_user(actor.user)

    def get(self, request):
        actor = resolve_actor(request)
        graduate = self._get(actor)
        if graduate is None:
            return Response({"detail": "Graduate profile not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(GraduateSerializer(graduate).data)

    def patch(self, request):
        actor = resolve_actor(request)
        graduate = self._get(actor)
        if graduate is None:
            return Response({"detail": "Graduate profile not found."}, status=status.HTTP_404_NOT_FOUND)

        serializer = GraduateProfileSerializer(graduate, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_graduate(actor, graduate, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(GraduateSerializer(result.data["graduate"]).data)


class GraduateSearchView(APIView):
    """
    GET /api/graduates/search/

    Employer talent search over graduates who are looking for work and
    allow employer contact. Within an institution context only that
    institution is searched; otherwise every active institution.

    Query params: skill, course (name contains), graduation_year
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_any(actor, "graduates.search", "graduates.view")

        tenants = [actor.tenant] if actor.tenant else list(Tenant.objects.active())
        params = request.query_params
        results = []

        for tenant in tenants:
            with tenant.run():
                graduates = Graduate.objects.select_related("course").filter(
                    job_search_active=True,
                    allow_employer_contact=True,
                ).exclude(profile_visibility=Graduate.Visibility.PRIVATE)
                if params.get("course"):
                    graduates = graduates.filter(course__name__icontains=params["course"])
                if params.get("graduation_year"):
                    graduates = graduates.filter(graduation_year=params["graduation_year"])

                skill = (params.get("skill") or "").strip().lower()
                for graduate in graduates[:100]:
                    if skill and skill not in graduate.skill_set():
                        continue
                    results.append({
                        "id": graduate.id,
                        "institution": tenant.slug,
                        "name": graduate.name,
                        "course": graduate.course.name if graduate.course else None,
                        "graduation_year": graduate.graduation_year,
                        "skills": graduate.skills,
                        "profile_completion": graduate.profile_completion,
                    })

        return Response(results)


# =============================================================================
# Applications
# =============================================================================

class ApplyToJobView(APIView):
    """
    POST /api/jobs/<pk>/apply/    body: {"cover_letter": "..."}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)

        serializer = ApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = apply_to_job(actor, job, serializer.validated_data["cover_letter"])
        if not result.success:
            return _fail(result)
        return Response(
            JobApplicationSerializer(result.data["application"], context={"jobs": {job.id: job}}).data,
            status=status.HTTP_201_CREATED,
        )


class ApplicationListView(APIView):
    """
    GET /api/applications/

    Institution view of every application made by its graduates, with
    pipeline stats. ?status= filters the list (not the stats).
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "applications.view")
        require_tenant(actor)

        applications = JobApplication.objects.select_related("graduate")
        stats = application_stats(applications)
        if request.query_params.get("status"):
            applications = applications.filter(status=request.query_params["status"])

        return Response({
            "stats": stats,
            "results": _application_data(applications[:200]),
        })


class MyApplicationsView(APIView):
    """
    GET /api/applications/mine/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "applications.view_own")
        require_tenant(actor)

        graduate = graduate_for_user(actor.user)
        if graduate is None:
            return Response({"detail": "Graduate profile not found."}, status=status.HTTP_404_NOT_FOUND)

        applications = graduate.applications.select_related("graduate")
        return Response({
            "stats": application_stats(applications),
            "results": _application_data(applications),
        })


class ApplicationStatusView(APIView):
    """
    PATCH /api/applications/<pk>/status/    body: {"status": "...", "notes": ""}

    Called by the employer inside the applicant's institution context.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_tenant(actor)
        application = get_object_or_404(JobApplication.objects.select_related("graduate"), pk=pk)

        serializer = ApplicationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = update_application_status(actor, application, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(_application_data([result.data["application"]])[0])


class WithdrawApplicationView(APIView):
    """
    POST /api/applications/<pk>/withdraw/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require_tenant(actor)
        application = get_object_or_404(JobApplication.objects.select_related("graduate"), pk=pk)

        result = withdraw_application(actor, application)
        if not result.success:
            return _fail(result)
        return Response(_application_data([result.data["application"]])[0])


class JobApplicationsView(APIView):
    """
    GET /api/jobs/<pk>/applications/

    Every application for one of the employer's jobs, collected across
    institutions. Each row carries the institution slug so the employer
    can act on it with the X-Tenant-ID header.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "applications.review")
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)
        if not actor.is_super_admin and job.employer.user_id != actor.user.id:
            return Response({"detail": "Job not found."}, status=status.HTTP_404_NOT_FOUND)

        tenants = Tenant.objects.active()
        if job.tenant_id:
            tenants = tenants.filter(id=job.tenant_id)

        results = []
        for tenant in tenants:
            with tenant.run():
                applications = list(
                    JobApplication.objects.select_related("graduate").filter(job_id=job.id)
                )
                for row in JobApplicationSerializer(
                    applications, many=True, context={"jobs": {job.id: job}}
                ).data:
                    row["institution"] = tenant.slug
                    results.append(row)

        results.sort(key=lambda r: float(r["match_score"] or 0), reverse=True)
        return Response({"job": job.id, "count": len(results), "results": results})
