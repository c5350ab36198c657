"""
Employer and job posting API.

Thin views that delegate mutations to employers.commands.
"""
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounts.models import Role
from employers.commands import (
    create_job,
    delete_job,
    transition_job,
    update_employer_profile,
    update_job,
    verify_employer,
)
from employers.models import Employer, Job
from employers.serializers import (
    EmployerSerializer,
    EmployerUpdateSerializer,
    EmployerVerifySerializer,
    JobActionSerializer,
    JobSerializer,
    JobWriteSerializer,
)


def _fail(result):
    code = status.HTTP_404_NOT_FOUND if result.not_found else status.HTTP_400_BAD_REQUEST
    return Response({"detail": result.error}, status=code)


# =============================================================================
# Employers
# =============================================================================

class EmployerListView(APIView):
    """
    GET /api/employers/

    Query params:
    - verification_status: pending | under_review | verified | rejected
    - search: company name contains
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "employers.view")

        employers = Employer.objects.select_related("user")
        verification_status = request.query_params.get("verification_status")
        if verification_status:
            employers = employers.filter(verification_status=verification_status)
        search = request.query_params.get("search")
        if search:
            employers = employers.filter(company_name__icontains=search)

        return Response(EmployerSerializer(employers, many=True).data)


class EmployerProfileView(APIView):
    """
    GET   /api/employers/me/
    PATCH /api/employers/me/
    """
    permission_classes = [IsAuthenticated]

    def _get_employer(self, actor):
        return get_object_or_404(Employer, user=actor.user)

    def get(self, request):
        actor = resolve_actor(request)
        return Response(EmployerSerializer(self._get_employer(actor)).data)

    def patch(self, request):
        actor = resolve_actor(request)
        employer = self._get_employer(actor)

        serializer = EmployerUpdateSerializer(employer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_employer_profile(actor, employer, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(EmployerSerializer(result.data["employer"]).data)


class EmployerVerifyView(APIView):
    """
    POST /api/employers/<pk>/verify/    body: {"decision": "verified" | "rejected" | "under_review", "reason": ""}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        employer = get_object_or_404(Employer, pk=pk)

        serializer = EmployerVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = verify_employer(actor, employer, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(EmployerSerializer(result.data["employer"]).data)


# =============================================================================
# Jobs
# =============================================================================

class JobListCreateView(APIView):
    """
    GET  /api/jobs/

    - Employers with ?mine=1: their own postings (any status)
    - Super admins: every posting (?status= filter)
    - Everyone else: open postings visible to the current institution

    Query params: search, job_type, work_arrangement, experience_level, location

    POST /api/jobs/   create a posting (employers)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "jobs.view")

        params = request.query_params
        jobs = Job.objects.select_related("employer")

        if params.get("mine") and actor.has_role(Role.EMPLOYER):
            jobs = jobs.filter(employer__user=actor.user)
        elif actor.is_super_admin:
            if params.get("status"):
                jobs = jobs.filter(status=params["status"])
        else:
            jobs = jobs.open()
            if actor.tenant_id is not None:
                jobs = jobs.for_tenant(actor.tenant_id)
            else:
                jobs = jobs.filter(tenant__isnull=True)

        search = params.get("search")
        if search:
            jobs = jobs.filter(
                Q(title__icontains=search)
                | Q(description__icontains=search)
                | Q(employer__company_name__icontains=search)
            )
        for field in ("job_type", "work_arrangement", "experience_level"):
            if params.get(field):
                jobs = jobs.filter(**{field: params[field]})
        if params.get("location"):
            jobs = jobs.filter(location__icontains=params["location"])

        return Response(JobSerializer(jobs[:100], many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = JobWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_job(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(JobSerializer(result.data["job"]).data, status=status.HTTP_201_CREATED)


class JobDetailView(APIView):
    """
    GET    /api/jobs/<pk>/   (counts a view unless the owner is looking)
    PATCH  /api/jobs/<pk>/
    DELETE /api/jobs/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "jobs.view")
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)

        is_owner = job.employer.user_id == actor.user.id
        if not (is_owner or actor.is_super_admin) and not job.is_open:
            return Response({"detail": "Job not found."}, status=status.HTTP_404_NOT_FOUND)
        if not is_owner:
            job.increment_view_count()

        return Response(JobSerializer(job).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)

        serializer = JobWriteSerializer(job, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_job(actor, job, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(JobSerializer(result.data["job"]).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)

        result = delete_job(actor, job)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class JobActionView(APIView):
    """
    POST /api/jobs/<pk>/<action>/

    action: approve | reject | pause | resume | fill | extend
    body: {"reason": "..."} for reject, {"days": 30} for extend
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, action):
        actor = resolve_actor(request)
        job = get_object_or_404(Job.objects.select_related("employer"), pk=pk)

        serializer = JobActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = transition_job(actor, job, action, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(JobSerializer(result.data["job"]).data)
