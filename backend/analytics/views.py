"""
Career analytics API.

All endpoints run against the tenant in context and answer with
{"success": true, "data": ...}. Generation endpoints answer 404 when the
institution has no source data for the requested scope.
"""
import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, require_tenant, resolve_actor
from analytics.exports import create_export_response, prepare_analytics_export
from analytics.models import EmploymentRecord, SalaryRecord
from analytics.serializers import (
    AnalyticsFilterSerializer,
    CareerPathFilterSerializer,
    DemographicFilterSerializer,
    EmploymentRecordSerializer,
    ExportSerializer,
    GenerateDemographicOutcomesSerializer,
    GenerateIndustryPlacementSerializer,
    GenerateProgramEffectivenessSerializer,
    GenerateSnapshotSerializer,
    IndustryPlacementFilterSerializer,
    OverviewFilterSerializer,
    ProgramEffectivenessFilterSerializer,
    SalaryFilterSerializer,
    SalaryRecordSerializer,
    SnapshotFilterSerializer,
    TrendFilterSerializer,
)
from analytics.services import CareerOutcomeAnalyticsService

logger = logging.getLogger(__name__)


def _ok(data, code=status.HTTP_200_OK):
    return Response({"success": True, "data": data}, status=code)


def _no_data(message):
    return Response({"success": False, "message": message}, status=status.HTTP_404_NOT_FOUND)


def _filters(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


class _AnalyticsView(APIView):
    permission_classes = [IsAuthenticated]
    permission = "analytics.view"

    def check_actor(self, request):
        actor = resolve_actor(request)
        require(actor, self.permission)
        require_tenant(actor)
        return actor

    @property
    def service(self):
        return CareerOutcomeAnalyticsService()


# =============================================================================
# Reports
# =============================================================================

class AnalyticsIndexView(_AnalyticsView):
    """GET /api/career-analytics/ - every report in one payload."""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(AnalyticsFilterSerializer, request.query_params)
        return _ok(self.service.generate_outcome_analytics(filters))


class OverviewView(_AnalyticsView):
    """
    GET /api/career-analytics/overview/

    Query params: graduation_year, program, department, industry
    """

    def get(self, request):
        self.check_actor(request)
        filters = _filters(OverviewFilterSerializer, request.query_params)
        return _ok(self.service.overview(filters))


class ProgramEffectivenessView(_AnalyticsView):
    """GET /api/career-analytics/program-effectiveness/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(ProgramEffectivenessFilterSerializer, request.query_params)
        return _ok(self.service.program_effectiveness(filters))


class GenerateProgramEffectivenessView(_AnalyticsView):
    """POST /api/career-analytics/program-effectiveness/generate/"""
    permission = "analytics.generate"

    def post(self, request):
        self.check_actor(request)
        params = _filters(GenerateProgramEffectivenessSerializer, request.data)
        data = self.service.generate_program_effectiveness(params["program"], params["graduation_year"])
        if data is None:
            return _no_data("No data available for the specified program and year")
        return _ok(data)


class SalaryAnalysisView(_AnalyticsView):
    """
    GET /api/career-analytics/salary-analysis/

    Query params: graduation_year, program, industry, years_since_graduation,
    date_from + date_to
    """

    def get(self, request):
        self.check_actor(request)
        filters = _filters(SalaryFilterSerializer, request.query_params)
        return _ok(self.service.salary_analysis(filters))


class IndustryPlacementView(_AnalyticsView):
    """GET /api/career-analytics/industry-placement/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(IndustryPlacementFilterSerializer, request.query_params)
        return _ok(self.service.industry_placement(filters))


class GenerateIndustryPlacementView(_AnalyticsView):
    """POST /api/career-analytics/industry-placement/generate/"""
    permission = "analytics.generate"

    def post(self, request):
        self.check_actor(request)
        params = _filters(GenerateIndustryPlacementSerializer, request.data)
        data = self.service.generate_industry_placement(
            params["industry"], params["graduation_year"], params["program"]
        )
        if data is None:
            return _no_data("No data available for the specified industry, program and year")
        return _ok(data)


class DemographicOutcomesView(_AnalyticsView):
    """GET /api/career-analytics/demographic-outcomes/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(DemographicFilterSerializer, request.query_params)
        return _ok(self.service.demographic_outcomes(filters))


class GenerateDemographicOutcomesView(_AnalyticsView):
    """POST /api/career-analytics/demographic-outcomes/generate/"""
    permission = "analytics.generate"

    def post(self, request):
        self.check_actor(request)
        params = _filters(GenerateDemographicOutcomesSerializer, request.data)
        rows = self.service.generate_demographic_outcomes(
            graduation_year=params.get("graduation_year"),
            program=params.get("program", ""),
        )
        if not rows:
            return _no_data("No demographic data available for the specified scope")
        return _ok(rows)


class CareerPathAnalysisView(_AnalyticsView):
    """GET /api/career-analytics/career-path-analysis/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(CareerPathFilterSerializer, request.query_params)
        return _ok(self.service.career_path_analysis(filters))


class TrendAnalysisView(_AnalyticsView):
    """GET /api/career-analytics/trend-analysis/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(TrendFilterSerializer, request.query_params)
        return _ok(self.service.trend_analysis(filters))


class FilterOptionsView(_AnalyticsView):
    """GET /api/career-analytics/filter-options/"""

    def get(self, request):
        self.check_actor(request)
        return _ok(self.service.filter_options())


# =============================================================================
# Snapshots
# =============================================================================

class GenerateSnapshotView(_AnalyticsView):
    """
    POST /api/career-analytics/generate-snapshot/

    Body: period_type, period_start, period_end and optional scope
    (graduation_year, program, department, demographic_group "type:value").
    """
    permission = "analytics.generate"

    def post(self, request):
        actor = self.check_actor(request)
        params = _filters(GenerateSnapshotSerializer, request.data)
        period_type = params.pop("period_type")
        period_start = params.pop("period_start")
        period_end = params.pop("period_end")

        snapshot = self.service.generate_snapshot(period_type, period_start, period_end, params)
        if snapshot is None:
            return _no_data("No graduates match the specified period and scope")

        logger.info(f"Snapshot {snapshot['id']} generated by {actor.user.email}")
        return _ok(snapshot, code=status.HTTP_201_CREATED)


class SnapshotListView(_AnalyticsView):
    """GET /api/career-analytics/snapshots/"""

    def get(self, request):
        self.check_actor(request)
        filters = _filters(SnapshotFilterSerializer, request.query_params)
        return _ok(self.service.snapshots(filters))


# =============================================================================
# Export
# =============================================================================

EXPORT_FILTERS = {
    "overview": OverviewFilterSerializer,
    "program_effectiveness": ProgramEffectivenessFilterSerializer,
    "salary_analysis": SalaryFilterSerializer,
    "industry_placement": IndustryPlacementFilterSerializer,
    "demographic_outcomes": DemographicFilterSerializer,
    "career_paths": CareerPathFilterSerializer,
    "trends": TrendFilterSerializer,
}


class ExportView(_AnalyticsView):
    """
    POST /api/career-analytics/export/

    Body:
    {
        "format": "csv" | "xlsx" | "json",
        "data_type": "overview" | "program_effectiveness" | ...,
        "filters": {...}
    }
    """
    permission = "analytics.export"

    def post(self, request):
        actor = self.check_actor(request)
        serializer = ExportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fmt = serializer.validated_data["format"]
        data_type = serializer.validated_data["data_type"]
        filters = _filters(EXPORT_FILTERS[data_type], serializer.validated_data["filters"])

        service = self.service
        payload = {
            "overview": service.overview,
            "program_effectiveness": service.program_effectiveness,
            "salary_analysis": service.salary_analysis,
            "industry_placement": service.industry_placement,
            "demographic_outcomes": service.demographic_outcomes,
            "career_paths": service.career_path_analysis,
            "trends": service.trend_analysis,
        }[data_type](filters)

        rows, columns = prepare_analytics_export(data_type, payload)
        title = data_type.replace("_", " ").title()
        filename = f"{actor.tenant.slug}_{data_type}_{timezone.localdate().isoformat()}"
        logger.info(f"Analytics export {data_type} ({fmt}) by {actor.user.email}")
        return create_export_response(rows, columns, fmt, filename, title=title, payload=payload)


# =============================================================================
# Source records
# =============================================================================

class EmploymentRecordListCreateView(_AnalyticsView):
    """
    GET  /api/career-analytics/records/employment/?graduate=<id>
    POST /api/career-analytics/records/employment/
    """
    permission = "graduates.manage"

    def get(self, request):
        self.check_actor(request)
        records = EmploymentRecord.objects.order_by("-start_date", "-id")
        graduate = request.query_params.get("graduate")
        if graduate:
            records = records.filter(graduate_id=graduate)
        return Response(EmploymentRecordSerializer(records[:200], many=True).data)

    def post(self, request):
        actor = self.check_actor(request)
        serializer = EmploymentRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.save(tenant_id=actor.tenant_id)
        return Response(EmploymentRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class EmploymentRecordDetailView(_AnalyticsView):
    """
    PATCH  /api/career-analytics/records/employment/<pk>/
    DELETE /api/career-analytics/records/employment/<pk>/
    """
    permission = "graduates.manage"

    def patch(self, request, pk):
        self.check_actor(request)
        record = get_object_or_404(EmploymentRecord, pk=pk)
        serializer = EmploymentRecordSerializer(record, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(EmploymentRecordSerializer(serializer.save()).data)

    def delete(self, request, pk):
        self.check_actor(request)
        get_object_or_404(EmploymentRecord, pk=pk).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class SalaryRecordListCreateView(_AnalyticsView):
    """
    GET  /api/career-analytics/records/salary/?graduate=<id>
    POST /api/career-analytics/records/salary/
    """
    permission = "graduates.manage"

    def get(self, request):
        self.check_actor(request)
        records = SalaryRecord.objects.order_by("-effective_date", "-id")
        graduate = request.query_params.get("graduate")
        if graduate:
            records = records.filter(graduate_id=graduate)
        return Response(SalaryRecordSerializer(records[:200], many=True).data)

    def post(self, request):
        actor = self.check_actor(request)
        serializer = SalaryRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.save(tenant_id=actor.tenant_id)
        return Response(SalaryRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class SalaryRecordDetailView(_AnalyticsView):
    """DELETE /api/career-analytics/records/salary/<pk>/"""
    permission = "graduates.manage"

    def delete(self, request, pk):
        self.check_actor(request)
        get_object_or_404(SalaryRecord, pk=pk).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
