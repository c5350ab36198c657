from django.urls import path

from analytics.views import (
    AnalyticsIndexView,
    CareerPathAnalysisView,
    DemographicOutcomesView,
    EmploymentRecordDetailView,
    EmploymentRecordListCreateView,
    ExportView,
    FilterOptionsView,
    GenerateDemographicOutcomesView,
    GenerateIndustryPlacementView,
    GenerateProgramEffectivenessView,
    GenerateSnapshotView,
    IndustryPlacementView,
    OverviewView,
    ProgramEffectivenessView,
    SalaryAnalysisView,
    SalaryRecordDetailView,
    SalaryRecordListCreateView,
    SnapshotListView,
    TrendAnalysisView,
)

app_name = "analytics"

urlpatterns = [
    # ==========================================================================
    # Reports
    # ==========================================================================
    path("", AnalyticsIndexView.as_view(), name="index"),
    path("overview/", OverviewView.as_view(), name="overview"),
    path("program-effectiveness/", ProgramEffectivenessView.as_view(), name="program-effectiveness"),
    path(
        "program-effectiveness/generate/",
        GenerateProgramEffectivenessView.as_view(),
        name="program-effectiveness-generate",
    ),
    path("salary-analysis/", SalaryAnalysisView.as_view(), name="salary-analysis"),
    path("industry-placement/", IndustryPlacementView.as_view(), name="industry-placement"),
    path(
        "industry-placement/generate/",
        GenerateIndustryPlacementView.as_view(),
        name="industry-placement-generate",
    ),
    path("demographic-outcomes/", DemographicOutcomesView.as_view(), name="demographic-outcomes"),
    path(
        "demographic-outcomes/generate/",
        GenerateDemographicOutcomesView.as_view(),
        name="demographic-outcomes-generate",
    ),
    path("career-path-analysis/", CareerPathAnalysisView.as_view(), name="career-path-analysis"),
    path("trend-analysis/", TrendAnalysisView.as_view(), name="trend-analysis"),
    path("filter-options/", FilterOptionsView.as_view(), name="filter-options"),

    # ==========================================================================
    # Snapshots & export
    # ==========================================================================
    path("generate-snapshot/", GenerateSnapshotView.as_view(), name="generate-snapshot"),
    path("snapshots/", SnapshotListView.as_view(), name="snapshots"),
    path("export/", ExportView.as_view(), name="export"),

    # ==========================================================================
    # Source records
    # ==========================================================================
    path("records/employment/", EmploymentRecordListCreateView.as_view(), name="employment-records"),
    path("records/employment/<int:pk>/", EmploymentRecordDetailView.as_view(), name="employment-record-detail"),
    path("records/salary/", SalaryRecordListCreateView.as_view(), name="salary-records"),
    path("records/salary/<int:pk>/", SalaryRecordDetailView.as_view(), name="salary-record-detail"),
]
