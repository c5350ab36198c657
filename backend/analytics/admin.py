from django.contrib import admin

from analytics.models import (
    CareerOutcomeSnapshot,
    CareerPath,
    CareerTrend,
    DemographicOutcome,
    EmploymentRecord,
    IndustryPlacement,
    ProgramEffectiveness,
    SalaryRecord,
)


@admin.register(EmploymentRecord)
class EmploymentRecordAdmin(admin.ModelAdmin):
    list_display = ("graduate", "company", "title", "industry", "start_date", "is_current")
    list_filter = ("is_current", "industry")
    search_fields = ("company", "title")
    raw_id_fields = ("graduate",)


@admin.register(SalaryRecord)
class SalaryRecordAdmin(admin.ModelAdmin):
    list_display = ("graduate", "salary", "salary_type", "annualized_salary", "effective_date")
    list_filter = ("salary_type", "currency")
    raw_id_fields = ("graduate",)


@admin.register(CareerPath)
class CareerPathAdmin(admin.ModelAdmin):
    list_display = ("graduate", "path_type", "total_positions", "promotions", "success_score")
    list_filter = ("path_type",)
    raw_id_fields = ("graduate",)


@admin.register(ProgramEffectiveness)
class ProgramEffectivenessAdmin(admin.ModelAdmin):
    list_display = ("program_name", "graduation_year", "total_graduates", "overall_effectiveness_score")
    list_filter = ("graduation_year",)


@admin.register(IndustryPlacement)
class IndustryPlacementAdmin(admin.ModelAdmin):
    list_display = ("industry", "program", "graduation_year", "placement_count", "retention_rate")
    list_filter = ("industry", "graduation_year")


@admin.register(DemographicOutcome)
class DemographicOutcomeAdmin(admin.ModelAdmin):
    list_display = ("demographic_type", "demographic_value", "graduation_year", "employment_rate")
    list_filter = ("demographic_type",)


@admin.register(CareerTrend)
class CareerTrendAdmin(admin.ModelAdmin):
    list_display = ("trend_type", "category", "category_value", "period_start", "value", "change_percentage")
    list_filter = ("trend_type", "category")


@admin.register(CareerOutcomeSnapshot)
class CareerOutcomeSnapshotAdmin(admin.ModelAdmin):
    list_display = ("period_type", "period_start", "period_end", "total_graduates", "tenant")
    list_filter = ("period_type",)
