"""
Query/body validation for the career analytics API.

Every filter is optional unless stated; blank strings are dropped so the
service only sees filters that were actually supplied.
"""
from rest_framework import serializers

from analytics.exports import ExportFormat
from analytics.models import CareerOutcomeSnapshot, CareerPath, EmploymentRecord, SalaryRecord
from graduates.models import Graduate

EXPORT_DATA_TYPES = (
    "overview",
    "program_effectiveness",
    "salary_analysis",
    "industry_placement",
    "demographic_outcomes",
    "career_paths",
    "trends",
)


class _FilterSerializer(serializers.Serializer):
    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        return {k: v for k, v in values.items() if v not in (None, "")}


class OverviewFilterSerializer(_FilterSerializer):
    graduation_year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)
    department = serializers.CharField(required=False, allow_blank=True, max_length=255)
    industry = serializers.CharField(required=False, allow_blank=True, max_length=100)


class AnalyticsFilterSerializer(OverviewFilterSerializer):
    """Union of filters accepted by the combined index endpoint."""

    demographic_type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    demographic_value = serializers.CharField(required=False, allow_blank=True, max_length=100)


class ProgramEffectivenessFilterSerializer(_FilterSerializer):
    graduation_year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)
    department = serializers.CharField(required=False, allow_blank=True, max_length=255)


class GenerateProgramEffectivenessSerializer(serializers.Serializer):
    program = serializers.CharField(max_length=255)
    graduation_year = serializers.IntegerField(min_value=1900, max_value=2100)


class SalaryFilterSerializer(OverviewFilterSerializer):
    years_since_graduation = serializers.IntegerField(required=False, min_value=0, max_value=60)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.pop("date_from", None)
        date_to = attrs.pop("date_to", None)
        if date_from or date_to:
            if not (date_from and date_to):
                raise serializers.ValidationError({"date_range": "Both date_from and date_to are required."})
            if date_from > date_to:
                raise serializers.ValidationError({"date_range": "date_from must be before date_to."})
            attrs["date_range"] = (date_from, date_to)
        return attrs


class IndustryPlacementFilterSerializer(_FilterSerializer):
    graduation_year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)
    industry = serializers.CharField(required=False, allow_blank=True, max_length=100)


class GenerateIndustryPlacementSerializer(serializers.Serializer):
    industry = serializers.CharField(max_length=100)
    graduation_year = serializers.IntegerField(min_value=1900, max_value=2100)
    program = serializers.CharField(max_length=255)


class DemographicFilterSerializer(_FilterSerializer):
    demographic_type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    demographic_value = serializers.CharField(required=False, allow_blank=True, max_length=100)
    graduation_year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)


class GenerateDemographicOutcomesSerializer(serializers.Serializer):
    graduation_year = serializers.IntegerField(required=False, allow_null=True, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class CareerPathFilterSerializer(_FilterSerializer):
    path_type = serializers.ChoiceField(required=False, choices=CareerPath.PathType.choices)
    graduation_year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)


class TrendFilterSerializer(_FilterSerializer):
    trend_type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    category = serializers.CharField(required=False, allow_blank=True, max_length=50)
    category_value = serializers.CharField(required=False, allow_blank=True, max_length=255)
    period_months = serializers.IntegerField(required=False, min_value=1, max_value=60)


class SnapshotScopeSerializer(serializers.Serializer):
    graduation_year = serializers.IntegerField(required=False, allow_null=True, min_value=1900, max_value=2100)
    program = serializers.CharField(required=False, allow_blank=True, max_length=255)
    department = serializers.CharField(required=False, allow_blank=True, max_length=255)
    demographic_group = serializers.RegexField(
        r"^[\w-]+:.+$",
        required=False,
        allow_blank=True,
        max_length=150,
        error_messages={"invalid": "Use the form 'type:value', e.g. 'gender:female'."},
    )


class GenerateSnapshotSerializer(SnapshotScopeSerializer):
    period_type = serializers.ChoiceField(choices=CareerOutcomeSnapshot.PeriodType.choices)
    period_start = serializers.DateField()
    period_end = serializers.DateField()

    def validate(self, attrs):
        if attrs["period_end"] <= attrs["period_start"]:
            raise serializers.ValidationError({"period_end": "period_end must be after period_start."})
        return attrs


class SnapshotFilterSerializer(_FilterSerializer, SnapshotScopeSerializer):
    period_type = serializers.ChoiceField(required=False, choices=CareerOutcomeSnapshot.PeriodType.choices)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)


class ExportSerializer(serializers.Serializer):
    format = serializers.ChoiceField(choices=ExportFormat.CHOICES)
    data_type = serializers.ChoiceField(choices=EXPORT_DATA_TYPES)
    filters = serializers.DictField(required=False, default=dict)


# =============================================================================
# Source record input
# =============================================================================

class _GraduateRecordSerializer(serializers.ModelSerializer):
    def get_fields(self):
        fields = super().get_fields()
        # Evaluated per request so the tenant filter is applied
        fields["graduate"].queryset = Graduate.objects.all()
        return fields


class EmploymentRecordSerializer(_GraduateRecordSerializer):
    skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = EmploymentRecord
        fields = (
            "id",
            "graduate",
            "company",
            "title",
            "industry",
            "location",
            "start_date",
            "end_date",
            "is_current",
            "job_satisfaction",
            "is_leadership",
            "skills",
        )
        read_only_fields = ("id",)

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "end_date cannot be before start_date."})
        if end and attrs.get("is_current"):
            raise serializers.ValidationError({"is_current": "A position with an end date is not current."})
        return attrs


class SalaryRecordSerializer(_GraduateRecordSerializer):
    class Meta:
        model = SalaryRecord
        fields = (
            "id",
            "graduate",
            "salary",
            "salary_type",
            "annualized_salary",
            "currency",
            "effective_date",
            "industry",
            "years_since_graduation",
        )
        read_only_fields = ("id", "annualized_salary")

    def validate_salary(self, value):
        if value < 0:
            raise serializers.ValidationError("Salary cannot be negative.")
        return value
