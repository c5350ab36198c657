# tests/test_analytics.py
"""
Tests for career outcome analytics.

Tests cover:
- Overview and salary statistics
- Program effectiveness generation and scoring
- Demographic outcomes
- Snapshots and the trend points they record
- The analytics API, exports and source records
"""

import csv
import io
import json
import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.utils import timezone

from analytics.models import CareerOutcomeSnapshot, CareerPath, CareerTrend, EmploymentRecord, SalaryRecord
from analytics.services import (
    CareerOutcomeAnalyticsService,
    add_months,
    generate_snapshots_for_all_tenants,
    parse_demographic_group,
    percentile,
    previous_period,
)
from graduates.models import Graduate
from tenant.models import Tenant


@pytest.fixture
def outcomes(tenant, graduate):
    """A 2022 Computer Science graduate employed since September 2022."""
    with tenant.run():
        graduate.demographics = {"gender": "female"}
        graduate.save()
        EmploymentRecord.objects.create(
            graduate=graduate,
            company="Acme Ltd",
            title="Backend Engineer",
            industry="Technology",
            location="Lagos",
            start_date=date(2022, 9, 1),
            is_current=True,
            job_satisfaction=4,
            skills=["python", "postgres"],
        )
        SalaryRecord.objects.create(graduate=graduate, salary=Decimal("50000"), effective_date=date(2022, 10, 1))
        SalaryRecord.objects.create(
            graduate=graduate,
            salary=Decimal("5000"),
            salary_type=SalaryRecord.SalaryType.MONTHLY,
            effective_date=date(2024, 3, 1),
            industry="Technology",
        )
    return graduate


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:

    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_percentile_interpolates(self):
        assert percentile([10, 20, 30, 40], 50) == 25.0
        assert percentile([], 90) == 0.0

    def test_parse_demographic_group(self):
        assert parse_demographic_group("gender:female") == ("gender", "female")
        assert parse_demographic_group("gender") is None
        assert parse_demographic_group(":x") is None

    def test_previous_period(self):
        today = date(2025, 5, 14)
        assert previous_period("monthly", today) == (date(2025, 4, 1), date(2025, 4, 30))
        assert previous_period("quarterly", today) == (date(2025, 1, 1), date(2025, 3, 31))
        assert previous_period("yearly", today) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_effectiveness_score(self):
        rates = {"6_months": 100.0, "1_year": 100.0, "2_years": 100.0}
        salaries = {"6_months": 50000.0, "2_years": 60000.0}
        # 30 + 30 + 20 + 20% growth * 0.2
        assert CareerOutcomeAnalyticsService.effectiveness_score(rates, salaries) == 84.0

    def test_salary_is_annualized(self):
        assert SalaryRecord.annualize(Decimal("5000"), "monthly") == Decimal("60000")


# =============================================================================
# Service
# =============================================================================

@pytest.mark.django_db
class TestAnalyticsService:

    def test_overview(self, tenant, outcomes):
        with tenant.run():
            overview = CareerOutcomeAnalyticsService().overview()
        assert overview["total_alumni"] == 1
        assert overview["employment_rate"] == 100.0
        assert overview["tracking_rate"] == 100.0
        assert overview["top_industries"] == {"Technology": 1}

    def test_overview_is_tenant_scoped(self, second_tenant, outcomes):
        with second_tenant.run():
            assert CareerOutcomeAnalyticsService().overview()["total_alumni"] == 0

    def test_generate_program_effectiveness(self, tenant, outcomes, job):
        with tenant.run():
            row = CareerOutcomeAnalyticsService().generate_program_effectiveness("Computer Science", 2022)
        assert row["total_graduates"] == 1
        assert row["department"] == "Engineering"
        assert row["employment_rate_6_months"] == 100.0
        assert row["avg_starting_salary"] == 50000.0
        assert row["avg_salary_2_years"] == 60000.0
        assert row["overall_effectiveness_score"] == 84.0
        assert row["skills_gaps"] == ["django"]

    def test_generate_program_effectiveness_upserts(self, tenant, outcomes):
        service = CareerOutcomeAnalyticsService()
        with tenant.run():
            first = service.generate_program_effectiveness("Computer Science", 2022)
            second = service.generate_program_effectiveness("Computer Science", 2022)
            assert len(service.program_effectiveness()) == 1
        assert first["id"] == second["id"]

    def test_generate_without_graduates(self, tenant, outcomes):
        with tenant.run():
            assert CareerOutcomeAnalyticsService().generate_program_effectiveness("Law", 2022) is None

    def test_salary_analysis(self, tenant, outcomes):
        with tenant.run():
            analysis = CareerOutcomeAnalyticsService().salary_analysis()
        assert analysis["overall_statistics"]["count"] == 2
        assert analysis["overall_statistics"]["mean"] == 55000.0
        assert [t["year"] for t in analysis["growth_trends"]] == [2022, 2024]
        assert analysis["growth_trends"][1]["change_percentage"] == 20.0

    def test_demographic_outcomes(self, tenant, outcomes):
        with tenant.run():
            rows = CareerOutcomeAnalyticsService().generate_demographic_outcomes(graduation_year=2022)
        assert len(rows) == 1
        assert rows[0]["demographic_type"] == "gender"
        assert rows[0]["employment_rate"] == 100.0

    def test_industry_placement(self, tenant, outcomes):
        with tenant.run():
            row = CareerOutcomeAnalyticsService().generate_industry_placement("Technology", 2022, "Computer Science")
        assert row["placement_count"] == 1
        assert row["retention_rate"] == 100.0
        assert row["top_companies"] == {"Acme Ltd": 1}


# =============================================================================
# Snapshots
# =============================================================================

@pytest.mark.django_db
class TestSnapshots:

    def test_snapshot_metrics_and_trends(self, tenant, outcomes):
        service = CareerOutcomeAnalyticsService()
        with tenant.run():
            first = service.generate_snapshot("monthly", date(2024, 4, 1), date(2024, 4, 30))
            second = service.generate_snapshot("monthly", date(2024, 5, 1), date(2024, 5, 31))
            trends = list(CareerTrend.objects.filter(trend_type="employment_rate").order_by("period_start"))

        assert first["metrics"]["employment_rate"] == 100.0
        assert first["metrics"]["average_salary"] == 60000.0
        assert second["total_graduates"] == 1
        assert len(trends) == 2
        assert trends[0].category == "overall"
        assert trends[0].change_percentage is None
        assert trends[1].change_percentage == 0

    def test_scoped_snapshot_trend_category(self, tenant, outcomes):
        with tenant.run():
            CareerOutcomeAnalyticsService().generate_snapshot(
                "monthly", date(2024, 4, 1), date(2024, 4, 30), {"program": "Computer Science"}
            )
            trend = CareerTrend.objects.first()
        assert (trend.category, trend.category_value) == ("program", "Computer Science")

    def test_no_graduates_no_snapshot(self, tenant):
        with tenant.run():
            assert CareerOutcomeAnalyticsService().generate_snapshot(
                "monthly", date(2024, 4, 1), date(2024, 4, 30)
            ) is None

    def test_all_tenants(self, tenant, second_tenant, outcomes):
        result = generate_snapshots_for_all_tenants("yearly")
        assert result["tenants"]["unilag"]["status"] == "created"
        assert result["tenants"]["covenant"] == {"status": "no_data"}
        assert CareerOutcomeSnapshot.all_tenants.count() == 1

    def test_read_only_tenant_skipped(self, tenant, outcomes):
        tenant.status = Tenant.Status.READ_ONLY
        tenant.save()

        result = generate_snapshots_for_all_tenants("yearly")
        assert "unilag" not in result["tenants"]
        assert CareerOutcomeSnapshot.all_tenants.count() == 0
        assert CareerTrend.all_tenants.count() == 0


# =============================================================================
# Career paths, trends and filter options
# =============================================================================

@pytest.mark.django_db
class TestPathsTrendsAndOptions:

    def test_career_paths_empty(self, tenant):
        with tenant.run():
            result = CareerOutcomeAnalyticsService().career_path_analysis()
        assert result == {
            "path_distribution": [],
            "success_metrics": [],
            "progression_patterns": {},
            "leadership_development": {},
        }

    def test_career_path_sections(self, tenant, graduate):
        with tenant.run():
            other = Graduate.objects.create(
                tenant_id=tenant.id, name="Bola", email="bola@unilag.test", graduation_year=2022
            )
            CareerPath.objects.create(
                graduate=graduate,
                path_type=CareerPath.PathType.LINEAR,
                total_positions=3,
                promotions=2,
                leadership_roles=1,
                years_to_first_promotion=Decimal("1.5"),
                success_score=Decimal("80"),
            )
            CareerPath.objects.create(
                graduate=other,
                path_type=CareerPath.PathType.ENTREPRENEURIAL,
                total_positions=1,
                industry_changes=2,
                success_score=Decimal("60"),
            )
            result = CareerOutcomeAnalyticsService().career_path_analysis()

        assert result["path_distribution"] == [
            {"path_type": "entrepreneurial", "count": 1, "percentage": 50.0},
            {"path_type": "linear", "count": 1, "percentage": 50.0},
        ]
        assert [row["path_type"] for row in result["success_metrics"]] == ["entrepreneurial", "linear"]
        assert result["success_metrics"][1]["average_success_score"] == 80.0
        assert result["progression_patterns"]["average_positions"] == 2.0
        assert result["progression_patterns"]["average_years_to_first_promotion"] == 1.5
        assert result["leadership_development"] == {
            "graduates_in_leadership": 1,
            "leadership_rate": 50.0,
            "average_leadership_roles": 1.0,
        }

    def test_trend_look_back_window(self, tenant):
        today = timezone.localdate()
        with tenant.run():
            for months_ago, value in ((2, 70), (10, 60)):
                start = add_months(today, -months_ago)
                CareerTrend.objects.create(
                    trend_type="employment_rate",
                    period_start=start,
                    period_end=start,
                    value=Decimal(value),
                )
            service = CareerOutcomeAnalyticsService()
            recent = service.trend_analysis({"period_months": 6})
            everything = service.trend_analysis()

        assert [row["value"] for row in recent] == [70.0]
        assert [row["value"] for row in everything] == [70.0, 60.0]

    def test_filter_options(self, tenant, outcomes):
        with tenant.run():
            options = CareerOutcomeAnalyticsService().filter_options()
        assert options["graduation_years"] == [2022]
        assert options["programs"] == ["Computer Science"]
        assert options["departments"] == ["Engineering"]
        assert options["industries"] == ["Technology"]
        assert options["demographic_types"] == ["gender"]
        assert "entrepreneurial" in options["path_types"]
        assert options["trend_types"] == []

    def test_snapshot_list_limit(self, tenant):
        with tenant.run():
            for day in range(1, 53):
                CareerOutcomeSnapshot.objects.create(
                    period_type="monthly",
                    period_start=date(2020, 1, 1) + timedelta(days=day),
                    period_end=date(2020, 1, 1) + timedelta(days=day),
                )
            service = CareerOutcomeAnalyticsService()
            default = service.snapshots()
            limited = service.snapshots({"limit": 3})

        assert len(default) == 50
        assert len(limited) == 3
        assert limited[0]["period_start"] == date(2020, 2, 22)


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestAnalyticsAPI:

    def test_overview_endpoint(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).get("/api/career-analytics/overview/?graduation_year=2022")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["total_alumni"] == 1

    def test_graduates_cannot_read_analytics(self, client_for, graduate_user, tenant):
        response = client_for(graduate_user, tenant).get("/api/career-analytics/overview/")
        assert response.status_code == 403

    def test_analytics_need_institution(self, client_for, super_admin):
        response = client_for(super_admin).get("/api/career-analytics/overview/")
        assert response.status_code == 400

    def test_generate_program_effectiveness_404_without_data(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/program-effectiveness/generate/",
            {"program": "Law", "graduation_year": 2022},
            format="json",
        )
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_generate_snapshot_endpoint(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/generate-snapshot/",
            {"period_type": "monthly", "period_start": "2024-04-01", "period_end": "2024-04-30"},
            format="json",
        )
        assert response.status_code == 201
        listing = client_for(institution_admin, tenant).get("/api/career-analytics/snapshots/")
        assert len(listing.json()["data"]) == 1

    def test_snapshot_period_must_be_ordered(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/generate-snapshot/",
            {"period_type": "monthly", "period_start": "2024-04-30", "period_end": "2024-04-01"},
            format="json",
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("limit", ["0", "101"])
    def test_snapshot_limit_out_of_range(self, client_for, institution_admin, tenant, limit):
        response = client_for(institution_admin, tenant).get(f"/api/career-analytics/snapshots/?limit={limit}")
        assert response.status_code == 400

    def test_trend_window_out_of_range(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).get("/api/career-analytics/trend-analysis/?period_months=61")
        assert response.status_code == 400

    def test_career_path_endpoint_without_data(self, client_for, institution_admin, tenant):
        response = client_for(institution_admin, tenant).get("/api/career-analytics/career-path-analysis/")
        assert response.status_code == 200
        assert response.json()["data"]["path_distribution"] == []

    def test_filter_options_endpoint(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).get("/api/career-analytics/filter-options/")
        assert response.status_code == 200
        assert response.json()["data"]["programs"] == ["Computer Science"]

    def test_csv_export(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/export/",
            {"format": "csv", "data_type": "overview"},
            format="json",
        )
        assert response.status_code == 200
        assert response["Content-Disposition"].startswith('attachment; filename="unilag_overview_')
        rows = list(csv.reader(io.StringIO(response.content.decode("utf-8-sig"))))
        assert rows[0] == ["Section", "Name", "Value"]
        assert any(row[1] == "total_alumni" and row[2] == "1" for row in rows[1:])

    def test_json_export_keeps_structure(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/export/",
            {"format": "json", "data_type": "salary_analysis"},
            format="json",
        )
        payload = json.loads(response.content)
        assert payload["overall_statistics"]["count"] == 2

    def test_xlsx_export(self, client_for, institution_admin, tenant, outcomes):
        response = client_for(institution_admin, tenant).post(
            "/api/career-analytics/export/",
            {"format": "xlsx", "data_type": "overview"},
            format="json",
        )
        assert response.status_code == 200
        assert response.content[:2] == b"PK"

    def test_employment_record_endpoint(self, client_for, institution_admin, tenant, graduate):
        client = client_for(institution_admin, tenant)
        response = client.post(
            "/api/career-analytics/records/employment/",
            {
                "graduate": graduate.id,
                "company": "Globex",
                "title": "Analyst",
                "start_date": "2023-01-01",
                "end_date": "2022-01-01",
            },
            format="json",
        )
        assert response.status_code == 400

        response = client.post(
            "/api/career-analytics/records/employment/",
            {"graduate": graduate.id, "company": "Globex", "title": "Analyst", "start_date": "2023-01-01"},
            format="json",
        )
        assert response.status_code == 201
        with tenant.run():
            assert EmploymentRecord.objects.get().tenant_id == tenant.id

    def test_salary_record_for_foreign_graduate_rejected(
        self, client_for, institution_admin, tenant, second_tenant, graduate
    ):
        institution_admin.institution = second_tenant
        institution_admin.save()
        response = client_for(institution_admin, second_tenant).post(
            "/api/career-analytics/records/salary/",
            {"graduate": graduate.id, "salary": "1000.00", "effective_date": "2023-01-01"},
            format="json",
        )
        assert response.status_code == 400
