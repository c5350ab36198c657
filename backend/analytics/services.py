"""
Career outcome analytics.

CareerOutcomeAnalyticsService computes every analytics view for the
current tenant. It must run inside a tenant context: the tenant-scoped
managers narrow all queries to the institution and the router sends them
to its database.

Read operations return plain dicts/lists ready for JSON. generate_*
operations persist aggregate rows and return None when there is no
source data to aggregate.
"""
import calendar
import logging
import statistics
from collections import Counter, defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.db.models import Avg, Count, Q
from django.utils import timezone

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
from graduates.models import Course, Graduate
from tenant.context import get_current_tenant_id

logger = logging.getLogger(__name__)

# Graduation is assumed to happen on June 1st of the graduation year
GRADUATION_MONTH = 6
GRADUATION_DAY = 1

TOP_LIMIT = 10
SNAPSHOT_LIMIT_DEFAULT = 50

PROGRAM_EFFECTIVENESS_FIELDS = (
    "id",
    "program_name",
    "department",
    "graduation_year",
    "total_graduates",
    "employment_rate_6_months",
    "employment_rate_1_year",
    "employment_rate_2_years",
    "avg_starting_salary",
    "avg_salary_1_year",
    "avg_salary_2_years",
    "top_employers",
    "skills_gaps",
    "overall_effectiveness_score",
    "generated_at",
)

INDUSTRY_PLACEMENT_FIELDS = (
    "id",
    "industry",
    "graduation_year",
    "program",
    "placement_count",
    "avg_starting_salary",
    "avg_current_salary",
    "retention_rate",
    "top_companies",
    "skills_in_demand",
    "generated_at",
)

DEMOGRAPHIC_OUTCOME_FIELDS = (
    "id",
    "demographic_type",
    "demographic_value",
    "graduation_year",
    "program",
    "total_graduates",
    "employed_count",
    "employment_rate",
    "avg_salary",
)

TREND_FIELDS = (
    "id",
    "trend_type",
    "category",
    "category_value",
    "period_start",
    "period_end",
    "value",
    "change_percentage",
    "data",
)

SNAPSHOT_FIELDS = (
    "id",
    "period_type",
    "period_start",
    "period_end",
    "graduation_year",
    "program",
    "department",
    "demographic_group",
    "metrics",
    "total_graduates",
    "tracked_graduates",
    "created_at",
)


# =============================================================================
# Helpers
# =============================================================================

def _round(value, places: int = 2) -> float:
    if value is None:
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _percent(part: int, whole: int) -> float:
    return _round(part / whole * 100) if whole else 0.0


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def graduation_date(year: int) -> date:
    return date(int(year), GRADUATION_MONTH, GRADUATION_DAY)


def percentile(values: list, pct: float) -> float:
    """Linear-interpolated percentile of a list of numbers (pct in 0-100)."""
    if not values:
        return 0.0
    ordered = sorted(values)
    if len(ordered) == 1:
        return float(ordered[0])
    rank = (len(ordered) - 1) * pct / 100
    low = int(rank)
    high = min(low + 1, len(ordered) - 1)
    return float(ordered[low] + (ordered[high] - ordered[low]) * (rank - low))


def _top_counts(queryset, field: str, limit: int = TOP_LIMIT) -> dict:
    rows = (
        queryset.exclude(**{field: ""})
        .values(field)
        .annotate(count=Count("id"))
        .order_by("-count", field)[:limit]
    )
    return {row[field]: row["count"] for row in rows}


def _rows(queryset, fields) -> list:
    return [
        {k: (float(v) if isinstance(v, Decimal) else v) for k, v in row.items()}
        for row in queryset.values(*fields)
    ]


def parse_demographic_group(group: str) -> Optional[tuple]:
    """'gender:female' -> ('gender', 'female'); None when malformed."""
    if not group or ":" not in group:
        return None
    key, value = group.split(":", 1)
    key, value = key.strip(), value.strip()
    if not key or not value:
        return None
    return key, value


# =============================================================================
# Service
# =============================================================================

class CareerOutcomeAnalyticsService:
    """Career outcome analytics for the tenant in context."""

    def generate_outcome_analytics(self, filters: Optional[dict] = None) -> dict:
        """Every analytics view at once."""
        filters = filters or {}
        return {
            "overview": self.overview(filters),
            "program_effectiveness": self.program_effectiveness(filters),
            "salary_analysis": self.salary_analysis(filters),
            "industry_placement": self.industry_placement(filters),
            "demographic_outcomes": self.demographic_outcomes(filters),
            "career_paths": self.career_path_analysis(filters),
            "trends": self.trend_analysis(filters),
        }

    # -------------------------------------------------------------------------
    # Graduate selection
    # -------------------------------------------------------------------------

    def _graduates(self, filters: dict):
        graduates = Graduate.objects.all()
        if filters.get("graduation_year"):
            graduates = graduates.filter(graduation_year=filters["graduation_year"])
        if filters.get("program"):
            graduates = graduates.filter(course__name__icontains=filters["program"])
        if filters.get("department"):
            graduates = graduates.filter(course__department=filters["department"])
        if filters.get("industry"):
            graduates = graduates.filter(employment_records__industry=filters["industry"]).distinct()
        group = parse_demographic_group(filters.get("demographic_group", ""))
        if group:
            graduates = graduates.filter(**{f"demographics__{group[0]}": group[1]})
        return graduates

    def _employment_rate_at(self, graduate_ids: list, on: date) -> float:
        if not graduate_ids:
            return 0.0
        employed = (
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, start_date__lte=on)
            .filter(Q(end_date__isnull=True) | Q(end_date__gte=on))
            .values("graduate_id")
            .distinct()
            .count()
        )
        return _percent(employed, len(graduate_ids))

    def _latest_salaries(self, graduate_ids: list, on: Optional[date] = None, **extra) -> dict:
        """graduate_id -> annualized salary of their latest record (on or before `on`)."""
        records = SalaryRecord.objects.filter(graduate_id__in=graduate_ids, **extra)
        if on is not None:
            records = records.filter(effective_date__lte=on)
        latest = {}
        for graduate_id, amount in records.order_by("graduate_id", "-effective_date", "-id").values_list(
            "graduate_id", "annualized_salary"
        ):
            latest.setdefault(graduate_id, amount)
        return latest

    def _average_salary_at(self, graduate_ids: list, on: date) -> float:
        latest = self._latest_salaries(graduate_ids, on)
        if not latest:
            return 0.0
        return _round(sum(latest.values()) / len(latest))

    # -------------------------------------------------------------------------
    # Overview
    # -------------------------------------------------------------------------

    def overview(self, filters: Optional[dict] = None) -> dict:
        filters = filters or {}
        graduate_ids = list(self._graduates(filters).values_list("id", flat=True))
        total = len(graduate_ids)

        if not total:
            return {
                "total_alumni": 0,
                "employment_rate": 0,
                "average_salary": 0,
                "tracking_rate": 0,
                "top_industries": {},
                "top_employers": {},
                "geographic_distribution": {},
            }

        current = EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, is_current=True)
        employed = current.values("graduate_id").distinct().count()

        since = timezone.localdate() - timedelta(days=365)
        average_salary = SalaryRecord.objects.filter(
            graduate_id__in=graduate_ids,
            effective_date__gte=since,
        ).aggregate(avg=Avg("annualized_salary"))["avg"]

        tracked = set(
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids).values_list("graduate_id", flat=True)
        ) | set(
            SalaryRecord.objects.filter(graduate_id__in=graduate_ids).values_list("graduate_id", flat=True)
        )

        return {
            "total_alumni": total,
            "employment_rate": _percent(employed, total),
            "average_salary": _round(average_salary),
            "tracking_rate": _percent(len(tracked), total),
            "top_industries": _top_counts(current, "industry"),
            "top_employers": _top_counts(current, "company"),
            "geographic_distribution": _top_counts(current, "location"),
        }

    # -------------------------------------------------------------------------
    # Program effectiveness
    # -------------------------------------------------------------------------

    def program_effectiveness(self, filters: Optional[dict] = None) -> list:
        filters = filters or {}
        rows = ProgramEffectiveness.objects.all()
        if filters.get("graduation_year"):
            rows = rows.filter(graduation_year=filters["graduation_year"])
        if filters.get("program"):
            rows = rows.filter(program_name=filters["program"])
        if filters.get("department"):
            rows = rows.filter(department=filters["department"])
        return _rows(rows.order_by("-overall_effectiveness_score", "program_name"), PROGRAM_EFFECTIVENESS_FIELDS)

    def generate_program_effectiveness(self, program: str, graduation_year: int) -> Optional[dict]:
        """
        Aggregate outcomes for one program cohort and upsert the row.

        Returns None when no graduate of the program graduated that year.
        """
        graduates = list(
            Graduate.objects.select_related("course").filter(
                course__name__icontains=program,
                graduation_year=graduation_year,
            )
        )
        if not graduates:
            return None

        graduate_ids = [g.id for g in graduates]
        start = graduation_date(graduation_year)
        checkpoints = {
            "6_months": add_months(start, 6),
            "1_year": add_months(start, 12),
            "2_years": add_months(start, 24),
        }
        rates = {key: self._employment_rate_at(graduate_ids, on) for key, on in checkpoints.items()}
        salaries = {key: self._average_salary_at(graduate_ids, on) for key, on in checkpoints.items()}

        top_employers = _top_counts(EmploymentRecord.objects.filter(graduate_id__in=graduate_ids), "company")
        departments = Counter(g.course.department for g in graduates if g.course and g.course.department)

        row, created = ProgramEffectiveness.objects.update_or_create(
            program_name=program,
            graduation_year=graduation_year,
            defaults={
                "department": departments.most_common(1)[0][0] if departments else "",
                "total_graduates": len(graduates),
                "employment_rate_6_months": rates["6_months"],
                "employment_rate_1_year": rates["1_year"],
                "employment_rate_2_years": rates["2_years"],
                "avg_starting_salary": salaries["6_months"],
                "avg_salary_1_year": salaries["1_year"],
                "avg_salary_2_years": salaries["2_years"],
                "top_employers": top_employers,
                "skills_gaps": self.skills_gaps(graduates, program),
                "overall_effectiveness_score": self.effectiveness_score(rates, salaries),
            },
        )
        logger.info(
            f"Program effectiveness {'created' if created else 'updated'}: "
            f"{program} {graduation_year} ({len(graduates)} graduates)"
        )
        return _rows(ProgramEffectiveness.objects.filter(pk=row.pk), PROGRAM_EFFECTIVENESS_FIELDS)[0]

    @staticmethod
    def effectiveness_score(rates: dict, salaries: dict) -> float:
        """
        0-100 composite: 30% six-month employment, 30% one-year employment,
        20% two-year employment, 20% salary growth from start to year two
        (growth capped at 100%).
        """
        starting = salaries.get("6_months") or 0
        later = salaries.get("2_years") or 0
        growth = 0.0
        if starting > 0:
            growth = min(max((later - starting) / starting * 100, 0.0), 100.0)
        score = (
            rates["6_months"] * 0.3
            + rates["1_year"] * 0.3
            + rates["2_years"] * 0.2
            + growth * 0.2
        )
        return _round(score)

    def skills_gaps(self, graduates: list, program: str = "") -> list:
        """
        Skills that jobs visible to this institution ask for and that none
        of the given graduates list, most requested first.
        """
        from employers.models import Job

        have = set()
        for graduate in graduates:
            have |= graduate.skill_set()

        program_key = program.strip().lower()
        demanded = Counter()
        jobs = Job.objects.for_tenant(get_current_tenant_id()).values_list("required_skills", "target_programs")
        for required, targets in jobs:
            targets = [str(t).strip().lower() for t in (targets or [])]
            if program_key and targets and not any(program_key in t for t in targets):
                continue
            for skill in required or []:
                skill = str(skill).strip().lower()
                if skill:
                    demanded[skill] += 1

        return [skill for skill, _ in demanded.most_common() if skill not in have][:TOP_LIMIT]

    # -------------------------------------------------------------------------
    # Salary analysis
    # -------------------------------------------------------------------------

    def salary_analysis(self, filters: Optional[dict] = None) -> dict:
        filters = filters or {}
        records = SalaryRecord.objects.all()
        if filters.get("graduation_year"):
            records = records.filter(graduate__graduation_year=filters["graduation_year"])
        if filters.get("program"):
            records = records.filter(graduate__course__name__icontains=filters["program"])
        if filters.get("industry"):
            records = records.filter(industry=filters["industry"])
        if filters.get("years_since_graduation") is not None:
            records = records.filter(years_since_graduation=filters["years_since_graduation"])
        if filters.get("date_range"):
            records = records.filter(effective_date__range=filters["date_range"])

        data = list(records.values_list("annualized_salary", "years_since_graduation", "industry", "effective_date"))
        if not data:
            return {
                "overall_statistics": {},
                "progression_by_years": [],
                "industry_comparison": [],
                "percentile_distribution": {},
                "growth_trends": [],
            }

        amounts = [float(row[0]) for row in data]
        by_years = defaultdict(list)
        by_industry = defaultdict(list)
        by_year = defaultdict(list)
        for amount, years, industry, effective in data:
            amount = float(amount)
            if years is not None:
                by_years[years].append(amount)
            by_industry[industry or "Unspecified"].append(amount)
            by_year[effective.year].append(amount)

        return {
            "overall_statistics": self._salary_statistics(amounts),
            "progression_by_years": [
                {
                    "years_since_graduation": years,
                    "count": len(values),
                    "average_salary": _round(statistics.mean(values)),
                    "median_salary": _round(statistics.median(values)),
                }
                for years, values in sorted(by_years.items())
            ],
            "industry_comparison": sorted(
                (
                    {
                        "industry": industry,
                        "count": len(values),
                        "average_salary": _round(statistics.mean(values)),
                        "median_salary": _round(statistics.median(values)),
                        "min_salary": _round(min(values)),
                        "max_salary": _round(max(values)),
                    }
                    for industry, values in by_industry.items()
                ),
                key=lambda row: row["average_salary"],
                reverse=True,
            ),
            "percentile_distribution": {
                f"p{p}": _round(percentile(amounts, p)) for p in (10, 25, 50, 75, 90)
            },
            "growth_trends": self._growth_trends(by_year),
        }

    @staticmethod
    def _salary_statistics(amounts: list) -> dict:
        return {
            "count": len(amounts),
            "mean": _round(statistics.mean(amounts)),
            "median": _round(statistics.median(amounts)),
            "min": _round(min(amounts)),
            "max": _round(max(amounts)),
            "std_dev": _round(statistics.pstdev(amounts)) if len(amounts) > 1 else 0.0,
        }

    @staticmethod
    def _growth_trends(by_year: dict) -> list:
        trends = []
        previous = None
        for year in sorted(by_year):
            average = _round(statistics.mean(by_year[year]))
            change = _round((average - previous) / previous * 100) if previous else None
            trends.append({
                "year": year,
                "count": len(by_year[year]),
                "average_salary": average,
                "change_percentage": change,
            })
            previous = average
        return trends

    # -------------------------------------------------------------------------
    # Industry placement
    # -------------------------------------------------------------------------

    def industry_placement(self, filters: Optional[dict] = None) -> list:
        filters = filters or {}
        rows = IndustryPlacement.objects.all()
        if filters.get("graduation_year"):
            rows = rows.filter(graduation_year=filters["graduation_year"])
        if filters.get("program"):
            rows = rows.filter(program=filters["program"])
        if filters.get("industry"):
            rows = rows.filter(industry=filters["industry"])
        return _rows(rows.order_by("-placement_count", "industry"), INDUSTRY_PLACEMENT_FIELDS)

    def generate_industry_placement(self, industry: str, graduation_year: int, program: str) -> Optional[dict]:
        graduate_ids = list(
            Graduate.objects.filter(
                course__name__icontains=program,
                graduation_year=graduation_year,
                employment_records__industry__iexact=industry,
            )
            .distinct()
            .values_list("id", flat=True)
        )
        if not graduate_ids:
            return None

        industry_records = EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, industry__iexact=industry)

        salaries = SalaryRecord.objects.filter(graduate_id__in=graduate_ids, industry__iexact=industry)
        starting = {}
        for graduate_id, amount in salaries.order_by("graduate_id", "effective_date", "id").values_list(
            "graduate_id", "annualized_salary"
        ):
            starting.setdefault(graduate_id, amount)
        current = self._latest_salaries(graduate_ids, industry__iexact=industry)

        retained = (
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, is_current=True, industry__iexact=industry)
            .values("graduate_id")
            .distinct()
            .count()
        )

        skills = Counter()
        for record_skills in industry_records.values_list("skills", flat=True):
            for skill in record_skills or []:
                skill = str(skill).strip().lower()
                if skill:
                    skills[skill] += 1

        row, _ = IndustryPlacement.objects.update_or_create(
            industry=industry,
            graduation_year=graduation_year,
            program=program,
            defaults={
                "placement_count": len(graduate_ids),
                "avg_starting_salary": _round(sum(starting.values()) / len(starting)) if starting else None,
                "avg_current_salary": _round(sum(current.values()) / len(current)) if current else None,
                "retention_rate": _percent(retained, len(graduate_ids)),
                "top_companies": _top_counts(industry_records.filter(is_current=True), "company"),
                "skills_in_demand": [skill for skill, _ in skills.most_common(TOP_LIMIT)],
            },
        )
        logger.info(f"Industry placement generated: {industry} / {program} {graduation_year}")
        return _rows(IndustryPlacement.objects.filter(pk=row.pk), INDUSTRY_PLACEMENT_FIELDS)[0]

    # -------------------------------------------------------------------------
    # Demographic outcomes
    # -------------------------------------------------------------------------

    def demographic_outcomes(self, filters: Optional[dict] = None) -> list:
        filters = filters or {}
        rows = DemographicOutcome.objects.all()
        for field in ("demographic_type", "demographic_value", "graduation_year", "program"):
            if filters.get(field):
                rows = rows.filter(**{field: filters[field]})
        return _rows(rows.order_by("-employment_rate", "demographic_type"), DEMOGRAPHIC_OUTCOME_FIELDS)

    def generate_demographic_outcomes(self, graduation_year: Optional[int] = None, program: str = "") -> list:
        """
        Rebuild demographic outcome rows for one scope from the graduates'
        `demographics` attributes.
        """
        filters = {"graduation_year": graduation_year, "program": program}
        graduates = list(self._graduates(filters))

        groups = defaultdict(list)
        for graduate in graduates:
            for key, value in (graduate.demographics or {}).items():
                if value not in (None, ""):
                    groups[(str(key), str(value))].append(graduate)

        graduate_ids = [g.id for g in graduates]
        currently_employed = set(
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, is_current=True)
            .values_list("graduate_id", flat=True)
        )
        latest_salary = self._latest_salaries(graduate_ids)

        DemographicOutcome.objects.filter(graduation_year=graduation_year, program=program or "").delete()

        for (demographic_type, demographic_value), members in sorted(groups.items()):
            employed = sum(1 for g in members if g.is_employed or g.id in currently_employed)
            member_salaries = [latest_salary[g.id] for g in members if g.id in latest_salary]
            DemographicOutcome.objects.create(
                demographic_type=demographic_type,
                demographic_value=demographic_value,
                graduation_year=graduation_year,
                program=program or "",
                total_graduates=len(members),
                employed_count=employed,
                employment_rate=_percent(employed, len(members)),
                avg_salary=_round(sum(member_salaries) / len(member_salaries)) if member_salaries else None,
            )

        logger.info(f"Demographic outcomes rebuilt: {len(groups)} groups (year={graduation_year}, program={program!r})")
        return self.demographic_outcomes({"graduation_year": graduation_year, "program": program})

    # -------------------------------------------------------------------------
    # Career paths
    # -------------------------------------------------------------------------

    def career_path_analysis(self, filters: Optional[dict] = None) -> dict:
        filters = filters or {}
        paths = CareerPath.objects.all()
        if filters.get("path_type"):
            paths = paths.filter(path_type=filters["path_type"])
        if filters.get("graduation_year"):
            paths = paths.filter(graduate__graduation_year=filters["graduation_year"])
        if filters.get("program"):
            paths = paths.filter(graduate__course__name__icontains=filters["program"])

        paths = list(paths)
        if not paths:
            return {
                "path_distribution": [],
                "success_metrics": [],
                "progression_patterns": {},
                "leadership_development": {},
            }

        total = len(paths)
        by_type = defaultdict(list)
        for path in paths:
            by_type[path.path_type].append(path)

        def _avg(values):
            values = [float(v) for v in values if v is not None]
            return _round(statistics.mean(values)) if values else None

        leaders = [p for p in paths if p.leadership_roles > 0]

        return {
            "path_distribution": sorted(
                (
                    {"path_type": path_type, "count": len(members), "percentage": _percent(len(members), total)}
                    for path_type, members in by_type.items()
                ),
                key=lambda row: (-row["count"], row["path_type"]),
            ),
            "success_metrics": [
                {
                    "path_type": path_type,
                    "count": len(members),
                    "average_success_score": _avg(p.success_score for p in members),
                    "average_promotions": _avg(p.promotions for p in members),
                }
                for path_type, members in sorted(by_type.items())
            ],
            "progression_patterns": {
                "average_positions": _avg(p.total_positions for p in paths),
                "average_promotions": _avg(p.promotions for p in paths),
                "average_industry_changes": _avg(p.industry_changes for p in paths),
                "average_years_to_first_promotion": _avg(p.years_to_first_promotion for p in paths),
            },
            "leadership_development": {
                "graduates_in_leadership": len(leaders),
                "leadership_rate": _percent(len(leaders), total),
                "average_leadership_roles": _avg(p.leadership_roles for p in leaders) or 0.0,
            },
        }

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------

    def trend_analysis(self, filters: Optional[dict] = None) -> list:
        filters = filters or {}
        trends = CareerTrend.objects.all()
        for field in ("trend_type", "category", "category_value"):
            if filters.get(field):
                trends = trends.filter(**{field: filters[field]})
        if filters.get("period_months"):
            since = add_months(timezone.localdate(), -int(filters["period_months"]))
            trends = trends.filter(period_start__gte=since)
        return _rows(trends.order_by("-period_start", "trend_type"), TREND_FIELDS)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def generate_snapshot(
        self,
        period_type: str,
        period_start: date,
        period_end: date,
        filters: Optional[dict] = None,
    ) -> Optional[dict]:
        """
        Persist a point-in-time snapshot of outcomes for graduates who had
        graduated by `period_end`, and record employment_rate and
        average_salary trend points against the previous snapshot of the
        same scope.

        Returns None when no graduate matches.
        """
        filters = filters or {}
        graduates = self._graduates(filters).filter(graduation_year__lte=period_end.year)
        graduate_ids = list(graduates.values_list("id", flat=True))
        if not graduate_ids:
            return None

        total = len(graduate_ids)
        tracked = (
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids)
            .values("graduate_id")
            .distinct()
            .count()
        )
        satisfaction = (
            EmploymentRecord.objects.filter(graduate_id__in=graduate_ids, job_satisfaction__isnull=False)
            .filter(start_date__lte=period_end)
            .filter(Q(end_date__isnull=True) | Q(end_date__gte=period_end))
            .aggregate(avg=Avg("job_satisfaction"))["avg"]
        )

        metrics = {
            "employment_rate": self._employment_rate_at(graduate_ids, period_end),
            "average_salary": self._average_salary_at(graduate_ids, period_end),
            "job_satisfaction": _round(satisfaction),
            "tracking_rate": _percent(tracked, total),
        }

        snapshot = CareerOutcomeSnapshot.objects.create(
            period_type=period_type,
            period_start=period_start,
            period_end=period_end,
            graduation_year=filters.get("graduation_year") or None,
            program=filters.get("program") or "",
            department=filters.get("department") or "",
            demographic_group=filters.get("demographic_group") or "",
            metrics=metrics,
            total_graduates=total,
            tracked_graduates=tracked,
        )
        self._record_trends(snapshot)

        logger.info(f"Snapshot {snapshot.id} generated ({period_type} {period_start} - {period_end}, {total} graduates)")
        return _rows(CareerOutcomeSnapshot.objects.filter(pk=snapshot.pk), SNAPSHOT_FIELDS)[0]

    def _record_trends(self, snapshot: CareerOutcomeSnapshot) -> None:
        previous = (
            CareerOutcomeSnapshot.objects.filter(
                period_type=snapshot.period_type,
                period_start__lt=snapshot.period_start,
                **snapshot.scope,
            )
            .exclude(pk=snapshot.pk)
            .order_by("-period_start", "-id")
            .first()
        )

        category, category_value = "overall", "all"
        for field in ("program", "department", "graduation_year", "demographic_group"):
            value = snapshot.scope[field]
            if value:
                category, category_value = field, str(value)
                break

        for metric in ("employment_rate", "average_salary"):
            value = snapshot.metrics.get(metric) or 0
            change = None
            if previous is not None:
                before = previous.metrics.get(metric) or 0
                if before:
                    change = _round((value - before) / before * 100)
            CareerTrend.objects.create(
                trend_type=metric,
                category=category,
                category_value=category_value,
                period_start=snapshot.period_start,
                period_end=snapshot.period_end,
                value=value,
                change_percentage=change,
                data={
                    "snapshot_id": snapshot.id,
                    "previous_snapshot_id": previous.id if previous else None,
                    "period_type": snapshot.period_type,
                },
            )

    def snapshots(self, filters: Optional[dict] = None) -> list:
        filters = filters or {}
        rows = CareerOutcomeSnapshot.objects.all()
        for field in ("period_type", "graduation_year", "program", "department", "demographic_group"):
            if filters.get(field):
                rows = rows.filter(**{field: filters[field]})
        limit = filters.get("limit") or SNAPSHOT_LIMIT_DEFAULT
        return _rows(rows.order_by("-period_start", "-id")[:limit], SNAPSHOT_FIELDS)

    # -------------------------------------------------------------------------
    # Filter options
    # -------------------------------------------------------------------------

    def filter_options(self) -> dict:
        demographic_types = set(DemographicOutcome.objects.values_list("demographic_type", flat=True))
        for demographics in Graduate.objects.values_list("demographics", flat=True):
            demographic_types |= set((demographics or {}).keys())

        return {
            "graduation_years": sorted(
                set(Graduate.objects.values_list("graduation_year", flat=True)), reverse=True
            ),
            "programs": sorted(set(Course.objects.values_list("name", flat=True))),
            "departments": sorted(
                set(Course.objects.exclude(department="").values_list("department", flat=True))
            ),
            "industries": sorted(
                set(EmploymentRecord.objects.exclude(industry="").values_list("industry", flat=True))
            ),
            "demographic_types": sorted(demographic_types),
            "path_types": [value for value, _ in CareerPath.PathType.choices],
            "trend_types": sorted(set(CareerTrend.objects.values_list("trend_type", flat=True))),
        }


# =============================================================================
# Scheduling
# =============================================================================

def previous_period(period_type: str, today: Optional[date] = None) -> tuple:
    """The last complete month / quarter / year before `today`."""
    today = today or timezone.localdate()
    if period_type == CareerOutcomeSnapshot.PeriodType.YEARLY:
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    if period_type == CareerOutcomeSnapshot.PeriodType.QUARTERLY:
        current_quarter_start = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
        start = add_months(current_quarter_start, -3)
        return start, current_quarter_start - timedelta(days=1)
    first_of_month = today.replace(day=1)
    end = first_of_month - timedelta(days=1)
    return end.replace(day=1), end


def generate_snapshots_for_all_tenants(period_type: str = CareerOutcomeSnapshot.PeriodType.MONTHLY) -> dict:
    """Generate the previous period's snapshot in every writable tenant."""
    from tenant.models import Tenant

    period_start, period_end = previous_period(period_type)
    service = CareerOutcomeAnalyticsService()
    results = {}

    for tenant in Tenant.objects.writable():
        with tenant.run():
            try:
                snapshot = service.generate_snapshot(period_type, period_start, period_end)
            except Exception as e:
                logger.exception(f"Snapshot failed for tenant {tenant.slug}: {e}")
                results[tenant.slug] = {"status": "error", "error": str(e)}
                continue
        results[tenant.slug] = (
            {"status": "created", "snapshot_id": snapshot["id"]} if snapshot else {"status": "no_data"}
        )

    return {
        "period_type": period_type,
        "period_start": period_start.isoformat(),
        "period_end": period_end.isoformat(),
        "tenants": results,
    }
