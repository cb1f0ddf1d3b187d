"""Dashboard aggregation over the full case collection.

All functions are pure reductions over a list of cases; nothing here is
persisted. The time-window filter runs first and every statistic below is
computed on the filtered subset.
"""

import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Literal, Optional

from recon_audit.schemas import (
    DailyVariance,
    DashboardStats,
    DatabaseHealth,
    HistoricalAggregates,
    InspectionCase,
    PerformanceStats,
    PostReviewStatus,
    ReliabilityTag,
)

AGGRESSIVE_VARIANCE_THRESHOLD = 1500
PASSIVE_VARIANCE_THRESHOLD = -500

CERTIFIED_STATUSES = frozenset({
    PostReviewStatus.HCUV,
    PostReviewStatus.HAPO,
    PostReviewStatus.CERTIFIED,
})

RangeKind = Literal["all", "month", "ytd", "custom"]


@dataclass(frozen=True)
class TimeRange:
    """Dashboard time window. Custom ranges include the whole end day."""

    kind: RangeKind = "all"
    start: Optional[date] = None
    end: Optional[date] = None


def _case_datetime(case: InspectionCase) -> datetime:
    """Case timestamp as a naive local datetime."""
    return datetime.fromtimestamp(case.timestamp / 1000)


def filter_by_time_range(
    cases: Iterable[InspectionCase],
    time_range: TimeRange,
    now: Optional[datetime] = None,
) -> List[InspectionCase]:
    now = now or datetime.now()
    kind = time_range.kind

    if kind == "month":
        return [
            c for c in cases
            if (_case_datetime(c).year, _case_datetime(c).month) == (now.year, now.month)
        ]
    if kind == "ytd":
        return [c for c in cases if _case_datetime(c).year == now.year]
    if kind == "custom" and time_range.start and time_range.end:
        start = datetime.combine(time_range.start, datetime.min.time())
        end = datetime.combine(time_range.end, datetime.max.time())
        return [c for c in cases if start <= _case_datetime(c) <= end]
    return list(cases)


def filter_cases(cases: Iterable[InspectionCase], query: str) -> List[InspectionCase]:
    """Case-insensitive search over VIN, make, model, technician and stock number."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(cases)

    def matches(case: InspectionCase) -> bool:
        fields = (
            case.vehicle.vin,
            case.vehicle.make,
            case.vehicle.model,
            case.data.technician_name,
            case.vehicle.stock_number or "",
        )
        return any(needle in value.lower() for value in fields)

    return [c for c in cases if matches(c)]


def classify_reliability(avg_variance: float) -> ReliabilityTag:
    if avg_variance > AGGRESSIVE_VARIANCE_THRESHOLD:
        return ReliabilityTag.AGGRESSIVE
    if avg_variance < PASSIVE_VARIANCE_THRESHOLD:
        return ReliabilityTag.PASSIVE
    return ReliabilityTag.ACCURATE


def compute_technician_profiles(cases: Iterable[InspectionCase]) -> List[PerformanceStats]:
    """Group by technician name and score estimate variance.

    Cases with no technician name are skipped. Profiles are returned in
    first-seen order.
    """
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)

    for case in cases:
        name = case.data.technician_name
        if not name:
            continue
        totals[name] += case.data.variance
        counts[name] += 1

    profiles = []
    for name, count in counts.items():
        avg_variance = totals[name] / count
        profiles.append(PerformanceStats(
            technician_name=name,
            total_cases=count,
            avg_variance=avg_variance,
            accuracy_rating=max(0.0, 100 - abs(avg_variance) / 100),
            reliability_tag=classify_reliability(avg_variance),
        ))
    return profiles


def daily_variance_series(
    cases: Iterable[InspectionCase],
    days: int = 7,
    today: Optional[date] = None,
) -> List[DailyVariance]:
    """Case count and summed variance per local day, oldest first."""
    today = today or date.today()
    by_day: Dict[date, List[InspectionCase]] = defaultdict(list)
    for case in cases:
        by_day[_case_datetime(case).date()].append(case)

    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_cases = by_day.get(day, [])
        series.append(DailyVariance(
            date=day.isoformat(),
            cases=len(day_cases),
            variance=sum(c.data.variance for c in day_cases),
        ))
    return series


def compute_dashboard_stats(
    cases: List[InspectionCase], today: Optional[date] = None
) -> DashboardStats:
    total_variance = sum(c.data.variance for c in cases)
    certified = sum(1 for c in cases if c.current_status in CERTIFIED_STATUSES)
    return DashboardStats(
        total_cases=len(cases),
        total_variance=total_variance,
        avg_variance=total_variance / len(cases) if cases else 0.0,
        certified_rate=round(certified / (len(cases) or 1) * 100, 1),
        daily=daily_variance_series(cases, today=today),
    )


def compute_historical_context(
    cases: Iterable[InspectionCase], make: str, model: str, year: int
) -> Optional[HistoricalAggregates]:
    """Average prior service estimate for the same make/model, if any."""
    matched = [
        c for c in cases
        if c.vehicle.make.lower() == make.lower() and c.vehicle.model.lower() == model.lower()
    ]
    if not matched:
        return None

    total_cost = sum(c.data.service_department_estimate or 0 for c in matched)
    return HistoricalAggregates(
        vehicle_model=model,
        year=year,
        avg_recon_cost=total_cost / len(matched),
        total_cases=len(matched),
    )


async def compute_database_health(gateway) -> DatabaseHealth:
    """Record counts across all collections for the admin panel."""
    cases = await gateway.get_all_cases()
    standards = await gateway.get_standards()
    appraisers = await gateway.get_appraisers()
    technicians = await gateway.get_technicians()

    kb_used = 0.0
    store = gateway.store
    if gateway.backend == "local":
        kb_used = round(store.usage_bytes() / 1024, 1)

    return DatabaseHealth(
        is_healthy=True,
        backend=gateway.backend,
        total_records=len(cases) + len(standards) + len(appraisers) + len(technicians),
        kb_used=kb_used,
        last_commit=int(time.time() * 1000),
    )
