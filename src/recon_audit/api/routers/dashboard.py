"""Dashboard router: variance statistics and technician reliability."""

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Query

from recon_audit.api.dependencies import get_gateway
from recon_audit.api.models import DashboardResponse
from recon_audit.reporting import (
    TimeRange,
    compute_dashboard_stats,
    compute_technician_profiles,
    filter_by_time_range,
    filter_cases,
)
from recon_audit.schemas import PerformanceStats

router = APIRouter(tags=["dashboard"])


def _time_range(kind: str, start: Optional[date], end: Optional[date]) -> TimeRange:
    return TimeRange(kind=kind, start=start, end=end)


@router.get("/api/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    range_: Literal["all", "month", "ytd", "custom"] = Query("all", alias="range"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    q: Optional[str] = None,
):
    """Statistics for cases in the time window. Search narrows only the case list."""
    cases = await get_gateway().get_all_cases()
    cases = filter_by_time_range(cases, _time_range(range_, start, end))
    stats = compute_dashboard_stats(cases)
    if q:
        cases = filter_cases(cases, q)
    return DashboardResponse(stats=stats, cases=cases)


@router.get("/api/dashboard/technicians", response_model=List[PerformanceStats])
async def get_technician_profiles(
    range_: Literal["all", "month", "ytd", "custom"] = Query("all", alias="range"),
    start: Optional[date] = None,
    end: Optional[date] = None,
):
    cases = await get_gateway().get_all_cases()
    cases = filter_by_time_range(cases, _time_range(range_, start, end))
    return compute_technician_profiles(cases)
