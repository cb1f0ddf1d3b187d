"""Dashboard statistics and technician reliability profiles."""

from .aggregation import (
    TimeRange,
    classify_reliability,
    compute_dashboard_stats,
    compute_database_health,
    compute_historical_context,
    compute_technician_profiles,
    daily_variance_series,
    filter_by_time_range,
    filter_cases,
)

__all__ = [
    "TimeRange",
    "classify_reliability",
    "compute_dashboard_stats",
    "compute_database_health",
    "compute_historical_context",
    "compute_technician_profiles",
    "daily_variance_series",
    "filter_by_time_range",
    "filter_cases",
]
