"""Pydantic schemas for cases, reference records and reports."""

from .enums import (
    AcquisitionType,
    AnalysisMode,
    DealershipBrand,
    InspectionType,
    InventoryProgram,
    OutcomeStatus,
    PostReviewStatus,
    ReliabilityTag,
    StandardType,
    TransitionType,
)
from .history import StatusHistory, StatusHistoryEntry
from .case import InspectionCase, InspectionData, Vehicle
from .records import Appraiser, StandardDocument, Technician
from .reporting import (
    DailyVariance,
    DashboardStats,
    DatabaseHealth,
    HistoricalAggregates,
    PerformanceStats,
)

__all__ = [
    # Enums
    "AcquisitionType",
    "AnalysisMode",
    "DealershipBrand",
    "InspectionType",
    "InventoryProgram",
    "OutcomeStatus",
    "PostReviewStatus",
    "ReliabilityTag",
    "StandardType",
    "TransitionType",
    # Cases
    "InspectionCase",
    "InspectionData",
    "Vehicle",
    "StatusHistory",
    "StatusHistoryEntry",
    # Records
    "Appraiser",
    "StandardDocument",
    "Technician",
    # Reports
    "DailyVariance",
    "DashboardStats",
    "DatabaseHealth",
    "HistoricalAggregates",
    "PerformanceStats",
]
