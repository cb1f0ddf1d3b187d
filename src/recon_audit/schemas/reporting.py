"""Pydantic schemas for dashboard and admin reporting output."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .enums import ReliabilityTag


class PerformanceStats(BaseModel):
    """Per-technician estimate reliability profile."""

    technician_name: str
    total_cases: int
    avg_variance: float = Field(..., description="Mean of service minus manager estimate")
    accuracy_rating: float = Field(..., ge=0, le=100)
    reliability_tag: ReliabilityTag


class HistoricalAggregates(BaseModel):
    """Prior recon cost context for a make/model, fed to the AI prompt."""

    vehicle_model: str
    year: int
    avg_recon_cost: float
    total_cases: int


class DailyVariance(BaseModel):
    date: str = Field(..., description="Local calendar date, YYYY-MM-DD")
    cases: int
    variance: float


class DashboardStats(BaseModel):
    total_cases: int
    total_variance: float
    avg_variance: float
    certified_rate: float = Field(..., description="Percent of cases in a certified status")
    daily: List[DailyVariance] = Field(default_factory=list)


class DatabaseHealth(BaseModel):
    is_healthy: bool
    backend: Literal["local", "supabase"]
    total_records: int
    kb_used: float = Field(default=0, description="Only measured for the local store")
    last_commit: Optional[int] = Field(default=None, description="Epoch ms of the health check")
