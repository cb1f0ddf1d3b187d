"""Pydantic models for the API layer."""

from typing import List, Optional

from pydantic import BaseModel, Field

from recon_audit.schemas import (
    AnalysisMode,
    DashboardStats,
    DealershipBrand,
    InspectionCase,
    InspectionData,
    InventoryProgram,
    PostReviewStatus,
    StandardType,
    StatusHistoryEntry,
    Vehicle,
)
from recon_audit.services.llm_client import Citation


# =============================================================================
# CASES
# =============================================================================


class AnalyzeRequest(BaseModel):
    """New case capture submitted for AI analysis."""

    vehicle: Vehicle
    data: InspectionData
    mode: AnalysisMode = AnalysisMode.AUDIT


class AnalyzeResponse(BaseModel):
    case: InspectionCase
    citations: List[Citation] = []
    persisted: bool = True
    persistence_error: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status: PostReviewStatus


class StatusChangeResponse(BaseModel):
    case: InspectionCase
    changed: bool
    entry: Optional[StatusHistoryEntry] = None


class ClarifyRequest(BaseModel):
    query: str = Field(..., min_length=1)


class ClarifyResponse(BaseModel):
    answer: str


# =============================================================================
# INTAKE / VIN
# =============================================================================


class IntakeProgramRequest(BaseModel):
    program: InventoryProgram
    year: int
    kilometres: int = Field(default=0, ge=0)


class IntakeProgramResponse(BaseModel):
    """Program to use for the vehicle; ``downgraded`` when it differs from the request."""

    requested: InventoryProgram
    program: InventoryProgram
    downgraded: bool
    reason: Optional[str] = None


class VinDecodeResponse(BaseModel):
    vin: str
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None


class VinDecodeRequest(BaseModel):
    vehicle: Vehicle = Field(..., description="Vehicle as currently entered; decoded fields overwrite it")


class VinImageRequest(BaseModel):
    image: str = Field(..., description="Data URI or base64 photo of the VIN plate")


# =============================================================================
# ADMIN
# =============================================================================


class BrandPayload(BaseModel):
    brand: DealershipBrand


class BrandResponse(BrandPayload):
    cpo_manual_label: str


class AppraiserCreate(BaseModel):
    name: str = Field(..., min_length=1)


class TechnicianCreate(BaseModel):
    name: str = Field(..., min_length=1)
    tech_number: str = ""


class StandardUploadRequest(BaseModel):
    type: StandardType
    file_name: str
    content: str = Field(..., description="Data URI or base64 encoded PDF")


class SyncResponse(BaseModel):
    success: bool
    count: int = 0
    error: Optional[str] = None


# =============================================================================
# DASHBOARD
# =============================================================================


class DashboardResponse(BaseModel):
    """Statistics over the cases inside the selected time window and search."""

    stats: DashboardStats
    cases: List[InspectionCase]
