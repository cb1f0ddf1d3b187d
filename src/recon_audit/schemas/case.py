"""Pydantic schemas for vehicles, inspection captures and cases."""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .enums import (
    AcquisitionType,
    AnalysisMode,
    InspectionType,
    InventoryProgram,
    OutcomeStatus,
    PostReviewStatus,
)
from .history import StatusHistory


class Vehicle(BaseModel):
    """Identifying attributes of the inspected vehicle."""

    vin: str = Field(..., max_length=17, description="17-character vehicle identification number")
    year: int = Field(..., ge=1900, le=2100, description="Model year")
    make: str = Field(default="")
    model: str = Field(default="")
    trim: str = Field(default="")
    kilometres: int = Field(default=0, ge=0, description="Odometer reading in km")
    stock_number: Optional[str] = Field(default=None)
    acquisition_type: AcquisitionType = Field(default=AcquisitionType.TRADE)


class InspectionData(BaseModel):
    """Notes, estimates and attachments captured for a case."""

    type: InspectionType = Field(default=InspectionType.BOTH)
    program: InventoryProgram = Field(default=InventoryProgram.HCUV)
    safety_outcome: OutcomeStatus = Field(default=OutcomeStatus.PASS)
    hcuv_outcome: OutcomeStatus = Field(default=OutcomeStatus.PASS)
    technician_notes: str = Field(default="")
    technician_name: str = Field(default="")
    appraiser_name: str = Field(default="")
    appraiser_notes: str = Field(default="")
    manager_appraisal_estimate: float = Field(default=0.0)
    service_department_estimate: float = Field(default=0.0)
    attachments: List[str] = Field(
        default_factory=list,
        description="Base64 or data-URI encoded images/documents, in capture order",
    )

    def without_attachment(self, index: int) -> "InspectionData":
        """Return a copy with the attachment at ``index`` removed."""
        if index < 0 or index >= len(self.attachments):
            raise IndexError(f"No attachment at index {index}")
        remaining = self.attachments[:index] + self.attachments[index + 1:]
        return self.model_copy(update={"attachments": remaining})

    @property
    def variance(self) -> float:
        """Service estimate minus manager estimate."""
        return (self.service_department_estimate or 0) - (self.manager_appraisal_estimate or 0)


class InspectionCase(BaseModel):
    """The durable unit of record."""

    id: str
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")
    mode: AnalysisMode
    vehicle: Vehicle
    data: InspectionData
    analysis: Optional[str] = None
    detected_total: Optional[float] = None
    current_status: PostReviewStatus
    status_history: StatusHistory = Field(default_factory=StatusHistory.empty)

    @model_validator(mode="after")
    def _status_matches_history(self) -> "InspectionCase":
        last = self.status_history.last
        if last is not None and last.to_status != self.current_status:
            raise ValueError(
                f"current_status {self.current_status.value!r} does not match "
                f"last history entry {last.to_status.value!r}"
            )
        return self
