"""Cases router: AI analysis, listing, status lifecycle and clarifications."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from recon_audit.api.dependencies import (
    get_analysis_orchestrator,
    get_gateway,
    get_transition_engine,
)
from recon_audit.api.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ClarifyRequest,
    ClarifyResponse,
    StatusChangeRequest,
    StatusChangeResponse,
)
from recon_audit.errors import CaseNotFoundError
from recon_audit.lifecycle import select_intake_program
from recon_audit.reporting import filter_cases
from recon_audit.schemas import InspectionCase

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cases"])


async def _require_case(case_id: str) -> InspectionCase:
    case = await get_gateway().get_case(case_id)
    if case is None:
        raise CaseNotFoundError(case_id)
    return case


@router.post("/api/cases/analyze", response_model=AnalyzeResponse)
async def analyze_case(request: AnalyzeRequest):
    """Run the AI audit/appraisal and record the new case.

    The intake program is re-evaluated against the vehicle first and
    downgraded to the best eligible program if needed.
    """
    vehicle = request.vehicle
    program = select_intake_program(request.data.program, vehicle.year, vehicle.kilometres)
    data = request.data
    if program != data.program:
        data = data.model_copy(update={"program": program})

    outcome = await get_analysis_orchestrator().analyze(vehicle, data, request.mode)
    return AnalyzeResponse(
        case=outcome.case,
        citations=outcome.citations,
        persisted=outcome.persisted,
        persistence_error=outcome.persistence_error,
    )


@router.get("/api/cases", response_model=List[InspectionCase])
async def list_cases(q: Optional[str] = Query(None, description="VIN, make, model or technician")):
    """All cases, newest first."""
    cases = await get_gateway().get_all_cases()
    return filter_cases(cases, q) if q else cases


@router.get("/api/cases/{case_id}", response_model=InspectionCase)
async def get_case(case_id: str):
    return await _require_case(case_id)


@router.delete("/api/cases/{case_id}")
async def delete_case(case_id: str):
    await get_gateway().delete_case(case_id)
    logger.info(f"Case {case_id} deleted")
    return {"deleted": case_id}


@router.post("/api/cases/{case_id}/status", response_model=StatusChangeResponse)
async def change_case_status(case_id: str, request: StatusChangeRequest):
    """Move a case to a new post-review status (422 when ineligible)."""
    case = await _require_case(case_id)
    result = await get_transition_engine().transition(case, request.status)
    return StatusChangeResponse(case=result.case, changed=result.changed, entry=result.entry)


@router.post("/api/cases/{case_id}/clarify", response_model=ClarifyResponse)
async def clarify_case(case_id: str, request: ClarifyRequest):
    case = await _require_case(case_id)
    answer = await get_analysis_orchestrator().clarify(case, request.query)
    return ClarifyResponse(answer=answer)
