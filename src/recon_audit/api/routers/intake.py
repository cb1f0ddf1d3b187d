"""Intake helpers: program eligibility and VIN lookup."""

from fastapi import APIRouter, HTTPException

from recon_audit.api.dependencies import get_llm_client
from recon_audit.api.models import (
    IntakeProgramRequest,
    IntakeProgramResponse,
    VinDecodeRequest,
    VinDecodeResponse,
    VinImageRequest,
)
from recon_audit.lifecycle import evaluate_vehicle, select_intake_program
from recon_audit.schemas import Vehicle
from recon_audit.services import decode_vin, extract_vin_from_image, merge_decoded

router = APIRouter(tags=["intake"])


@router.post("/api/intake/program", response_model=IntakeProgramResponse)
def intake_program(request: IntakeProgramRequest):
    """Best eligible program for the vehicle, starting from the requested one."""
    program = select_intake_program(request.program, request.year, request.kilometres)
    reason = None
    if program != request.program:
        reason = evaluate_vehicle(request.program, request.year, request.kilometres).reason
    return IntakeProgramResponse(
        requested=request.program,
        program=program,
        downgraded=program != request.program,
        reason=reason,
    )


@router.get("/api/vin/{vin}", response_model=VinDecodeResponse)
async def lookup_vin(vin: str):
    decoded = await decode_vin(vin)
    if decoded is None:
        raise HTTPException(status_code=404, detail=f"VIN {vin} could not be decoded")
    return VinDecodeResponse(vin=vin, year=decoded.year, make=decoded.make, model=decoded.model)


@router.post("/api/vin/decode", response_model=Vehicle)
async def decode_vehicle(request: VinDecodeRequest):
    """Decode the entered VIN and apply the result to the vehicle.

    A failed lookup returns the vehicle unchanged.
    """
    decoded = await decode_vin(request.vehicle.vin)
    return merge_decoded(request.vehicle, decoded)


@router.post("/api/vin/extract")
async def extract_vin(request: VinImageRequest):
    """Read a VIN (and year/make/model when visible) from a photo."""
    result = await extract_vin_from_image(get_llm_client(), request.image)
    if not result or not result.get("vin"):
        raise HTTPException(status_code=404, detail="No VIN found in image")
    return result
