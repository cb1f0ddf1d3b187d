"""VIN lookup: NHTSA vPIC decode and VIN extraction from a photo.

Both helpers are best-effort. They never raise; a failed lookup returns
None and the caller keeps whatever the user typed.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from recon_audit.schemas import Vehicle
from recon_audit.services.llm_client import LLMClient, get_fast_model

logger = logging.getLogger(__name__)

VPIC_DECODE_URL = "https://vpic.nhtsa.dot.gov/api/vehicles/decodevin/{vin}"
VPIC_TIMEOUT_SECONDS = 10.0

VIN_EXTRACTION_PROMPT = (
    "Extract the 17-digit VIN from this image. Also identify Year, Make, and Model "
    "if visible. Return as a JSON object with keys: vin, year, make, model."
)


@dataclass(frozen=True)
class DecodedVin:
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None


def _variable(results: list, name: str) -> Optional[str]:
    for item in results:
        if item.get("Variable") == name:
            value = item.get("Value")
            return value.strip() if isinstance(value, str) and value.strip() else None
    return None


def parse_vpic_results(payload: dict) -> DecodedVin:
    results = payload.get("Results") or []
    year_text = _variable(results, "Model Year")
    try:
        year = int(year_text) if year_text else None
    except ValueError:
        year = None
    return DecodedVin(
        year=year,
        make=_variable(results, "Make"),
        model=_variable(results, "Model"),
    )


async def decode_vin(
    vin: str, http_client: Optional[httpx.AsyncClient] = None
) -> Optional[DecodedVin]:
    """Decode ``vin`` against the public vPIC API. Returns None on any failure."""
    vin = (vin or "").strip().upper()
    if not vin:
        return None

    url = VPIC_DECODE_URL.format(vin=vin)
    try:
        if http_client is None:
            async with httpx.AsyncClient(timeout=VPIC_TIMEOUT_SECONDS) as client:
                response = await client.get(url, params={"format": "json"})
        else:
            response = await http_client.get(url, params={"format": "json"})
        response.raise_for_status()
        return parse_vpic_results(response.json())
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning(f"VIN decode failed for {vin}: {exc}")
        return None


def merge_decoded(vehicle: Vehicle, decoded: Optional[DecodedVin]) -> Vehicle:
    """Overwrite year, make and model with whatever the decode returned."""
    if decoded is None:
        return vehicle

    update = {
        field: value
        for field, value in (
            ("year", decoded.year),
            ("make", decoded.make),
            ("model", decoded.model),
        )
        if value is not None
    }
    return vehicle.model_copy(update=update) if update else vehicle


def _parse_json_object(text: str) -> Optional[dict]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    try:
        value = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


async def extract_vin_from_image(llm: LLMClient, image: str) -> Optional[dict]:
    """Ask the AI to read the VIN (and year/make/model if visible) from a photo."""
    try:
        response = await llm.generate(
            None, VIN_EXTRACTION_PROMPT, images=[image], model=get_fast_model()
        )
    except Exception as exc:
        logger.warning(f"VIN extraction failed: {exc}")
        return None
    return _parse_json_object(response.text or "")
