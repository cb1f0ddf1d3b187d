"""Program eligibility rules.

Thresholds are fixed business constants for the certified programs:

    HCUV  (top tier)   max 6 years,  max 120,000 km
    HAPO  (mid tier)   max 10 years, max 200,000 km

Certified, Wholesale and As-Is Retail have no limits.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from recon_audit.schemas.enums import InventoryProgram, PostReviewStatus

Target = Union[InventoryProgram, PostReviewStatus, str]


@dataclass(frozen=True)
class ProgramLimits:
    max_age_years: int
    max_kilometres: int
    age_reason: str
    km_reason: str


@dataclass(frozen=True)
class EligibilityResult:
    ok: bool
    reason: Optional[str] = None


ELIGIBLE = EligibilityResult(ok=True)

# Keyed by enum value so both InventoryProgram and PostReviewStatus resolve.
PROGRAM_LIMITS = {
    "HCUV": ProgramLimits(6, 120_000, "Age > 6yrs", "KM > 120k"),
    "HAPO": ProgramLimits(10, 200_000, "Age > 10yrs", "KM > 200k"),
}


def _require_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    if isinstance(value, float) and math.isnan(value):
        raise TypeError(f"{name} must be a number, got NaN")


def vehicle_age(model_year: int, current_year: Optional[int] = None) -> int:
    """Age in whole calendar years (no month/day precision)."""
    _require_number("model_year", model_year)
    if current_year is None:
        current_year = date.today().year
    return int(current_year - model_year)


def evaluate(target: Target, age_years, odometer_km) -> EligibilityResult:
    """Check whether a vehicle qualifies for ``target``.

    Age is checked before odometer; the first violated threshold is returned.

    Raises:
        TypeError: If age or odometer is not numeric.
        ValueError: If target is not a known program or status.
    """
    _require_number("age_years", age_years)
    _require_number("odometer_km", odometer_km)

    key = target.value if isinstance(target, (InventoryProgram, PostReviewStatus)) else str(target)
    if key not in PROGRAM_LIMITS:
        PostReviewStatus(key)  # ValueError for unknown targets
        return ELIGIBLE

    limits = PROGRAM_LIMITS[key]
    if age_years > limits.max_age_years:
        return EligibilityResult(ok=False, reason=limits.age_reason)
    if odometer_km > limits.max_kilometres:
        return EligibilityResult(ok=False, reason=limits.km_reason)
    return ELIGIBLE


def evaluate_vehicle(
    target: Target, model_year: int, kilometres, current_year: Optional[int] = None
) -> EligibilityResult:
    """Convenience wrapper computing age from the model year."""
    return evaluate(target, vehicle_age(model_year, current_year), kilometres)
