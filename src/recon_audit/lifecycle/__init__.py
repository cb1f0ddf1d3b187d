"""Eligibility rules and status lifecycle for inspection cases."""

from .eligibility import (
    PROGRAM_LIMITS,
    EligibilityResult,
    evaluate,
    evaluate_vehicle,
    vehicle_age,
)
from .transitions import (
    INTAKE_PROGRAM_PRIORITY,
    StatusTransitionEngine,
    TransitionResult,
    classify_transition,
    select_intake_program,
)

__all__ = [
    "PROGRAM_LIMITS",
    "EligibilityResult",
    "evaluate",
    "evaluate_vehicle",
    "vehicle_age",
    "INTAKE_PROGRAM_PRIORITY",
    "StatusTransitionEngine",
    "TransitionResult",
    "classify_transition",
    "select_intake_program",
]
