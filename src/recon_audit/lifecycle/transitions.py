"""Status transition engine and intake program selection."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from recon_audit.errors import EligibilityError
from recon_audit.lifecycle.eligibility import evaluate_vehicle
from recon_audit.schemas import (
    InspectionCase,
    InventoryProgram,
    PostReviewStatus,
    StatusHistoryEntry,
    TransitionType,
)

logger = logging.getLogger(__name__)

# Best-first order for auto-downgrading an ineligible intake selection.
INTAKE_PROGRAM_PRIORITY = (
    InventoryProgram.HCUV,
    InventoryProgram.HAPO,
    InventoryProgram.CERTIFIED,
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def classify_transition(
    from_status: PostReviewStatus, to_status: PostReviewStatus
) -> TransitionType:
    """Classify a move by comparing status ranks."""
    diff = to_status.rank - from_status.rank
    if diff > 0:
        return TransitionType.UPGRADE
    if diff < 0:
        return TransitionType.DOWNGRADE
    return TransitionType.LATERAL


def select_intake_program(
    selected: InventoryProgram,
    model_year: int,
    kilometres,
    current_year: Optional[int] = None,
) -> InventoryProgram:
    """Return the selected program, or the best eligible program below it.

    Never upgrades: a HAPO selection falls back to Certified, not HCUV.
    """
    selected = InventoryProgram(selected)
    start = INTAKE_PROGRAM_PRIORITY.index(selected)
    for program in INTAKE_PROGRAM_PRIORITY[start:]:
        if evaluate_vehicle(program, model_year, kilometres, current_year).ok:
            if program != selected:
                logger.info(
                    f"Intake program {selected.value} ineligible for "
                    f"{model_year}/{kilometres} km, using {program.value}"
                )
            return program
    return InventoryProgram.CERTIFIED


@dataclass(frozen=True)
class TransitionResult:
    case: InspectionCase
    changed: bool
    entry: Optional[StatusHistoryEntry] = None


class StatusTransitionEngine:
    """Validates, classifies, records and persists status changes.

    The input case is never mutated. A new case is built, persisted, and only
    then returned; if persistence raises, the caller still holds the prior
    state.
    """

    def __init__(
        self,
        gateway,
        clock: Callable[[], int] = _now_ms,
        current_year: Optional[Callable[[], int]] = None,
    ):
        self.gateway = gateway
        self._clock = clock
        self._current_year = current_year

    def check(self, case: InspectionCase, requested: PostReviewStatus) -> None:
        """Raise EligibilityError if the case's vehicle cannot take ``requested``."""
        year = self._current_year() if self._current_year else None
        result = evaluate_vehicle(
            requested, case.vehicle.year, case.vehicle.kilometres, current_year=year
        )
        if not result.ok:
            raise EligibilityError(requested.value, result.reason or "ineligible")

    def plan(self, case: InspectionCase, requested: PostReviewStatus) -> TransitionResult:
        """Compute the transitioned case without persisting it."""
        requested = PostReviewStatus(requested)
        if requested == case.current_status:
            return TransitionResult(case=case, changed=False)

        self.check(case, requested)

        entry = StatusHistoryEntry(
            from_status=case.current_status,
            to_status=requested,
            timestamp=self._clock(),
            type=classify_transition(case.current_status, requested),
        )
        updated = case.model_copy(
            update={
                "current_status": requested,
                "status_history": case.status_history.append(entry),
            }
        )
        return TransitionResult(case=updated, changed=True, entry=entry)

    async def transition(
        self, case: InspectionCase, requested: PostReviewStatus
    ) -> TransitionResult:
        """Move ``case`` to ``requested`` and persist it.

        Raises:
            EligibilityError: Vehicle is ineligible; nothing is written.
            StorageWriteError / StorageQuotaExceededError: Persist failed.
        """
        result = self.plan(case, requested)
        if not result.changed:
            return result

        await self.gateway.save_case(result.case)
        entry = result.entry
        logger.info(
            f"Case {case.id}: {entry.from_status.value} -> {entry.to_status.value} "
            f"({entry.type.value})"
        )
        return result
