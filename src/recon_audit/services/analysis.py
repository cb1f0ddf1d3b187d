"""AI analysis orchestration for new inspection cases.

The orchestrator gathers context (historical recon costs, technician
reliability, digested standards), asks the AI collaborator for an audit or
appraisal, parses the detected total and persists the resulting case.

Persistence failure after a successful analysis does not discard the
result: the outcome is returned with ``persisted=False`` so the caller can
show the report and offer a retry.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from recon_audit.config import DealershipConfig
from recon_audit.errors import AnalysisError, StorageError
from recon_audit.reporting import compute_historical_context, compute_technician_profiles
from recon_audit.schemas import (
    AnalysisMode,
    DealershipBrand,
    HistoricalAggregates,
    InspectionCase,
    InspectionData,
    PerformanceStats,
    PostReviewStatus,
    StandardDocument,
    StatusHistory,
    Vehicle,
)
from recon_audit.services.llm_client import Citation, LLMClient, get_fast_model

logger = logging.getLogger(__name__)

DETECTED_TOTAL_PATTERN = re.compile(r"\[DETECTED_TOTAL:\s*([\d,.]+)\]")

FALLBACK_ANALYSIS_TEXT = "Analysis failed."
CLARIFICATION_UNAVAILABLE = "Clarification unavailable."
CLARIFICATION_ERROR = "Error generating clarification."

# Rule text from each standard is clipped before it goes into the prompt.
MAX_STANDARD_CHARS = 4000

CLARIFY_SYSTEM_INSTRUCTION = (
    "You are the Dealer Operations Consultant. Help the manager protect their "
    "gross margin. Be concise, firm, and technically accurate."
)


def build_system_instruction(mode: AnalysisMode, brand: DealershipBrand) -> str:
    brand_name = DealershipBrand(brand).value
    if mode == AnalysisMode.APPRAISAL:
        return f"""You are the Lead Appraiser and Recon Specialist for a high-volume {brand_name} dealership.
YOUR MISSION: Calculate a highly accurate Reconditioning Estimate based solely on manager intake notes.

MANDATORY RETAIL PREP PACKAGE (ALWAYS INCLUDE):
- Ontario Safety Inspection Fee: $200
- 4-Wheel Balance: $80
- 4-Wheel Alignment: $140
- Professional Detail: $250
- TOTAL FIXED BASE: $670

STRATEGY:
1. Start with the $670 Fixed Base.
2. Analyze Appraiser Notes for specific wear items (e.g., "tires low", "brakes pulsing", "dent on hood").
3. Estimate repairs using market-rate labor/parts for this specific vehicle.
4. If Appraiser says "CLEAN", assume zero additional mechanical repairs beyond the Fixed Base.
5. Provide a clear, categorized breakdown of these costs.
6. Place [DETECTED_TOTAL: 1234.56] at the very end of your response."""

    return f"""You are the Lead Auditor for a high-volume {brand_name} Dealership.
YOUR MISSION: Protect Dealership Gross Margin by identifying discrepancies between Appraiser intake notes and Technician service quotes.

STRATEGIC AUDIT RULES:
1. "CLEAN CAR" RULE: If an Appraiser notes a car is "Clean", this refers to its overall condition. It DOES NOT mean the vehicle skips the detail. Every retail unit requires a Professional Detail ($250).
2. DISCREPANCY AUDIT: If Appraiser says "Brakes feel new" but Tech quotes "Brake Job", flag it as a potential gross leak.
3. Citations: Reference specific manufacturer standards when flagging a failure.
4. Place [DETECTED_TOTAL: 1234.56] at the very end."""


def _context_section(
    history: Optional[HistoricalAggregates],
    technician: Optional[PerformanceStats],
    standards: List[StandardDocument],
) -> str:
    lines = []
    if history is not None:
        lines.append(
            f"HISTORICAL CONTEXT: {history.total_cases} prior {history.vehicle_model} case(s), "
            f"average recon ${history.avg_recon_cost:,.2f}"
        )
    if technician is not None:
        lines.append(
            f"TECHNICIAN PROFILE: {technician.technician_name} is {technician.reliability_tag.value} "
            f"(avg variance ${technician.avg_variance:,.2f} over {technician.total_cases} case(s))"
        )
    for doc in standards:
        if doc.extracted_rules:
            lines.append(f"STANDARD [{doc.type.value}]:\n{doc.extracted_rules[:MAX_STANDARD_CHARS]}")
    return "\n".join(lines)


def build_prompt(
    vehicle: Vehicle,
    data: InspectionData,
    mode: AnalysisMode,
    history: Optional[HistoricalAggregates] = None,
    technician: Optional[PerformanceStats] = None,
    standards: Optional[List[StandardDocument]] = None,
) -> str:
    if mode == AnalysisMode.APPRAISAL:
        task = (
            "--- APPRAISAL TASK ---\n"
            f"VEHICLE: {vehicle.year} {vehicle.make} {vehicle.model} ({vehicle.kilometres} km)\n"
            f'APPRAISER NOTES: "{data.appraiser_notes or "No notes provided"}"\n\n'
            "GOAL: Calculate total estimated recon starting with the $670 Mandatory Base."
        )
    else:
        task = (
            "--- AUDIT TASK ---\n"
            f"VEHICLE: {vehicle.year} {vehicle.make} {vehicle.model} ({vehicle.kilometres} km)\n"
            f"PROGRAM: {data.program.value} | INSPECTION: {data.type.value}\n"
            f'APPRAISER NOTES: "{data.appraiser_notes}"\n'
            f'TECH NOTES: "{data.technician_notes}"\n'
            f"MGR BUDGET: ${data.manager_appraisal_estimate} | "
            f"TECH QUOTE: ${data.service_department_estimate}\n\n"
            "Compare these notes and flag discrepancies."
        )

    context = _context_section(history, technician, standards or [])
    return f"{task}\n\n{context}" if context else task


def parse_detected_total(text: str) -> Optional[float]:
    """Read the ``[DETECTED_TOTAL: n]`` marker; thousands separators are ignored."""
    match = DETECTED_TOTAL_PATTERN.search(text or "")
    if not match:
        return None
    try:
        return float(match.group(1).replace(",", ""))
    except ValueError:
        logger.warning(f"Unparseable detected total: {match.group(1)!r}")
        return None


@dataclass
class AnalysisOutcome:
    case: InspectionCase
    text: str
    citations: List[Citation] = field(default_factory=list)
    persisted: bool = True
    persistence_error: Optional[str] = None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


class AnalysisOrchestrator:
    """Runs an AI analysis and records the resulting case."""

    def __init__(
        self,
        llm: LLMClient,
        gateway,
        config: DealershipConfig,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.llm = llm
        self.gateway = gateway
        self.config = config
        self._clock = clock
        self._id_factory = id_factory

    async def analyze(
        self, vehicle: Vehicle, data: InspectionData, mode: AnalysisMode
    ) -> AnalysisOutcome:
        """Analyze a new capture and persist the case.

        Raises:
            AnalysisError: The AI call failed. Nothing is written.
        """
        cases = await self.gateway.get_all_cases()
        history = compute_historical_context(cases, vehicle.make, vehicle.model, vehicle.year)
        technician = next(
            (
                p for p in compute_technician_profiles(cases)
                if data.technician_name and p.technician_name == data.technician_name
            ),
            None,
        )
        standards = await self.gateway.get_standards()

        system = build_system_instruction(mode, self.config.brand)
        prompt = build_prompt(vehicle, data, mode, history, technician, standards)

        try:
            response = await self.llm.generate(system, prompt, images=data.attachments)
        except Exception as exc:
            logger.error(f"AI analysis failed for VIN {vehicle.vin}: {exc}")
            raise AnalysisError(f"AI analysis failed: {exc}") from exc

        text = response.text or FALLBACK_ANALYSIS_TEXT
        detected_total = parse_detected_total(text)

        case_data = data
        if detected_total:
            case_data = data.model_copy(update={"service_department_estimate": detected_total})

        case = InspectionCase(
            id=self._id_factory(),
            timestamp=self._clock(),
            mode=mode,
            vehicle=vehicle,
            data=case_data,
            analysis=text,
            detected_total=detected_total,
            current_status=PostReviewStatus.from_program(data.program),
            status_history=StatusHistory.empty(),
        )

        try:
            await self.gateway.save_case(case)
        except StorageError as exc:
            logger.error(f"Analysis for case {case.id} completed but was not saved: {exc}")
            return AnalysisOutcome(
                case=case,
                text=text,
                citations=response.citations,
                persisted=False,
                persistence_error=str(exc),
            )

        logger.info(
            f"Case {case.id} recorded ({mode.value}, detected total {detected_total})"
        )
        return AnalysisOutcome(case=case, text=text, citations=response.citations)

    async def clarify(self, case: InspectionCase, query: str) -> str:
        """Answer a follow-up question about an existing analysis. Never raises."""
        prompt = (
            "--- AUDIT CLARIFICATION REQUEST ---\n"
            f"VEHICLE: {case.vehicle.year} {case.vehicle.make} {case.vehicle.model}\n"
            f'APPRAISER: "{case.data.appraiser_notes}"\n'
            f'TECH: "{case.data.technician_notes}"\n'
            f"ORIGINAL AUDIT FINDINGS: {case.analysis or ''}\n\n"
            f'MANAGER QUERY: "{query}"\n\n'
            'Provide a professional, direct clarification. If the manager is asking for a '
            '"combat script" or how to push back, provide specific technical counter-arguments '
            "based on Ontario Safety or HCUV standards."
        )
        try:
            response = await self.llm.generate(
                CLARIFY_SYSTEM_INSTRUCTION, prompt, model=get_fast_model()
            )
        except Exception as exc:
            logger.error(f"Clarification failed for case {case.id}: {exc}")
            return CLARIFICATION_ERROR
        return response.text or CLARIFICATION_UNAVAILABLE
