"""Services that talk to the AI collaborator and external lookups."""

from .llm_client import (
    Citation,
    LLMClient,
    LLMResponse,
    get_default_model,
    get_fast_model,
    get_openai_client,
    is_azure_openai_configured,
)
from .analysis import (
    AnalysisOrchestrator,
    AnalysisOutcome,
    build_prompt,
    build_system_instruction,
    parse_detected_total,
)
from .vin import DecodedVin, decode_vin, extract_vin_from_image, merge_decoded
from .standards import StandardsService, digest_standard_document

__all__ = [
    "Citation",
    "LLMClient",
    "LLMResponse",
    "get_default_model",
    "get_fast_model",
    "get_openai_client",
    "is_azure_openai_configured",
    "AnalysisOrchestrator",
    "AnalysisOutcome",
    "build_prompt",
    "build_system_instruction",
    "parse_detected_total",
    "DecodedVin",
    "decode_vin",
    "extract_vin_from_image",
    "merge_decoded",
    "StandardsService",
    "digest_standard_document",
]
