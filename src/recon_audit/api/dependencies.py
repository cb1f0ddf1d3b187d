"""FastAPI dependencies for the recon audit API.

This module provides:
- Settings and storage access
- The dealership configuration loaded at startup
- Service instance getters (singletons, reset by tests)
"""

from typing import Optional

from recon_audit.config import DealershipConfig, load_dealership_config
from recon_audit.lifecycle import StatusTransitionEngine
from recon_audit.services import AnalysisOrchestrator, LLMClient, StandardsService
from recon_audit.startup import AppSettings, ensure_initialized
from recon_audit.storage import (
    LocalRecordStore,
    PersistenceGateway,
    create_local_store,
    create_record_store,
)


# =============================================================================
# SETTINGS & STORAGE
# =============================================================================

_gateway: Optional[PersistenceGateway] = None
_dealership_config: Optional[DealershipConfig] = None
_llm_client: Optional[LLMClient] = None


def get_settings() -> AppSettings:
    return ensure_initialized()


def get_gateway() -> PersistenceGateway:
    """Get the PersistenceGateway singleton (backend chosen on first use)."""
    global _gateway
    if _gateway is None:
        _gateway = PersistenceGateway(create_record_store(get_settings()))
    return _gateway


def get_local_store() -> LocalRecordStore:
    """Local fallback store, used as the source for cloud sync."""
    return create_local_store(get_settings())


# =============================================================================
# DEALERSHIP CONFIG
# =============================================================================


async def init_dealership_config() -> DealershipConfig:
    """Load the brand from storage. Called once when the app starts."""
    global _dealership_config
    _dealership_config = await load_dealership_config(get_gateway())
    return _dealership_config


def get_dealership_config() -> DealershipConfig:
    return _dealership_config or DealershipConfig()


def set_dealership_config(config: DealershipConfig) -> None:
    """Replace the in-memory config after the brand is changed."""
    global _dealership_config
    _dealership_config = config


# =============================================================================
# SERVICE GETTERS
# =============================================================================


def get_llm_client() -> LLMClient:
    """Get LLMClient singleton (OpenAI client is created on first call)."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def get_analysis_orchestrator() -> AnalysisOrchestrator:
    return AnalysisOrchestrator(get_llm_client(), get_gateway(), get_dealership_config())


def get_transition_engine() -> StatusTransitionEngine:
    return StatusTransitionEngine(get_gateway())


def get_standards_service() -> StandardsService:
    return StandardsService(get_llm_client(), get_gateway())


def reset_dependencies() -> None:
    """Drop cached singletons so the next request rebuilds them."""
    global _gateway, _dealership_config, _llm_client
    _gateway = None
    _dealership_config = None
    _llm_client = None
