"""
FastAPI backend for the recon audit console.

Provides endpoints for:
- AI audit / appraisal of new inspection cases
- Case listing, status lifecycle changes and follow-up clarifications
- Intake program eligibility and VIN lookup
- Dashboard variance statistics and technician reliability
- Admin: brand, personnel, standards library, health and cloud sync

Storage is Supabase when SUPABASE_URL / SUPABASE_ANON_KEY are set, else a
local JSON store under RECON_DATA_DIR.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from rich.logging import RichHandler

from recon_audit.api.dependencies import get_gateway, init_dealership_config
from recon_audit.api.exception_handlers import install_exception_handlers
from recon_audit.api.routers import (
    admin_router,
    cases_router,
    dashboard_router,
    intake_router,
    system_router,
)
from recon_audit.startup import ensure_initialized

logger = logging.getLogger(__name__)


def setup_logging(*, verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    handler = RichHandler(
        console=None,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Suppress noisy third-party loggers
    for name in ("openai._base_client", "httpx", "httpcore", "hpack"):
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_initialized()
    config = await init_dealership_config()
    logger.info(f"Recon audit API ready (backend={get_gateway().backend}, brand={config.brand.value})")
    yield


# =============================================================================
# APP SETUP
# =============================================================================

setup_logging(verbose=os.getenv("RECON_LOG_LEVEL", "").upper() == "DEBUG")

app = FastAPI(
    title="Recon Audit API",
    description="Reconditioning audit, appraisal and status lifecycle for dealership inventory",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for the React frontend in development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

app.include_router(system_router)
app.include_router(cases_router)
app.include_router(intake_router)
app.include_router(dashboard_router)
app.include_router(admin_router)
