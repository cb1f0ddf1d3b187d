"""API routers grouped by domain."""

from recon_audit.api.routers.admin import router as admin_router
from recon_audit.api.routers.cases import router as cases_router
from recon_audit.api.routers.dashboard import router as dashboard_router
from recon_audit.api.routers.intake import router as intake_router
from recon_audit.api.routers.system import router as system_router

__all__ = [
    "admin_router",
    "cases_router",
    "dashboard_router",
    "intake_router",
    "system_router",
]
