"""
Recon Audit - reconditioning audit and appraisal service for dealership inventory.

This package provides the status lifecycle and eligibility engine, a
dual-backend (Supabase / local) persistence gateway, dashboard reporting
and an AI analysis orchestrator exposed through a FastAPI backend.
"""

__version__ = "0.1.0"

from recon_audit.errors import ReconAuditError

__all__ = [
    "ReconAuditError",
]
