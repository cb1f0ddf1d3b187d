"""System endpoints: health check."""

from fastapi import APIRouter

from recon_audit.api.dependencies import get_dealership_config, get_gateway

router = APIRouter(tags=["system"])


@router.get("/api/health")
@router.get("/health")  # Keep both for compatibility
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "backend": get_gateway().backend,
        "brand": get_dealership_config().brand.value,
    }
