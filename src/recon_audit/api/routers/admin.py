"""Admin router: brand, personnel, standards library, health and cloud sync."""

import logging
import uuid
from typing import List

from fastapi import APIRouter

from recon_audit.api.dependencies import (
    get_gateway,
    get_local_store,
    get_standards_service,
    set_dealership_config,
)
from recon_audit.api.models import (
    AppraiserCreate,
    BrandPayload,
    BrandResponse,
    StandardUploadRequest,
    SyncResponse,
    TechnicianCreate,
)
from recon_audit.config import DealershipConfig
from recon_audit.reporting import compute_database_health
from recon_audit.schemas import (
    Appraiser,
    DatabaseHealth,
    StandardDocument,
    StandardType,
    Technician,
)
from recon_audit.storage import sync_local_to_cloud

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


# =============================================================================
# BRAND
# =============================================================================


@router.get("/api/admin/brand", response_model=BrandResponse)
async def get_brand():
    config = DealershipConfig(brand=await get_gateway().get_brand())
    return BrandResponse(brand=config.brand, cpo_manual_label=config.cpo_manual_label)


@router.put("/api/admin/brand", response_model=BrandResponse)
async def update_brand(payload: BrandPayload):
    await get_gateway().save_brand(payload.brand)
    config = DealershipConfig(brand=payload.brand)
    set_dealership_config(config)
    logger.info(f"Dealership brand set to {payload.brand.value}")
    return BrandResponse(brand=config.brand, cpo_manual_label=config.cpo_manual_label)


# =============================================================================
# PERSONNEL
# =============================================================================


@router.get("/api/admin/appraisers", response_model=List[Appraiser])
async def list_appraisers():
    return await get_gateway().get_appraisers()


@router.post("/api/admin/appraisers", response_model=Appraiser)
async def create_appraiser(payload: AppraiserCreate):
    appraiser = Appraiser(id=str(uuid.uuid4()), name=payload.name.strip())
    await get_gateway().save_appraiser(appraiser)
    return appraiser


@router.delete("/api/admin/appraisers/{appraiser_id}")
async def delete_appraiser(appraiser_id: str):
    await get_gateway().delete_appraiser(appraiser_id)
    return {"deleted": appraiser_id}


@router.get("/api/admin/technicians", response_model=List[Technician])
async def list_technicians():
    return await get_gateway().get_technicians()


@router.post("/api/admin/technicians", response_model=Technician)
async def create_technician(payload: TechnicianCreate):
    technician = Technician(
        id=str(uuid.uuid4()),
        name=payload.name.strip(),
        tech_number=payload.tech_number.strip(),
    )
    await get_gateway().save_technician(technician)
    return technician


@router.delete("/api/admin/technicians/{technician_id}")
async def delete_technician(technician_id: str):
    await get_gateway().delete_technician(technician_id)
    return {"deleted": technician_id}


# =============================================================================
# STANDARDS
# =============================================================================


@router.get("/api/admin/standards", response_model=List[StandardDocument])
async def list_standards():
    return await get_standards_service().list()


@router.post("/api/admin/standards", response_model=StandardDocument)
async def upload_standard(request: StandardUploadRequest):
    """Digest a PDF and replace the stored document of the same type."""
    return await get_standards_service().upload(request.type, request.file_name, request.content)


@router.delete("/api/admin/standards/{standard_type}")
async def delete_standard(standard_type: StandardType):
    await get_gateway().delete_standard(standard_type)
    return {"deleted": standard_type.value}


# =============================================================================
# HEALTH & SYNC
# =============================================================================


@router.get("/api/admin/health", response_model=DatabaseHealth)
async def database_health():
    return await compute_database_health(get_gateway())


@router.post("/api/admin/sync", response_model=SyncResponse)
async def sync_to_cloud():
    """Replay every local record into the configured Supabase backend."""
    result = await sync_local_to_cloud(get_local_store(), get_gateway().store)
    return SyncResponse(success=result.success, count=result.count, error=result.error)
