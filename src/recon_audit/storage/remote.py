"""Supabase-backed record store.

Tables (see sql/supabase_schema.sql):
    inspection_cases(id, timestamp, mode, vehicle, data, analysis,
                     detected_total, current_status, status_history)
    standards(id, type UNIQUE, file_name, upload_date, extracted_rules)
    appraisers(id, name)
    technicians(id, name, tech_number)
    settings(key PRIMARY KEY, value)

Filtering and ordering happen server-side. ``timestamp`` and
``upload_date`` are stored as ISO-8601 strings and converted to epoch
milliseconds here. The supabase client is synchronous, so each request
runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from recon_audit.schemas import (
    Appraiser,
    InspectionCase,
    StandardDocument,
    Technician,
)
from recon_audit.storage.timestamps import iso_to_ms, ms_to_iso

logger = logging.getLogger(__name__)

CASES_TABLE = "inspection_cases"
STANDARDS_TABLE = "standards"
APPRAISERS_TABLE = "appraisers"
TECHNICIANS_TABLE = "technicians"
SETTINGS_TABLE = "settings"
BRAND_KEY = "dealership_brand"


# =============================================================================
# ROW MAPPING
# =============================================================================


def case_to_row(case: InspectionCase) -> dict:
    data = case.model_dump(mode="json", by_alias=True)
    return {
        "id": data["id"],
        "timestamp": ms_to_iso(case.timestamp),
        "mode": data["mode"],
        "vehicle": data["vehicle"],
        "data": data["data"],
        "analysis": data["analysis"],
        "detected_total": data["detected_total"],
        "current_status": data["current_status"],
        "status_history": data["status_history"],
    }


def case_from_row(row: dict) -> InspectionCase:
    return InspectionCase.model_validate({
        "id": row["id"],
        "timestamp": iso_to_ms(row["timestamp"]),
        "mode": row["mode"],
        "vehicle": row["vehicle"],
        "data": row["data"],
        "analysis": row.get("analysis"),
        "detected_total": row.get("detected_total"),
        "current_status": row["current_status"],
        "status_history": row.get("status_history") or [],
    })


def standard_to_row(doc: StandardDocument) -> dict:
    return {
        "id": doc.id,
        "type": doc.type.value,
        "file_name": doc.file_name,
        "upload_date": ms_to_iso(doc.upload_date),
        "extracted_rules": doc.extracted_rules,
    }


def standard_from_row(row: dict) -> StandardDocument:
    return StandardDocument(
        id=row["id"],
        type=row["type"],
        file_name=row.get("file_name") or "",
        upload_date=iso_to_ms(row["upload_date"]),
        extracted_rules=row.get("extracted_rules") or "",
    )


def technician_to_row(tech: Technician) -> dict:
    return {"id": tech.id, "name": tech.name, "tech_number": tech.tech_number}


def technician_from_row(row: dict) -> Technician:
    return Technician(id=row["id"], name=row["name"], tech_number=row.get("tech_number") or "")


# =============================================================================
# STORE
# =============================================================================


class SupabaseRecordStore:
    """RecordStore over Supabase (PostgREST) tables."""

    backend = "supabase"

    def __init__(self, client: Any):
        self.client = client

    async def _execute(self, build: Callable[[], Any]) -> list[dict]:
        response = await asyncio.to_thread(lambda: build().execute())
        return response.data or []

    def _table(self, name: str):
        return self.client.table(name)

    # Cases

    async def get_all_cases(self) -> list[InspectionCase]:
        rows = await self._execute(
            lambda: self._table(CASES_TABLE).select("*").order("timestamp", desc=True)
        )
        return [case_from_row(row) for row in rows]

    async def save_case(self, case: InspectionCase) -> None:
        row = case_to_row(case)
        await self._execute(lambda: self._table(CASES_TABLE).upsert(row))

    async def delete_case(self, case_id: str) -> None:
        await self._execute(lambda: self._table(CASES_TABLE).delete().eq("id", case_id))

    # Standards

    async def get_standards(self) -> list[StandardDocument]:
        rows = await self._execute(lambda: self._table(STANDARDS_TABLE).select("*"))
        return [standard_from_row(row) for row in rows]

    async def save_standard(self, doc: StandardDocument) -> None:
        row = standard_to_row(doc)
        await self._execute(
            lambda: self._table(STANDARDS_TABLE).upsert(row, on_conflict="type")
        )

    async def delete_standard(self, standard_type: str) -> None:
        await self._execute(
            lambda: self._table(STANDARDS_TABLE).delete().eq("type", standard_type)
        )

    # Personnel

    async def get_appraisers(self) -> list[Appraiser]:
        rows = await self._execute(
            lambda: self._table(APPRAISERS_TABLE).select("*").order("name")
        )
        return [Appraiser(id=row["id"], name=row["name"]) for row in rows]

    async def save_appraiser(self, appraiser: Appraiser) -> None:
        row = {"id": appraiser.id, "name": appraiser.name}
        await self._execute(lambda: self._table(APPRAISERS_TABLE).upsert(row))

    async def delete_appraiser(self, appraiser_id: str) -> None:
        await self._execute(
            lambda: self._table(APPRAISERS_TABLE).delete().eq("id", appraiser_id)
        )

    async def get_technicians(self) -> list[Technician]:
        rows = await self._execute(
            lambda: self._table(TECHNICIANS_TABLE).select("*").order("name")
        )
        return [technician_from_row(row) for row in rows]

    async def save_technician(self, technician: Technician) -> None:
        row = technician_to_row(technician)
        await self._execute(lambda: self._table(TECHNICIANS_TABLE).upsert(row))

    async def delete_technician(self, technician_id: str) -> None:
        await self._execute(
            lambda: self._table(TECHNICIANS_TABLE).delete().eq("id", technician_id)
        )

    # Settings

    async def get_brand(self) -> Optional[str]:
        rows = await self._execute(
            lambda: self._table(SETTINGS_TABLE).select("value").eq("key", BRAND_KEY).limit(1)
        )
        return rows[0]["value"] if rows else None

    async def save_brand(self, brand: str) -> None:
        row = {"key": BRAND_KEY, "value": brand}
        await self._execute(lambda: self._table(SETTINGS_TABLE).upsert(row))


def create_supabase_store(url: str, key: str) -> SupabaseRecordStore:
    """Build a store from Supabase credentials (requires the supabase package)."""
    from supabase import create_client

    logger.debug(f"Creating Supabase client for {url[:30]}...")
    return SupabaseRecordStore(create_client(url, key))
