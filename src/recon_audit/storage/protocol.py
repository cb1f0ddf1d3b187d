"""Record store protocol defining the async interface for persistence.

Two implementations exist: LocalRecordStore (flat JSON key-value blobs on
disk) and SupabaseRecordStore (remote Postgres tables). Exactly one is
selected at startup; consuming code only sees this protocol.
"""

from typing import Literal, Optional, Protocol, runtime_checkable

from recon_audit.schemas import (
    Appraiser,
    InspectionCase,
    StandardDocument,
    Technician,
)

BackendKind = Literal["local", "supabase"]


@runtime_checkable
class RecordStore(Protocol):
    """Uniform CRUD over cases, standards, personnel and the brand setting.

    All writes are upserts keyed by id, except standards which are keyed by
    document type. Deletes of unknown ids are not errors.
    """

    backend: BackendKind

    # -------------------------------------------------------------------------
    # Cases
    # -------------------------------------------------------------------------

    async def get_all_cases(self) -> list[InspectionCase]:
        """List all cases, newest first by timestamp."""
        ...

    async def save_case(self, case: InspectionCase) -> None:
        """Insert or replace a case by id."""
        ...

    async def delete_case(self, case_id: str) -> None:
        ...

    # -------------------------------------------------------------------------
    # Standards (one document per type)
    # -------------------------------------------------------------------------

    async def get_standards(self) -> list[StandardDocument]:
        ...

    async def save_standard(self, doc: StandardDocument) -> None:
        """Insert or replace the document for ``doc.type``."""
        ...

    async def delete_standard(self, standard_type: str) -> None:
        ...

    # -------------------------------------------------------------------------
    # Personnel
    # -------------------------------------------------------------------------

    async def get_appraisers(self) -> list[Appraiser]:
        """List appraisers ordered by name."""
        ...

    async def save_appraiser(self, appraiser: Appraiser) -> None:
        ...

    async def delete_appraiser(self, appraiser_id: str) -> None:
        ...

    async def get_technicians(self) -> list[Technician]:
        """List technicians ordered by name."""
        ...

    async def save_technician(self, technician: Technician) -> None:
        ...

    async def delete_technician(self, technician_id: str) -> None:
        ...

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_brand(self) -> Optional[str]:
        """Stored dealership brand, or None if never set."""
        ...

    async def save_brand(self, brand: str) -> None:
        ...
