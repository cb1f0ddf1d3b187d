"""Persistence gateway applying the read/write failure policy over a RecordStore.

Listing reads degrade to an empty collection on failure (logged only).
Writes propagate: generic failures as StorageWriteError, capacity
exhaustion as StorageQuotaExceededError so callers can show a distinct,
actionable message.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from recon_audit.errors import StorageQuotaExceededError, StorageWriteError
from recon_audit.schemas import (
    Appraiser,
    DealershipBrand,
    InspectionCase,
    StandardDocument,
    StandardType,
    Technician,
)
from recon_audit.storage.protocol import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PersistenceGateway:
    """Single entry point for persistence used by services and the API."""

    def __init__(
        self,
        store: RecordStore,
        default_brand: DealershipBrand = DealershipBrand.HONDA,
    ):
        self.store = store
        self.default_brand = default_brand

    @property
    def backend(self) -> str:
        return self.store.backend

    async def _read_list(self, what: str, fetch: Callable[[], Awaitable[list[T]]]) -> list[T]:
        try:
            return await fetch()
        except Exception as exc:
            logger.error(f"Error fetching {what}: {exc}")
            return []

    async def _write(self, what: str, op: Callable[[], Awaitable[None]]) -> None:
        try:
            await op()
        except (StorageQuotaExceededError, StorageWriteError):
            raise
        except Exception as exc:
            logger.error(f"Error saving {what}: {exc}")
            raise StorageWriteError(f"Failed to save {what}: {exc}") from exc

    # -------------------------------------------------------------------------
    # Cases
    # -------------------------------------------------------------------------

    async def get_all_cases(self) -> list[InspectionCase]:
        return await self._read_list("cases", self.store.get_all_cases)

    async def get_case(self, case_id: str) -> Optional[InspectionCase]:
        for case in await self.get_all_cases():
            if case.id == case_id:
                return case
        return None

    async def save_case(self, case: InspectionCase) -> None:
        await self._write(f"case {case.id}", lambda: self.store.save_case(case))

    async def delete_case(self, case_id: str) -> None:
        await self._write(f"case {case_id} (delete)", lambda: self.store.delete_case(case_id))

    # -------------------------------------------------------------------------
    # Standards
    # -------------------------------------------------------------------------

    async def get_standards(self) -> list[StandardDocument]:
        return await self._read_list("standards", self.store.get_standards)

    async def save_standard(self, doc: StandardDocument) -> None:
        await self._write(f"standard {doc.type.value}", lambda: self.store.save_standard(doc))

    async def delete_standard(self, standard_type: StandardType) -> None:
        value = StandardType(standard_type).value
        await self._write(f"standard {value} (delete)", lambda: self.store.delete_standard(value))

    # -------------------------------------------------------------------------
    # Personnel
    # -------------------------------------------------------------------------

    async def get_appraisers(self) -> list[Appraiser]:
        return await self._read_list("appraisers", self.store.get_appraisers)

    async def save_appraiser(self, appraiser: Appraiser) -> None:
        await self._write(f"appraiser {appraiser.id}", lambda: self.store.save_appraiser(appraiser))

    async def delete_appraiser(self, appraiser_id: str) -> None:
        await self._write(
            f"appraiser {appraiser_id} (delete)",
            lambda: self.store.delete_appraiser(appraiser_id),
        )

    async def get_technicians(self) -> list[Technician]:
        return await self._read_list("technicians", self.store.get_technicians)

    async def save_technician(self, technician: Technician) -> None:
        await self._write(
            f"technician {technician.id}", lambda: self.store.save_technician(technician)
        )

    async def delete_technician(self, technician_id: str) -> None:
        await self._write(
            f"technician {technician_id} (delete)",
            lambda: self.store.delete_technician(technician_id),
        )

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_brand(self) -> DealershipBrand:
        """Stored brand, or the default when unset, unknown, or unreadable."""
        try:
            value = await self.store.get_brand()
        except Exception as exc:
            logger.error(f"Error fetching brand: {exc}")
            return self.default_brand
        if not value:
            return self.default_brand
        try:
            return DealershipBrand(value)
        except ValueError:
            logger.warning(f"Unknown dealership brand {value!r}, using {self.default_brand.value}")
            return self.default_brand

    async def save_brand(self, brand: DealershipBrand) -> None:
        value = DealershipBrand(brand).value
        await self._write("brand", lambda: self.store.save_brand(value))
