"""One-shot replay of the local store into the remote store.

Every record is replayed as an independent upsert, so a sync interrupted
part-way can simply be run again: already-copied records are re-applied
without creating duplicates. There is no transaction across records.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from recon_audit.storage.protocol import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    success: bool
    count: int = 0
    error: Optional[str] = None


async def sync_local_to_cloud(
    local: RecordStore, remote: Optional[RecordStore]
) -> SyncResult:
    """Upsert every local record into ``remote``.

    Order: brand, appraisers, technicians, standards, cases. Stops at the
    first failure and reports how many records were copied before it.
    """
    if remote is None or remote.backend != "supabase":
        return SyncResult(success=False, error="Cloud storage is not configured")

    count = 0
    try:
        brand = await local.get_brand()
        if brand:
            await remote.save_brand(brand)
            count += 1

        for appraiser in await local.get_appraisers():
            await remote.save_appraiser(appraiser)
            count += 1

        for technician in await local.get_technicians():
            await remote.save_technician(technician)
            count += 1

        for doc in await local.get_standards():
            await remote.save_standard(doc)
            count += 1

        for case in await local.get_all_cases():
            await remote.save_case(case)
            count += 1
    except Exception as exc:
        logger.error(f"Sync aborted after {count} records: {exc}")
        return SyncResult(success=False, count=count, error=str(exc))

    logger.info(f"Synced {count} local records to cloud")
    return SyncResult(success=True, count=count)
