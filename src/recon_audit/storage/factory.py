"""Select the record store backend once, at construction time."""

import logging

from recon_audit.startup import AppSettings
from recon_audit.storage.local import LocalRecordStore
from recon_audit.storage.protocol import RecordStore
from recon_audit.storage.remote import create_supabase_store

logger = logging.getLogger(__name__)


def create_local_store(settings: AppSettings) -> LocalRecordStore:
    return LocalRecordStore(settings.local_store_dir, quota_bytes=settings.local_quota_bytes)


def create_record_store(settings: AppSettings) -> RecordStore:
    """Supabase when credentials are configured, otherwise the local store."""
    if settings.has_remote_credentials:
        logger.info("Using Supabase record store")
        return create_supabase_store(settings.supabase_url, settings.supabase_key)

    logger.warning(
        "Supabase credentials missing or using placeholder. "
        "Database functionality will be limited to local storage."
    )
    return create_local_store(settings)
