"""Persistence layer for cases, standards, personnel and settings.

Usage:
    from recon_audit.storage import PersistenceGateway, create_record_store

    gateway = PersistenceGateway(create_record_store(settings))

    cases = await gateway.get_all_cases()   # newest first; [] on read failure
    await gateway.save_case(case)           # upsert by id; raises on failure
    await gateway.save_standard(doc)        # upsert by document type

    # Copy everything from the local fallback into Supabase
    result = await sync_local_to_cloud(create_local_store(settings), gateway.store)
"""

from .protocol import BackendKind, RecordStore
from .local import JsonBlobStore, LocalRecordStore
from .remote import SupabaseRecordStore, create_supabase_store
from .gateway import PersistenceGateway
from .sync import SyncResult, sync_local_to_cloud
from .factory import create_local_store, create_record_store

__all__ = [
    # Protocol
    "BackendKind",
    "RecordStore",
    # Implementations
    "JsonBlobStore",
    "LocalRecordStore",
    "SupabaseRecordStore",
    "create_supabase_store",
    # Gateway
    "PersistenceGateway",
    "SyncResult",
    "sync_local_to_cloud",
    "create_local_store",
    "create_record_store",
]
