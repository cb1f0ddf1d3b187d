"""Tests for the persistence gateway failure policy and cloud sync."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from recon_audit.errors import StorageQuotaExceededError, StorageWriteError
from recon_audit.schemas import (
    Appraiser,
    DealershipBrand,
    StandardDocument,
    StandardType,
    Technician,
)
from recon_audit.startup import AppSettings
from recon_audit.storage import (
    LocalRecordStore,
    PersistenceGateway,
    SupabaseRecordStore,
    create_record_store,
    sync_local_to_cloud,
)
from recon_audit.storage.remote import APPRAISERS_TABLE, CASES_TABLE


@pytest.fixture
def failing_store():
    """A store whose every method raises."""
    store = MagicMock()
    store.backend = "supabase"
    for name in (
        "get_all_cases", "save_case", "delete_case",
        "get_standards", "save_standard", "delete_standard",
        "get_appraisers", "save_appraiser", "delete_appraiser",
        "get_technicians", "save_technician", "delete_technician",
        "get_brand", "save_brand",
    ):
        setattr(store, name, AsyncMock(side_effect=ConnectionError("network down")))
    return store


class TestReadPolicy:
    @pytest.mark.asyncio
    async def test_list_reads_soft_fail_to_empty(self, failing_store):
        gateway = PersistenceGateway(failing_store)

        assert await gateway.get_all_cases() == []
        assert await gateway.get_standards() == []
        assert await gateway.get_appraisers() == []
        assert await gateway.get_technicians() == []

    @pytest.mark.asyncio
    async def test_get_case_missing_returns_none(self, failing_store):
        assert await PersistenceGateway(failing_store).get_case("x") is None

    @pytest.mark.asyncio
    async def test_brand_defaults_on_failure(self, failing_store):
        gateway = PersistenceGateway(failing_store)
        assert await gateway.get_brand() == DealershipBrand.HONDA

    @pytest.mark.asyncio
    async def test_brand_defaults_when_unset_or_unknown(self, local_store):
        gateway = PersistenceGateway(local_store, default_brand=DealershipBrand.FORD)
        assert await gateway.get_brand() == DealershipBrand.FORD

        await local_store.save_brand("Lada")
        assert await gateway.get_brand() == DealershipBrand.FORD

    @pytest.mark.asyncio
    async def test_brand_round_trip(self, gateway):
        await gateway.save_brand(DealershipBrand.TOYOTA)
        assert await gateway.get_brand() == DealershipBrand.TOYOTA


class TestWritePolicy:
    @pytest.mark.asyncio
    async def test_write_failure_wrapped(self, failing_store, make_case):
        gateway = PersistenceGateway(failing_store)

        with pytest.raises(StorageWriteError) as exc_info:
            await gateway.save_case(make_case())

        assert "network down" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_delete_failure_wrapped(self, failing_store):
        with pytest.raises(StorageWriteError):
            await PersistenceGateway(failing_store).delete_appraiser("a1")

    @pytest.mark.asyncio
    async def test_quota_error_propagates_distinctly(self, tmp_path, make_case):
        gateway = PersistenceGateway(LocalRecordStore(tmp_path, quota_bytes=100))

        with pytest.raises(StorageQuotaExceededError):
            await gateway.save_case(make_case())

    @pytest.mark.asyncio
    async def test_delete_standard_accepts_enum(self, gateway):
        doc = StandardDocument(
            id="s1",
            type=StandardType.DEALERSHIP,
            file_name="policy.pdf",
            upload_date=1,
            extracted_rules="Detail every unit",
        )
        await gateway.save_standard(doc)

        await gateway.delete_standard(StandardType.DEALERSHIP)

        assert await gateway.get_standards() == []


class TestCreateRecordStore:
    def test_local_without_credentials(self, tmp_path):
        settings = AppSettings(project_root=tmp_path, data_dir=tmp_path)
        store = create_record_store(settings)
        assert isinstance(store, LocalRecordStore)
        assert store.backend == "local"

    def test_placeholder_key_counts_as_missing(self, tmp_path):
        settings = AppSettings(
            project_root=tmp_path,
            data_dir=tmp_path,
            supabase_url="https://example.supabase.co",
            supabase_key="your_supabase_anon_key_here",
        )
        assert isinstance(create_record_store(settings), LocalRecordStore)


class TestSyncLocalToCloud:
    @pytest.mark.asyncio
    async def test_requires_remote(self, local_store):
        result = await sync_local_to_cloud(local_store, None)
        assert result.success is False
        assert result.error

    @pytest.mark.asyncio
    async def test_local_target_is_not_cloud(self, local_store, tmp_path):
        result = await sync_local_to_cloud(local_store, LocalRecordStore(tmp_path / "other"))
        assert result.success is False

    @pytest.mark.asyncio
    async def test_replays_without_duplicates(self, local_store, fake_supabase):
        """3 local appraisers, 2 already in the cloud: 3 rows after sync."""
        remote = SupabaseRecordStore(fake_supabase)
        appraisers = [Appraiser(id=f"a{i}", name=f"Appraiser {i}") for i in range(3)]
        for appraiser in appraisers:
            await local_store.save_appraiser(appraiser)
        for appraiser in appraisers[:2]:
            await remote.save_appraiser(appraiser)

        result = await sync_local_to_cloud(local_store, remote)

        assert result.success is True
        assert result.count == 3
        assert len(fake_supabase.tables[APPRAISERS_TABLE]) == 3

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, local_store, fake_supabase, make_case):
        remote = SupabaseRecordStore(fake_supabase)
        await local_store.save_brand("Toyota")
        await local_store.save_technician(Technician(id="t1", name="Tess"))
        await local_store.save_case(make_case("c1"))
        await local_store.save_case(make_case("c2", timestamp=1_700_000_100_000))

        first = await sync_local_to_cloud(local_store, remote)
        second = await sync_local_to_cloud(local_store, remote)

        assert first.count == second.count == 4
        assert len(fake_supabase.tables[CASES_TABLE]) == 2
        assert await remote.get_brand() == "Toyota"

    @pytest.mark.asyncio
    async def test_partial_failure_reports_count(self, local_store, fake_supabase, make_case):
        remote = SupabaseRecordStore(fake_supabase)
        fake_supabase.fail_tables.add(CASES_TABLE)
        await local_store.save_appraiser(Appraiser(id="a1", name="Ann"))
        await local_store.save_technician(Technician(id="t1", name="Tom"))
        await local_store.save_case(make_case("c1"))

        result = await sync_local_to_cloud(local_store, remote)

        assert result.success is False
        assert result.count == 2
        assert "simulated failure" in result.error
