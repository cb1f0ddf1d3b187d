"""Tests for the API routers (dependencies patched at the router module level)."""

from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from recon_audit.api.exception_handlers import install_exception_handlers
from recon_audit.api.routers import admin as admin_module
from recon_audit.api.routers import cases as cases_module
from recon_audit.api.routers import dashboard as dashboard_module
from recon_audit.api.routers import intake as intake_module
from recon_audit.config import DealershipConfig
from recon_audit.errors import StorageWriteError
from recon_audit.lifecycle import StatusTransitionEngine
from recon_audit.schemas import Appraiser, PostReviewStatus, StandardDocument, StandardType
from recon_audit.services import AnalysisOrchestrator, DecodedVin, StandardsService
from recon_audit.services.llm_client import LLMResponse
from recon_audit.storage import PersistenceGateway, SupabaseRecordStore
from recon_audit.storage.remote import APPRAISERS_TABLE


def _app(*routers) -> FastAPI:
    app = FastAPI()
    install_exception_handlers(app)
    for router in routers:
        app.include_router(router)
    return app


def _analyze_payload(year=2022, program="HCUV"):
    return {
        "vehicle": {
            "vin": "2HGFE2F59NH000001",
            "year": year,
            "make": "Honda",
            "model": "Civic",
            "kilometres": 40000,
        },
        "data": {
            "program": program,
            "technician_name": "Sam Lee",
            "technician_notes": "Needs pads",
            "appraiser_notes": "Clean",
            "manager_appraisal_estimate": 500,
            "service_department_estimate": 900,
        },
        "mode": "Audit Mode",
    }


@pytest.fixture
def llm():
    client = MagicMock()
    client.generate = AsyncMock(return_value=LLMResponse(text="Fine. [DETECTED_TOTAL: 950]"))
    return client


@pytest.fixture
def cases_client(gateway, llm):
    orchestrator = AnalysisOrchestrator(llm, gateway, DealershipConfig())
    engine = StatusTransitionEngine(gateway, clock=lambda: 5)
    with ExitStack() as stack:
        stack.enter_context(patch.object(cases_module, "get_gateway", return_value=gateway))
        stack.enter_context(
            patch.object(cases_module, "get_analysis_orchestrator", return_value=orchestrator)
        )
        stack.enter_context(
            patch.object(cases_module, "get_transition_engine", return_value=engine)
        )
        yield TestClient(_app(cases_module.router))


class TestCasesRouter:
    def test_analyze_creates_case(self, cases_client):
        resp = cases_client.post("/api/cases/analyze", json=_analyze_payload())

        assert resp.status_code == 200
        data = resp.json()
        assert data["persisted"] is True
        assert data["case"]["detected_total"] == 950
        assert data["case"]["current_status"] == "HCUV"
        assert cases_client.get("/api/cases").json()[0]["id"] == data["case"]["id"]

    def test_analyze_downgrades_ineligible_program(self, cases_client):
        resp = cases_client.post("/api/cases/analyze", json=_analyze_payload(year=2005))

        assert resp.status_code == 200
        case = resp.json()["case"]
        assert case["data"]["program"] == "Certified"
        assert case["current_status"] == "Certified"

    def test_analyze_ai_failure_is_502(self, cases_client, llm, gateway):
        llm.generate.side_effect = RuntimeError("model overloaded")

        resp = cases_client.post("/api/cases/analyze", json=_analyze_payload())

        assert resp.status_code == 502
        assert resp.json()["error"] == "AnalysisError"

    def test_unknown_case_is_404(self, cases_client):
        assert cases_client.get("/api/cases/nope").status_code == 404

    @pytest.mark.asyncio
    async def test_status_change_records_history(self, cases_client, gateway, make_case):
        await gateway.save_case(make_case("c1"))

        resp = cases_client.post("/api/cases/c1/status", json={"status": "Wholesale"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["changed"] is True
        assert data["entry"] == {"from": "HCUV", "to": "Wholesale", "timestamp": 5, "type": "Downgrade"}
        stored = await gateway.get_case("c1")
        assert stored.current_status == PostReviewStatus.WHOLESALE

    @pytest.mark.asyncio
    async def test_ineligible_status_is_422(self, cases_client, gateway, make_case):
        await gateway.save_case(make_case("c1", status=PostReviewStatus.CERTIFIED, year=2005))

        resp = cases_client.post("/api/cases/c1/status", json={"status": "HCUV"})

        assert resp.status_code == 422
        assert resp.json()["reason"] == "Age > 6yrs"
        stored = await gateway.get_case("c1")
        assert stored.current_status == PostReviewStatus.CERTIFIED

    @pytest.mark.asyncio
    async def test_status_write_failure_is_503(self, cases_client, gateway, make_case):
        await gateway.save_case(make_case("c1"))

        with patch.object(gateway, "save_case", AsyncMock(side_effect=StorageWriteError("down"))):
            resp = cases_client.post("/api/cases/c1/status", json={"status": "Certified"})

        assert resp.status_code == 503

    @pytest.mark.asyncio
    async def test_clarify(self, cases_client, llm, gateway, make_case):
        await gateway.save_case(make_case("c1"))
        llm.generate.return_value = LLMResponse(text="Pads are a safety item.")

        resp = cases_client.post("/api/cases/c1/clarify", json={"query": "Why pads?"})

        assert resp.status_code == 200
        assert resp.json() == {"answer": "Pads are a safety item."}

    @pytest.mark.asyncio
    async def test_search_and_delete(self, cases_client, gateway, make_case):
        await gateway.save_case(make_case("c1", model="Accord"))
        await gateway.save_case(make_case("c2", model="Civic"))

        assert [c["id"] for c in cases_client.get("/api/cases?q=accord").json()] == ["c1"]

        assert cases_client.delete("/api/cases/c1").status_code == 200
        assert [c["id"] for c in cases_client.get("/api/cases").json()] == ["c2"]


class TestIntakeRouter:
    @pytest.fixture
    def client(self):
        return TestClient(_app(intake_module.router))

    def test_program_kept_when_eligible(self, client):
        resp = client.post("/api/intake/program", json={"program": "Certified", "year": 1990})
        assert resp.json() == {
            "requested": "Certified",
            "program": "Certified",
            "downgraded": False,
            "reason": None,
        }

    def test_program_downgraded_with_reason(self, client):
        resp = client.post(
            "/api/intake/program", json={"program": "HCUV", "year": 2005, "kilometres": 10}
        )
        data = resp.json()
        assert data["program"] == "Certified"
        assert data["downgraded"] is True
        assert data["reason"] == "Age > 6yrs"

    def test_vin_lookup(self, client):
        decoded = DecodedVin(year=2022, make="HONDA", model="Civic")
        with patch.object(intake_module, "decode_vin", AsyncMock(return_value=decoded)):
            resp = client.get("/api/vin/2HGFE2F59NH000001")

        assert resp.status_code == 200
        assert resp.json()["make"] == "HONDA"

    def test_vin_lookup_failure_is_404(self, client):
        with patch.object(intake_module, "decode_vin", AsyncMock(return_value=None)):
            assert client.get("/api/vin/BAD").status_code == 404

    def test_vin_decode_overwrites_vehicle(self, client, make_case):
        vehicle = make_case(year=2019, make="Hnda", model="").vehicle
        decoded = DecodedVin(year=2022, make="HONDA", model="Civic")

        with patch.object(intake_module, "decode_vin", AsyncMock(return_value=decoded)):
            resp = client.post("/api/vin/decode", json={"vehicle": vehicle.model_dump(mode="json")})

        assert resp.status_code == 200
        data = resp.json()
        assert (data["year"], data["make"], data["model"]) == (2022, "HONDA", "Civic")
        assert data["kilometres"] == vehicle.kilometres

    def test_vin_decode_failure_keeps_vehicle(self, client, make_case):
        vehicle = make_case(year=2019).vehicle

        with patch.object(intake_module, "decode_vin", AsyncMock(return_value=None)):
            resp = client.post("/api/vin/decode", json={"vehicle": vehicle.model_dump(mode="json")})

        assert resp.status_code == 200
        assert resp.json()["year"] == 2019


class TestDashboardRouter:
    @pytest.fixture
    def client(self, gateway):
        with patch.object(dashboard_module, "get_gateway", return_value=gateway):
            yield TestClient(_app(dashboard_module.router))

    @pytest.mark.asyncio
    async def test_dashboard_stats(self, client, gateway, make_case):
        await gateway.save_case(make_case("c1", status=PostReviewStatus.HCUV, service_estimate=1500))
        await gateway.save_case(make_case("c2", status=PostReviewStatus.WHOLESALE))

        resp = client.get("/api/dashboard?range=all")

        assert resp.status_code == 200
        stats = resp.json()["stats"]
        assert stats["total_cases"] == 2
        assert stats["certified_rate"] == 50.0
        assert stats["total_variance"] == 500

    @pytest.mark.asyncio
    async def test_search_narrows_cases_not_stats(self, client, gateway, make_case):
        await gateway.save_case(
            make_case("c1", technician="Alice", manager_estimate=0, service_estimate=2000)
        )
        await gateway.save_case(make_case("c2", technician="Bob"))

        resp = client.get("/api/dashboard?range=all&q=alice")

        data = resp.json()
        assert [c["id"] for c in data["cases"]] == ["c1"]
        assert data["stats"]["total_cases"] == 2
        assert data["stats"]["total_variance"] == 2000
        assert data["stats"]["avg_variance"] == 1000

    @pytest.mark.asyncio
    async def test_technician_profiles(self, client, gateway, make_case):
        await gateway.save_case(make_case("c1", technician="Ana", service_estimate=4000))

        resp = client.get("/api/dashboard/technicians")

        assert resp.json()[0]["reliability_tag"] == "Aggressive"

    def test_invalid_range_rejected(self, client):
        assert client.get("/api/dashboard?range=decade").status_code == 422


class TestAdminRouter:
    @pytest.fixture
    def standards_service(self):
        service = MagicMock(spec=StandardsService)
        service.list = AsyncMock(return_value=[])
        service.upload = AsyncMock(
            return_value=StandardDocument(
                id="s1", type=StandardType.SAFETY, file_name="safety.pdf",
                upload_date=1, extracted_rules="Tread depth 4/32 minimum",
            )
        )
        return service

    @pytest.fixture
    def client(self, gateway, local_store, standards_service):
        with ExitStack() as stack:
            stack.enter_context(patch.object(admin_module, "get_gateway", return_value=gateway))
            stack.enter_context(
                patch.object(admin_module, "get_local_store", return_value=local_store)
            )
            stack.enter_context(
                patch.object(admin_module, "get_standards_service", return_value=standards_service)
            )
            stack.enter_context(patch.object(admin_module, "set_dealership_config"))
            yield TestClient(_app(admin_module.router))

    def test_brand_update(self, client):
        assert client.get("/api/admin/brand").json() == {
            "brand": "Honda",
            "cpo_manual_label": "HCUV Manual (Honda)",
        }

        resp = client.put("/api/admin/brand", json={"brand": "Toyota"})

        assert resp.status_code == 200
        assert resp.json()["cpo_manual_label"] == "TCUV Manual (Toyota)"
        assert client.get("/api/admin/brand").json()["brand"] == "Toyota"
        admin_module.set_dealership_config.assert_called_once_with(DealershipConfig(brand="Toyota"))

    def test_unknown_brand_rejected(self, client):
        assert client.put("/api/admin/brand", json={"brand": "Lada"}).status_code == 422

    def test_appraiser_crud(self, client):
        created = client.post("/api/admin/appraisers", json={"name": " Ann "}).json()
        assert created["name"] == "Ann"

        assert [a["name"] for a in client.get("/api/admin/appraisers").json()] == ["Ann"]
        client.delete(f"/api/admin/appraisers/{created['id']}")
        assert client.get("/api/admin/appraisers").json() == []

    def test_technician_create(self, client):
        resp = client.post("/api/admin/technicians", json={"name": "Tom", "tech_number": "42"})
        assert resp.json()["tech_number"] == "42"

    def test_standard_upload(self, client, standards_service):
        resp = client.post(
            "/api/admin/standards",
            json={"type": "SAFETY", "file_name": "safety.pdf", "content": "JVBE"},
        )

        assert resp.status_code == 200
        assert resp.json()["extracted_rules"] == "Tread depth 4/32 minimum"
        standards_service.upload.assert_awaited_once_with(StandardType.SAFETY, "safety.pdf", "JVBE")

    def test_health(self, client):
        data = client.get("/api/admin/health").json()
        assert data["backend"] == "local"
        assert data["is_healthy"] is True

    def test_sync_without_cloud_fails(self, client):
        data = client.post("/api/admin/sync").json()
        assert data["success"] is False

    @pytest.mark.asyncio
    async def test_sync_to_cloud(self, local_store, fake_supabase):
        await local_store.save_appraiser(Appraiser(id="a1", name="Ann"))
        remote_gateway = PersistenceGateway(SupabaseRecordStore(fake_supabase))

        with ExitStack() as stack:
            stack.enter_context(
                patch.object(admin_module, "get_gateway", return_value=remote_gateway)
            )
            stack.enter_context(
                patch.object(admin_module, "get_local_store", return_value=local_store)
            )
            resp = TestClient(_app(admin_module.router)).post("/api/admin/sync")

        assert resp.json() == {"success": True, "count": 1, "error": None}
        assert fake_supabase.tables[APPRAISERS_TABLE][0]["name"] == "Ann"
