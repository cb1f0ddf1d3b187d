"""
Pytest fixtures shared by the recon_audit tests.

Provides case builders, a local store in a temp dir, and an in-memory
stand-in for the supabase client's query builder.
"""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from recon_audit.schemas import (
    AnalysisMode,
    InspectionCase,
    InspectionData,
    InventoryProgram,
    PostReviewStatus,
    StatusHistory,
    Vehicle,
)
from recon_audit.storage import LocalRecordStore, PersistenceGateway

# Fixed "now" for deterministic eligibility checks.
CURRENT_YEAR = 2025


def build_vehicle(**overrides) -> Vehicle:
    values = {
        "vin": "2HGFE2F59NH000001",
        "year": 2022,
        "make": "Honda",
        "model": "Civic",
        "trim": "EX",
        "kilometres": 40_000,
        "stock_number": "U1234",
    }
    values.update(overrides)
    return Vehicle(**values)


def build_case(
    case_id: str = "case-1",
    timestamp: int = 1_700_000_000_000,
    status: PostReviewStatus = PostReviewStatus.HCUV,
    technician: str = "Sam Lee",
    manager_estimate: float = 1000.0,
    service_estimate: float = 1000.0,
    **vehicle_overrides,
) -> InspectionCase:
    return InspectionCase(
        id=case_id,
        timestamp=timestamp,
        mode=AnalysisMode.AUDIT,
        vehicle=build_vehicle(**vehicle_overrides),
        data=InspectionData(
            program=InventoryProgram.HCUV,
            technician_name=technician,
            manager_appraisal_estimate=manager_estimate,
            service_department_estimate=service_estimate,
        ),
        analysis="Looks fine. [DETECTED_TOTAL: 1000]",
        detected_total=1000.0,
        current_status=status,
        status_history=StatusHistory.empty(),
    )


@pytest.fixture
def make_case():
    """Factory for InspectionCase objects."""
    return build_case


@pytest.fixture
def local_store(tmp_path):
    return LocalRecordStore(tmp_path / "local_store")


@pytest.fixture
def gateway(local_store):
    return PersistenceGateway(local_store)


# =============================================================================
# FAKE SUPABASE CLIENT
# =============================================================================


class FakeQuery:
    """Records one chained PostgREST call and applies it to in-memory tables."""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table = table
        self.action = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.on_conflict: Optional[str] = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.row_limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self.action = "select"
        return self

    def upsert(self, row: Dict[str, Any], on_conflict: Optional[str] = None):
        self.action = "upsert"
        self.payload = dict(row)
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(col) == value for col, value in self.filters)

    def execute(self):
        self.client.calls.append((self.table, self.action, self.on_conflict))
        if self.table in self.client.fail_tables:
            raise RuntimeError(f"simulated failure on {self.table}")

        rows = self.client.tables.setdefault(self.table, [])

        if self.action == "upsert":
            key = self.on_conflict or self.client.primary_keys.get(self.table, "id")
            for i, row in enumerate(rows):
                if row.get(key) == self.payload.get(key):
                    rows[i] = self.payload
                    break
            else:
                rows.append(self.payload)
            return SimpleNamespace(data=[self.payload])

        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.client.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)

        result = [dict(r) for r in rows if self._matches(r)]
        if self.order_by:
            column, desc = self.order_by
            result.sort(key=lambda r: r.get(column), reverse=desc)
        if self.row_limit is not None:
            result = result[: self.row_limit]
        return SimpleNamespace(data=result)


class FakeSupabaseClient:
    """Just enough of ``supabase.Client`` for SupabaseRecordStore."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.primary_keys = {"settings": "key"}
        self.fail_tables: set = set()
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabaseClient()
