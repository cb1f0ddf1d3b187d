"""Local fallback record store backed by flat JSON blobs.

Each key holds one JSON-serializable value in ``{root}/{key}.json``.
There is no server-side filtering: every read loads the full collection
and filtering/sorting happens here. Writes are atomic (tmp + replace).

An optional byte quota emulates a bounded browser-style key-value store;
exceeding it (or the disk filling up) raises StorageQuotaExceededError.

Blob I/O runs in worker threads via ``asyncio.to_thread``. Read-modify-write
updates hold a lock so concurrent saves to one key are not lost.
"""

import asyncio
import errno
import json
import threading
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from recon_audit.errors import StorageError, StorageQuotaExceededError
from recon_audit.schemas import (
    Appraiser,
    InspectionCase,
    StandardDocument,
    Technician,
)

CASES_KEY = "auto_audit_cases"
STANDARDS_KEY = "auto_audit_standards"
APPRAISERS_KEY = "auto_audit_appraisers"
TECHNICIANS_KEY = "auto_audit_technicians"
BRAND_KEY = "dealership_brand"

_CAPACITY_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}

M = TypeVar("M", bound=BaseModel)


class JsonBlobStore:
    """Minimal key -> JSON value store on the filesystem."""

    def __init__(self, root: Path, quota_bytes: Optional[int] = None):
        self.root = Path(root)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def _size(self, key: str) -> int:
        path = self._path(key)
        return path.stat().st_size if path.exists() else 0

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        size = len(payload.encode("utf-8"))

        if self.quota_bytes is not None:
            projected = self.usage_bytes() - self._size(key) + size
            if projected > self.quota_bytes:
                raise StorageQuotaExceededError(
                    used_bytes=projected, quota_bytes=self.quota_bytes
                )

        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            if exc.errno in _CAPACITY_ERRNOS:
                raise StorageQuotaExceededError(
                    used_bytes=self.usage_bytes(), quota_bytes=self.quota_bytes or 0
                ) from exc
            raise StorageError(f"Failed to write {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def usage_bytes(self) -> int:
        if not self.root.exists():
            return 0
        return sum(p.stat().st_size for p in self.root.glob("*.json"))


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)


class LocalRecordStore:
    """RecordStore over a JsonBlobStore."""

    backend = "local"

    def __init__(self, root: Path, quota_bytes: Optional[int] = None):
        self.blobs = JsonBlobStore(root, quota_bytes=quota_bytes)
        self._lock = threading.Lock()

    def usage_bytes(self) -> int:
        return self.blobs.usage_bytes()

    def _load(self, key: str, model: type[M]) -> list[M]:
        return [model.model_validate(row) for row in self.blobs.get(key, [])]

    def _upsert(self, key: str, record: BaseModel, match: Callable[[dict], bool]) -> None:
        new_row = _dump(record)
        with self._lock:
            rows = self.blobs.get(key, [])
            for i, row in enumerate(rows):
                if match(row):
                    rows[i] = new_row
                    break
            else:
                rows.append(new_row)
            self.blobs.set(key, rows)

    def _remove(self, key: str, match: Callable[[dict], bool]) -> None:
        with self._lock:
            rows = self.blobs.get(key, [])
            kept = [row for row in rows if not match(row)]
            if len(kept) != len(rows):
                self.blobs.set(key, kept)

    def _replace_standard(self, doc: StandardDocument) -> None:
        with self._lock:
            rows = [
                row for row in self.blobs.get(STANDARDS_KEY, [])
                if row.get("type") != doc.type.value
            ]
            rows.append(_dump(doc))
            self.blobs.set(STANDARDS_KEY, rows)

    def _sorted_cases(self) -> list[InspectionCase]:
        cases = self._load(CASES_KEY, InspectionCase)
        return sorted(cases, key=lambda c: c.timestamp, reverse=True)

    def _set_brand(self, brand: str) -> None:
        with self._lock:
            self.blobs.set(BRAND_KEY, brand)

    # Cases

    async def get_all_cases(self) -> list[InspectionCase]:
        return await asyncio.to_thread(self._sorted_cases)

    async def save_case(self, case: InspectionCase) -> None:
        await asyncio.to_thread(
            self._upsert, CASES_KEY, case, lambda row: row.get("id") == case.id
        )

    async def delete_case(self, case_id: str) -> None:
        await asyncio.to_thread(self._remove, CASES_KEY, lambda row: row.get("id") == case_id)

    # Standards

    async def get_standards(self) -> list[StandardDocument]:
        return await asyncio.to_thread(self._load, STANDARDS_KEY, StandardDocument)

    async def save_standard(self, doc: StandardDocument) -> None:
        await asyncio.to_thread(self._replace_standard, doc)

    async def delete_standard(self, standard_type: str) -> None:
        await asyncio.to_thread(
            self._remove, STANDARDS_KEY, lambda row: row.get("type") == standard_type
        )

    # Personnel

    async def get_appraisers(self) -> list[Appraiser]:
        appraisers = await asyncio.to_thread(self._load, APPRAISERS_KEY, Appraiser)
        return sorted(appraisers, key=lambda a: a.name)

    async def save_appraiser(self, appraiser: Appraiser) -> None:
        await asyncio.to_thread(
            self._upsert, APPRAISERS_KEY, appraiser, lambda row: row.get("id") == appraiser.id
        )

    async def delete_appraiser(self, appraiser_id: str) -> None:
        await asyncio.to_thread(
            self._remove, APPRAISERS_KEY, lambda row: row.get("id") == appraiser_id
        )

    async def get_technicians(self) -> list[Technician]:
        technicians = await asyncio.to_thread(self._load, TECHNICIANS_KEY, Technician)
        return sorted(technicians, key=lambda t: t.name)

    async def save_technician(self, technician: Technician) -> None:
        await asyncio.to_thread(
            self._upsert, TECHNICIANS_KEY, technician, lambda row: row.get("id") == technician.id
        )

    async def delete_technician(self, technician_id: str) -> None:
        await asyncio.to_thread(
            self._remove, TECHNICIANS_KEY, lambda row: row.get("id") == technician_id
        )

    # Settings

    async def get_brand(self) -> Optional[str]:
        return await asyncio.to_thread(self.blobs.get, BRAND_KEY)

    async def save_brand(self, brand: str) -> None:
        await asyncio.to_thread(self._set_brand, brand)
