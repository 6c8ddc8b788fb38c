"""Shared test fixtures for bodytrack tests."""

from __future__ import annotations

from typing import Any

import pytest

from bodytrack.core.config import get_settings
from bodytrack.schemas.measurement import MeasurementPage, MeasurementRecord, Pagination
from bodytrack.services.measurements_client import (
    MeasurementNotFoundError,
    MeasurementsAPIError,
)
from bodytrack.services.session_store import get_session_store

TODAY = "2024-03-10"


# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MEASUREMENTS_API_URL", "http://measurements.test/api")
    monkeypatch.setenv("MEASUREMENTS_API_TOKEN", "")
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    get_session_store.cache_clear()
    yield
    get_settings.cache_clear()
    get_session_store.cache_clear()


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def make_record(**overrides: Any) -> MeasurementRecord:
    """A stored record as the remote API returns it (decimal strings)."""
    data: dict[str, Any] = {
        "id": 7,
        "measurementDate": "2024-03-01",
        "chest": "95.50",
        "waist": "78.00",
        "hips": None,
        "biceps": None,
        "forearms": None,
        "thighs": None,
        "calves": None,
        "neck": None,
        "notes": None,
        "created_at": "2024-03-01T08:00:00Z",
        "updated_at": "2024-03-01T08:00:00Z",
    }
    data.update(overrides)
    return MeasurementRecord.model_validate(data)


@pytest.fixture
def baseline() -> MeasurementRecord:
    return make_record()


@pytest.fixture
def today():
    return lambda: TODAY


# ---------------------------------------------------------------------------
# Remote API stand-in
# ---------------------------------------------------------------------------

class FakeMeasurementsClient:
    """In-memory stand-in for MeasurementsClient used through dependency overrides."""

    def __init__(self, records: list[MeasurementRecord] | None = None) -> None:
        self.records: dict[Any, MeasurementRecord] = {r.id: r for r in records or []}
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: MeasurementsAPIError | None = None
        self.healthy = True
        self._next_id = 100

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def check_health(self, root_url: str | None = None) -> bool:
        return self.healthy

    def get_history(self, *, page=1, limit=10, start_date=None, end_date=None) -> MeasurementPage:
        self.calls.append(("history", {"page": page, "limit": limit,
                                       "start_date": start_date, "end_date": end_date}))
        self._check()
        items = sorted(self.records.values(), key=lambda r: r.measurement_date, reverse=True)
        return MeasurementPage(
            items=items,
            pagination=Pagination(current_page=page, total_pages=1,
                                  total_items=len(items), items_per_page=limit),
        )

    def get_measurement(self, measurement_id) -> MeasurementRecord:
        self.calls.append(("get", measurement_id))
        self._check()
        try:
            return self.records[measurement_id]
        except KeyError:
            raise MeasurementNotFoundError("Measurement not found", 404)

    def create_measurement(self, payload: dict[str, Any]) -> MeasurementRecord:
        self.calls.append(("create", payload))
        self._check()
        record = MeasurementRecord.model_validate({"id": self._next_id, **payload})
        self._next_id += 1
        self.records[record.id] = record
        return record

    def update_measurement(self, measurement_id, payload: dict[str, Any]) -> MeasurementRecord:
        self.calls.append(("update", (measurement_id, payload)))
        self._check()
        if measurement_id not in self.records:
            raise MeasurementNotFoundError("Measurement not found", 404)
        current = self.records[measurement_id].model_dump(by_alias=True)
        current.update(payload)
        record = MeasurementRecord.model_validate(current)
        self.records[measurement_id] = record
        return record

    def delete_measurement(self, measurement_id) -> str:
        self.calls.append(("delete", measurement_id))
        self._check()
        if self.records.pop(measurement_id, None) is None:
            raise MeasurementNotFoundError("Measurement not found", 404)
        return "Body measurements deleted successfully"


@pytest.fixture
def fake_client(baseline) -> FakeMeasurementsClient:
    older = make_record(id=6, measurementDate="2024-02-20", chest="96.00", waist="79.50")
    return FakeMeasurementsClient([baseline, older])


@pytest.fixture
def api_client(fake_client):
    from fastapi.testclient import TestClient

    from bodytrack.api.deps import get_measurements_client
    from bodytrack.main import create_application

    app = create_application()
    app.dependency_overrides[get_measurements_client] = lambda: fake_client
    with TestClient(app) as client:
        yield client
