"""Measurement pass-through endpoints: history with changes, fetch, delete."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from bodytrack.api.deps import api_error_to_http, get_measurements_client
from bodytrack.core.config import get_settings
from bodytrack.schemas.measurement import (
    MeasurementHistoryEntry,
    MeasurementHistoryRead,
    MeasurementRecord,
)
from bodytrack.services.measurement_utils import (
    get_date_range,
    is_recent_measurement,
    measurement_changes,
)
from bodytrack.services.measurements_client import MeasurementsAPIError, MeasurementsClient

router = APIRouter()


@router.get("/history", response_model=MeasurementHistoryRead)
def measurement_history(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    days: Optional[int] = Query(None, ge=0, description="Last N days (7, 30, 90). Overrides start/end."),
    client: MeasurementsClient = Depends(get_measurements_client),
):
    """History page, newest first. Each entry carries its change from the next older entry."""
    settings = get_settings()
    if days is not None:
        start_date, end_date = get_date_range(days)
    try:
        result = client.get_history(
            page=page,
            limit=limit or settings.history_page_limit,
            start_date=start_date,
            end_date=end_date,
        )
    except MeasurementsAPIError as e:
        raise api_error_to_http(e)

    items = []
    for index, record in enumerate(result.items):
        changes = {}
        # Oldest entry on the page has nothing to compare with
        if index + 1 < len(result.items):
            changes = measurement_changes(record, result.items[index + 1])
        items.append(MeasurementHistoryEntry(
            **record.model_dump(),
            changes=changes,
            is_recent=is_recent_measurement(record.measurement_date, days=settings.recent_days),
        ))
    return MeasurementHistoryRead(items=items, pagination=result.pagination)


@router.get("/{measurement_id}", response_model=MeasurementRecord)
def get_measurement(
    measurement_id: Union[int, str],
    client: MeasurementsClient = Depends(get_measurements_client),
):
    try:
        return client.get_measurement(measurement_id)
    except MeasurementsAPIError as e:
        raise api_error_to_http(e)


@router.delete("/{measurement_id}")
def delete_measurement(
    measurement_id: Union[int, str],
    client: MeasurementsClient = Depends(get_measurements_client),
):
    """Direct delete; no session involved."""
    try:
        message = client.delete_measurement(measurement_id)
    except MeasurementsAPIError as e:
        raise api_error_to_http(e)
    return {"status": "deleted", "message": message}
