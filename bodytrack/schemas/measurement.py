"""Body measurement Pydantic schemas: records, write payloads, history pages."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bodytrack.core.constants import MEASUREMENT_FIELDS


def _blank_to_none(value: Any) -> Any:
    """The remote API sends circumferences as decimal strings ("95.50") or null."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


# ── MeasurementRecord ────────────────────────────────────────────────────

class MeasurementRecord(BaseModel):
    """A stored measurement entry as returned by the remote API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Union[int, str]
    measurement_date: str = Field(..., alias="measurementDate")
    chest: Optional[float] = None
    waist: Optional[float] = None
    hips: Optional[float] = None
    biceps: Optional[float] = None
    forearms: Optional[float] = None
    thighs: Optional[float] = None
    calves: Optional[float] = None
    neck: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(*MEASUREMENT_FIELDS, mode="before")
    @classmethod
    def _parse_decimal(cls, value: Any) -> Any:
        return _blank_to_none(value)


# ── Write payloads ───────────────────────────────────────────────────────

class MeasurementCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    measurement_date: str = Field(..., alias="measurementDate", min_length=1)
    chest: Optional[float] = Field(None, ge=0, description="Chest circumference in cm")
    waist: Optional[float] = Field(None, ge=0)
    hips: Optional[float] = Field(None, ge=0)
    biceps: Optional[float] = Field(None, ge=0)
    forearms: Optional[float] = Field(None, ge=0)
    thighs: Optional[float] = Field(None, ge=0)
    calves: Optional[float] = Field(None, ge=0)
    neck: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class MeasurementUpdate(BaseModel):
    """Partial update. An explicit null clears the stored value."""

    model_config = ConfigDict(populate_by_name=True)

    measurement_date: Optional[str] = Field(None, alias="measurementDate", min_length=1)
    chest: Optional[float] = Field(None, ge=0)
    waist: Optional[float] = Field(None, ge=0)
    hips: Optional[float] = Field(None, ge=0)
    biceps: Optional[float] = Field(None, ge=0)
    forearms: Optional[float] = Field(None, ge=0)
    thighs: Optional[float] = Field(None, ge=0)
    calves: Optional[float] = Field(None, ge=0)
    neck: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("measurement_date", mode="before")
    @classmethod
    def _date_not_cleared(cls, value: Any) -> Any:
        # Omit the date to keep it; it can be changed but never nulled
        if value is None:
            raise ValueError("measurementDate cannot be cleared")
        return value


# ── History ──────────────────────────────────────────────────────────────

class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_page: int = Field(1, alias="currentPage")
    total_pages: int = Field(0, alias="totalPages")
    total_items: int = Field(0, alias="totalItems")
    items_per_page: int = Field(10, alias="itemsPerPage")


class MeasurementPage(BaseModel):
    items: list[MeasurementRecord] = []
    pagination: Pagination = Field(default_factory=Pagination)


class MeasurementHistoryEntry(MeasurementRecord):
    # Per-field difference against the next older entry; empty for the oldest
    changes: dict[str, Optional[float]] = {}
    is_recent: bool = False


class MeasurementHistoryRead(BaseModel):
    items: list[MeasurementHistoryEntry] = []
    pagination: Pagination
