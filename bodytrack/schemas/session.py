"""Edit session Pydantic schemas."""

from __future__ import annotations

from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from bodytrack.core.enums import SessionMode


class SessionOpen(BaseModel):
    measurement_id: Optional[Union[int, str]] = Field(
        None, description="Stored measurement to edit. Omit to log a new one."
    )


class FieldUpdate(BaseModel):
    field: str = Field(..., description="chest, waist, ..., measurement_date or notes")
    value: Optional[str] = Field(None, description="Raw form input; empty clears the field")


class ValidationResultRead(BaseModel):
    is_valid: bool
    errors: list[str] = []


class SessionRead(BaseModel):
    id: UUID
    mode: SessionMode
    measurement_id: Optional[Union[int, str]] = None
    draft: dict[str, Any]
    modified_fields: list[str]
    touched_fields: list[str]
    field_errors: dict[str, str] = {}
