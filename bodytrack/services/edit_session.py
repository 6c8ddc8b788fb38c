"""Measurement edit session: draft vs baseline, modification tracking, validation.

One session per editing context (a "log measurement" form or an "edit
measurement" dialog). Create mode starts from an empty draft; update mode starts
from a stored record and only ever submits the fields the user changed.
No I/O happens here; the caller hands `to_request_payload()` to the
measurements client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from bodytrack.core.constants import (
    DATE_FIELD,
    DRAFT_FIELDS,
    FIELD_LABELS,
    MEASUREMENT_FIELDS,
    MSG_MEASUREMENT_REQUIRED,
    MSG_NO_CHANGES,
    NOTES_FIELD,
    WIRE_NAMES,
)
from bodytrack.core.enums import SessionMode
from bodytrack.schemas.measurement import MeasurementRecord
from bodytrack.services.measurement_utils import (
    get_today_date,
    parse_calendar_date,
    parse_measurement_value,
)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _baseline_values(baseline: Optional[MeasurementRecord]) -> dict[str, Any]:
    """Draft-shaped view of a stored record: only present fields, numbers parsed."""
    if baseline is None:
        return {}
    values: dict[str, Any] = {}
    for name in MEASUREMENT_FIELDS:
        value = parse_measurement_value(getattr(baseline, name))
        if value is not None:
            values[name] = value
    if baseline.measurement_date:
        values[DATE_FIELD] = baseline.measurement_date
    if baseline.notes:
        values[NOTES_FIELD] = baseline.notes
    return values


class MeasurementEditSession:
    """Tracks a draft set of body measurements against an optional baseline."""

    def __init__(
        self,
        baseline: Optional[MeasurementRecord] = None,
        *,
        today: Callable[[], str] = get_today_date,
    ) -> None:
        self._today = today
        self._baseline: Optional[MeasurementRecord] = None
        self._original: dict[str, Any] = {}
        self._draft: dict[str, Any] = {}
        self._modified: set[str] = set()
        self._touched: set[str] = set()
        self._errors: list[str] = []
        self.initialize(baseline)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> SessionMode:
        return SessionMode.CREATE if self._baseline is None else SessionMode.UPDATE

    @property
    def baseline(self) -> Optional[MeasurementRecord]:
        return self._baseline

    @property
    def draft(self) -> dict[str, Any]:
        """Copy of the current draft; absent fields are not keys."""
        return dict(self._draft)

    @property
    def touched(self) -> frozenset[str]:
        return frozenset(self._touched)

    @property
    def errors(self) -> list[str]:
        """Errors from the last validate() call."""
        return list(self._errors)

    @property
    def has_measurements(self) -> bool:
        return any(name in self._draft for name in MEASUREMENT_FIELDS)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def initialize(self, baseline: Optional[MeasurementRecord] = None) -> dict[str, Any]:
        """Start over from `baseline` (update mode) or from an empty draft (create mode)."""
        self._baseline = baseline
        self._original = _baseline_values(baseline)
        if baseline is None:
            self._draft = {DATE_FIELD: self._today()}
        else:
            self._draft = dict(self._original)
        self._modified = set()
        self._touched = set()
        self._errors = []
        return self.draft

    def reset(self) -> None:
        self.initialize(self._baseline)

    def set_field(self, field_name: str, raw_value: Optional[str]) -> None:
        """Apply one form input.

        Measurement fields are parsed as decimals; empty or unparsable input
        makes the field absent. Notes: empty string is absent. The measurement
        date is stored verbatim, empty string included.
        """
        if field_name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown measurement field: {field_name!r}")

        value: Any
        if field_name in MEASUREMENT_FIELDS:
            value = parse_measurement_value(raw_value)
        elif field_name == NOTES_FIELD:
            value = raw_value or None
        else:
            value = raw_value

        if value is None:
            self._draft.pop(field_name, None)
        else:
            self._draft[field_name] = value

        # Two absent values compare equal (None == None)
        if value != self._original.get(field_name):
            self._modified.add(field_name)
        else:
            self._modified.discard(field_name)

        self._touched.add(field_name)

    def diff(self) -> frozenset[str]:
        return frozenset(self._modified)

    def is_modified(self, field_name: str) -> bool:
        return field_name in self._modified

    def validate(self) -> ValidationResult:
        """Check the draft before submission. Never raises; returns every error found."""
        errors: list[str] = []
        if self.mode is SessionMode.UPDATE and not self._modified:
            errors.append(MSG_NO_CHANGES)
        elif self.mode is SessionMode.CREATE and not self.has_measurements:
            errors.append(MSG_MEASUREMENT_REQUIRED)
        else:
            for name in MEASUREMENT_FIELDS:
                value = self._draft.get(name)
                if value is not None and value < 0:
                    errors.append(f"{FIELD_LABELS[name]} must be a non-negative number")

            # Required in both modes; an update must not clear it
            measurement_date = self._draft.get(DATE_FIELD)
            if measurement_date is None:
                errors.append(f"{FIELD_LABELS[DATE_FIELD]} is required")
            elif parse_calendar_date(measurement_date) is None:
                errors.append(f"{FIELD_LABELS[DATE_FIELD]} must be a valid date (YYYY-MM-DD)")

        self._errors = errors
        return ValidationResult(is_valid=not errors, errors=list(errors))

    def field_error(self, field_name: str) -> Optional[str]:
        """Error to show next to a form field: only for touched fields."""
        if field_name not in self._touched:
            return None
        label = FIELD_LABELS.get(field_name, field_name).lower()
        for error in self._errors:
            if label in error.lower():
                return error
        return None

    def to_request_payload(self) -> dict[str, Any]:
        """Body for the create (POST) or update (PUT) request, keyed by wire names.

        Update mode sends only modified fields; a baseline value the user
        cleared is sent as null.
        """
        if self.mode is SessionMode.CREATE:
            names = [name for name in DRAFT_FIELDS if name in self._draft]
        else:
            names = [name for name in DRAFT_FIELDS if name in self._modified]
        return {WIRE_NAMES.get(name, name): self._draft.get(name) for name in names}
