"""Application constants."""

from bodytrack.core.enums import MeasurementField

# Circumference fields, in display order
MEASUREMENT_FIELDS: tuple[str, ...] = tuple(f.value for f in MeasurementField)

# Non-numeric draft fields
DATE_FIELD = "measurement_date"
NOTES_FIELD = "notes"

DRAFT_FIELDS: tuple[str, ...] = (DATE_FIELD, *MEASUREMENT_FIELDS, NOTES_FIELD)

# Python field name -> name on the wire (remote API payloads)
WIRE_NAMES: dict[str, str] = {DATE_FIELD: "measurementDate"}

# Labels used in validation messages; field errors are looked up by label
FIELD_LABELS: dict[str, str] = {
    "chest": "Chest",
    "waist": "Waist",
    "hips": "Hips",
    "biceps": "Biceps",
    "forearms": "Forearms",
    "thighs": "Thighs",
    "calves": "Calves",
    "neck": "Neck",
    DATE_FIELD: "Measurement date",
    NOTES_FIELD: "Notes",
}

MEASUREMENT_PRECISION = 1  # decimal places

# Validation messages
MSG_MEASUREMENT_REQUIRED = "At least one measurement is required"
MSG_NO_CHANGES = "No changes detected"
