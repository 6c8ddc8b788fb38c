"""Shared enums for sessions and API."""

from enum import Enum


class SessionMode(str, Enum):
    """Whether an edit session logs a new measurement or edits a stored one."""

    CREATE = "create"  # No baseline; draft starts empty
    UPDATE = "update"  # Draft starts from a stored record


class MeasurementField(str, Enum):
    """Body circumferences tracked per entry (cm)."""

    CHEST = "chest"
    WAIST = "waist"
    HIPS = "hips"
    BICEPS = "biceps"
    FOREARMS = "forearms"
    THIGHS = "thighs"
    CALVES = "calves"
    NECK = "neck"
