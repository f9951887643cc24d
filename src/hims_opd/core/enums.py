from __future__ import annotations

from enum import Enum


class ShiftType(str, Enum):
    """Operating periods of the OPD; each may be opened once per calendar day."""

    MORNING = "Morning"
    EVENING = "Evening"
    NIGHT = "Night"


class ItemCategory(str, Enum):
    """Kind of line on an OPD receipt. Only consultations carry a doctor share."""

    SERVICE = "service"
    CONSULTATION = "consultation"


class ConflictCode(str, Enum):
    OPEN_SHIFT_EXISTS = "open_shift_exists"
    DUPLICATE_SHIFT = "duplicate_shift"
    SHIFT_QUOTA_EXCEEDED = "shift_quota_exceeded"
    ALREADY_CLOSED = "already_closed"
    NO_OPEN_SHIFT = "no_open_shift"
    SHIFT_CLOSED = "shift_closed"
    DUPLICATE_ENTRY = "duplicate_entry"
