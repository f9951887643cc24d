"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import ShiftType

MAX_SHIFTS_PER_DAY = 3
SHIFT_ORDER = (ShiftType.MORNING, ShiftType.EVENING, ShiftType.NIGHT)

RECEIPT_PREFIX = "OPD"
RECEIPT_WIDTH = 5
EXPENSE_PREFIX = "EXP"
EXPENSE_WIDTH = 4
PAYMENT_PREFIX = "PAY"
PAYMENT_WIDTH = 4
MR_WIDTH = 5

SERVICE_HEAD_OPD = "OPD"
PATIENT_SEARCH_LIMIT = 50
PATIENT_HISTORY_LIMIT = 5
DEFAULT_GUARDIAN_RELATION = "Parent"
