from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..cash.model import ShiftCashSummary
from ..core.enums import ShiftType
from .model import CascadeResult, ExpenseAggregate, ReceiptAggregate, Shift


class ShiftClosingUnit(Protocol):
    """Statements of the close-shift transaction. Everything commits together or not at all."""

    def lock_shift(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def aggregate_receipts(self, shift_id: int) -> ReceiptAggregate:
        raise NotImplementedError

    def aggregate_expenses(self, shift_id: int) -> ExpenseAggregate:
        raise NotImplementedError

    def mark_closed(self, shift_id: int, *, closed_by: str, closed_at: datetime) -> bool:
        """Close the shift only if it is still open; False when nothing was updated."""

        raise NotImplementedError

    def cascade_closed(self, shift_id: int) -> CascadeResult:
        raise NotImplementedError

    def insert_cash_summary(self, summary: ShiftCashSummary) -> int:
        """Raise ConflictError(already_closed) if the shift already has a summary."""

        raise NotImplementedError


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def get_open(self) -> Optional[Shift]:
        raise NotImplementedError

    def get_for_date_and_type(self, *, shift_date: date, shift_type: ShiftType) -> Optional[Shift]:
        raise NotImplementedError

    def count_for_date(self, shift_date: date) -> int:
        raise NotImplementedError

    def list(self, *, shift_date: Optional[date] = None, is_closed: Optional[bool] = None) -> Sequence[Shift]:
        raise NotImplementedError

    def create(self, *, shift_date: date, shift_type: ShiftType, opened_by: str, opened_at: datetime) -> int:
        """Insert an open shift.

        Storage constraints reject a second open shift and a repeated
        (date, type); both surface as ConflictError.
        """

        raise NotImplementedError

    def closing(self) -> ContextManager[ShiftClosingUnit]:
        raise NotImplementedError
