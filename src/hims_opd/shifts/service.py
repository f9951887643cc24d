from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Optional, Sequence

from ..cash.model import ShiftCashSummary, build_cash_summary
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import MAX_SHIFTS_PER_DAY
from ..core.enums import ConflictCode, ShiftType
from ..core.exceptions import ConflictError, NotFoundError
from .model import CascadeResult, Shift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftClosing:
    shift: Shift
    summary: ShiftCashSummary
    cascade: CascadeResult


class ShiftService:
    """Shift lifecycle: open, close with cash reconciliation, current shift."""

    def __init__(self, shifts: ShiftRepository, *, clock: Callable = now_local):
        self._shifts = shifts
        self._clock = clock

    def open_shift(self, *, shift_date: date, shift_type: ShiftType, opened_by: str) -> Shift:
        opened_by = require_non_empty(opened_by, "opened_by")

        current = self._shifts.get_open()
        if current is not None:
            raise ConflictError(
                "Cannot open new shift. Please close the current shift first.",
                code=ConflictCode.OPEN_SHIFT_EXISTS.value,
                record=current,
            )

        if self._shifts.get_for_date_and_type(shift_date=shift_date, shift_type=shift_type) is not None:
            raise ConflictError(
                f"{shift_type.value} shift already exists for {shift_date.isoformat()}",
                code=ConflictCode.DUPLICATE_SHIFT.value,
            )

        if self._shifts.count_for_date(shift_date) >= MAX_SHIFTS_PER_DAY:
            raise ConflictError(
                f"Maximum {MAX_SHIFTS_PER_DAY} shifts allowed per day",
                code=ConflictCode.SHIFT_QUOTA_EXCEEDED.value,
            )

        # The checks above are advisory; the storage constraints decide under concurrency.
        try:
            shift_id = self._shifts.create(
                shift_date=shift_date,
                shift_type=shift_type,
                opened_by=opened_by,
                opened_at=self._clock(),
            )
        except ConflictError as e:
            if e.code == ConflictCode.OPEN_SHIFT_EXISTS.value and e.record is None:
                e.record = self._shifts.get_open()
            raise

        shift = self._shifts.get_by_id(shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        logger.info("Opened %s shift %s for %s by %s", shift_type.value, shift_id, shift_date, opened_by)
        return shift

    def close_shift(self, *, shift_id: int, closed_by: str) -> ShiftClosing:
        closed_by = require_non_empty(closed_by, "closed_by")

        with self._shifts.closing() as tx:
            shift = tx.lock_shift(int(shift_id))
            if shift is None:
                raise NotFoundError("Shift not found")

            receipts = tx.aggregate_receipts(shift.shift_id)
            expenses = tx.aggregate_expenses(shift.shift_id)

            closed_at = self._clock()
            if not tx.mark_closed(shift.shift_id, closed_by=closed_by, closed_at=closed_at):
                raise ConflictError("Shift already closed", code=ConflictCode.ALREADY_CLOSED.value)

            cascade = tx.cascade_closed(shift.shift_id)

            summary = build_cash_summary(
                shift,
                receipts,
                expenses,
                submitted_by=closed_by,
                submitted_at=closed_at,
            )
            cash_id = tx.insert_cash_summary(summary)

        closed = Shift(
            shift_id=shift.shift_id,
            shift_date=shift.shift_date,
            shift_type=shift.shift_type,
            opened_by=shift.opened_by,
            opened_at=shift.opened_at,
            is_closed=True,
            closed_by=closed_by,
            closed_at=closed_at,
        )
        summary = replace(summary, cash_id=cash_id)
        logger.info(
            "Closed shift %s by %s: %s receipts, paid=%s, expenses=%s, net=%s",
            shift.shift_id,
            closed_by,
            summary.total_quantity,
            summary.total_paid,
            summary.total_expenses,
            summary.net_collection,
        )
        return ShiftClosing(shift=closed, summary=summary, cascade=cascade)

    def get_current_shift(self) -> Optional[Shift]:
        return self._shifts.get_open()

    def get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    def list_shifts(self, *, shift_date: Optional[date] = None, is_closed: Optional[bool] = None) -> Sequence[Shift]:
        return self._shifts.list(shift_date=shift_date, is_closed=is_closed)

    def list_for_date(self, shift_date: date) -> Sequence[Shift]:
        return self._shifts.list(shift_date=shift_date)

    def require_open_shift(self, shift_id: Optional[int] = None) -> Shift:
        """Return the open shift ledger writes are tagged with."""

        current = self._shifts.get_open()
        if current is None:
            raise ConflictError(
                "No open shift. Please open a shift first.",
                code=ConflictCode.NO_OPEN_SHIFT.value,
            )
        if shift_id is not None and int(shift_id) != current.shift_id:
            raise ConflictError(
                f"Shift {shift_id} is not open",
                code=ConflictCode.SHIFT_CLOSED.value,
                record=current,
            )
        return current
