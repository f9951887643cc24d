from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from ..receipts.model import OpdReceipt
from .model import ExpenseShiftTypeTotals, OpdShiftTypeTotals, PeriodExpense, PeriodTotals


class ReportRepository(Protocol):
    """Read-only GROUP BY queries over the ledger tables."""

    def opd_by_shift_type(self, shift_date: date) -> Sequence[OpdShiftTypeTotals]:
        raise NotImplementedError

    def expenses_by_shift_type(self, shift_date: date) -> Sequence[ExpenseShiftTypeTotals]:
        raise NotImplementedError

    def opd_by_day(self, *, start: date, end: date) -> Sequence[PeriodTotals]:
        raise NotImplementedError

    def expenses_by_day(self, *, start: date, end: date) -> Sequence[PeriodExpense]:
        raise NotImplementedError

    def opd_by_month(self, year: int) -> Sequence[PeriodTotals]:
        raise NotImplementedError

    def expenses_by_month(self, year: int) -> Sequence[PeriodExpense]:
        raise NotImplementedError

    def receipts_between(self, *, start: date, end: date) -> Sequence[OpdReceipt]:
        """Non-cancelled receipts with receipt_date in [start, end]."""

        raise NotImplementedError
