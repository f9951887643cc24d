from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftType
from .model import Expense, ExpenseShiftTotal, ExpenseUpdate


class ExpenseRepository(Protocol):
    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def list(
        self,
        *,
        expense_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_type: Optional[ShiftType] = None,
    ) -> Sequence[Expense]:
        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[Expense]:
        raise NotImplementedError

    def create(self, expense: Expense) -> Expense:
        raise NotImplementedError

    def update(self, expense_id: int, changes: ExpenseUpdate) -> bool:
        raise NotImplementedError

    def delete(self, expense_id: int) -> bool:
        raise NotImplementedError

    def totals_by_shift(self, expense_date: date) -> Sequence[ExpenseShiftTotal]:
        raise NotImplementedError
