from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import money_sum, to_money
from ..common.validators import optional_str, require_non_empty
from ..core.enums import ConflictCode, ShiftType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..shifts.service import ShiftService
from .model import Expense, ExpenseShiftTotal, ExpenseUpdate, NewExpense
from .repository import ExpenseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpenseDaySummary:
    date: date
    shifts: Sequence[ExpenseShiftTotal]
    count: int
    total_amount: Decimal


def _require_positive(amount: Decimal) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("expense_amount must be greater than 0")
    return amount


class ExpenseService:
    def __init__(self, expenses: ExpenseRepository, shift_service: ShiftService, *, clock: Callable = now_local):
        self._expenses = expenses
        self._shift_service = shift_service
        self._clock = clock

    def create(self, data: NewExpense) -> Expense:
        name = require_non_empty(data.expense_name, "expense_name")
        expense_by = require_non_empty(data.expense_by, "expense_by")
        amount = _require_positive(data.expense_amount)

        shift = self._shift_service.require_open_shift(data.shift_id)
        now = self._clock()
        expense = self._expenses.create(
            Expense(
                expense_date=now.date(),
                expense_time=now.time(),
                expense_shift=shift.shift_type,
                expense_name=name,
                expense_description=optional_str(data.expense_description),
                expense_amount=amount,
                expense_by=expense_by,
                shift_id=shift.shift_id,
                shift_date=shift.shift_date,
            )
        )
        logger.info("Expense %s of %s recorded in shift %s", expense.expense_code, amount, shift.shift_id)
        return expense

    def get(self, expense_id: int) -> Expense:
        expense = self._expenses.get_by_id(int(expense_id))
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    def list(
        self,
        *,
        expense_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_type: Optional[ShiftType] = None,
    ) -> Sequence[Expense]:
        return self._expenses.list(
            expense_date=expense_date,
            shift_id=shift_id,
            shift_date=shift_date,
            shift_type=shift_type,
        )

    def list_for_shift(self, shift_id: int) -> Sequence[Expense]:
        return self._expenses.list_for_shift(int(shift_id))

    def _require_editable(self, expense: Expense) -> None:
        if self._shift_service.get_shift(expense.shift_id).is_closed:
            raise ConflictError(
                "Expenses of a closed shift cannot be changed",
                code=ConflictCode.SHIFT_CLOSED.value,
            )

    def update(self, expense_id: int, changes: ExpenseUpdate) -> Expense:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        if changes.expense_amount is not None:
            _require_positive(changes.expense_amount)

        self._require_editable(self.get(expense_id))
        self._expenses.update(int(expense_id), changes)
        return self.get(expense_id)

    def delete(self, expense_id: int) -> None:
        expense = self.get(expense_id)
        self._require_editable(expense)
        if not self._expenses.delete(expense.expense_id):
            raise NotFoundError("Expense not found")
        logger.info("Expense %s deleted", expense.expense_code)

    def summary_for_date(self, expense_date: date) -> ExpenseDaySummary:
        totals = self._expenses.totals_by_shift(expense_date)
        return ExpenseDaySummary(
            date=expense_date,
            shifts=totals,
            count=sum(t.count for t in totals),
            total_amount=money_sum(t.total_amount for t in totals),
        )
