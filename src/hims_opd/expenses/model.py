from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import ShiftType


@dataclass(frozen=True)
class Expense:
    expense_date: date
    expense_time: time
    expense_shift: ShiftType
    expense_name: str
    expense_amount: Decimal
    expense_by: str
    shift_id: int
    shift_date: date
    expense_description: Optional[str] = None
    expense_id: Optional[int] = None
    expense_code: Optional[str] = None


@dataclass(frozen=True)
class NewExpense:
    expense_name: str
    expense_amount: Decimal
    expense_by: str
    expense_description: Optional[str] = None
    shift_id: Optional[int] = None


@dataclass(frozen=True)
class ExpenseUpdate:
    expense_name: Optional[str] = None
    expense_description: Optional[str] = None
    expense_amount: Optional[Decimal] = None
    expense_by: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


@dataclass(frozen=True)
class ExpenseShiftTotal:
    expense_shift: ShiftType
    count: int = 0
    total_amount: Decimal = ZERO
