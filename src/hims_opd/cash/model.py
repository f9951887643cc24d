from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO, to_money
from ..core.constants import SERVICE_HEAD_OPD
from ..core.enums import ShiftType
from ..shifts.model import ExpenseAggregate, ReceiptAggregate, Shift


@dataclass(frozen=True)
class ShiftCashSummary:
    """Immutable closing reconciliation of one shift (one row per shift)."""

    shift_id: int
    shift_date: date
    shift_type: ShiftType
    shift_time: time
    submitted_by: str
    submitted_at: datetime
    receipt_from: Optional[str] = None
    receipt_to: Optional[str] = None
    expense_from: Optional[str] = None
    expense_to: Optional[str] = None
    service_head: str = SERVICE_HEAD_OPD
    total_quantity: int = 0
    total_amount: Decimal = ZERO
    total_discount_quantity: int = 0
    total_discount_amount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_collected: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_collection: Decimal = ZERO
    cash_id: Optional[int] = None
    corrected_by: Optional[str] = None
    corrected_at: Optional[datetime] = None
    correction_note: Optional[str] = None


@dataclass(frozen=True)
class CashSummaryCorrection:
    """Fields an operator may correct after closing. Aggregated ranges and shift identity stay fixed."""

    total_quantity: Optional[int] = None
    total_amount: Optional[Decimal] = None
    total_discount_quantity: Optional[int] = None
    total_discount_amount: Optional[Decimal] = None
    total_paid: Optional[Decimal] = None
    total_collected: Optional[Decimal] = None
    total_balance: Optional[Decimal] = None
    total_expenses: Optional[Decimal] = None
    net_collection: Optional[Decimal] = None
    submitted_by: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


def build_cash_summary(
    shift: Shift,
    receipts: ReceiptAggregate,
    expenses: ExpenseAggregate,
    *,
    submitted_by: str,
    submitted_at: datetime,
) -> ShiftCashSummary:
    total_paid = to_money(receipts.total_paid)
    total_expenses = to_money(expenses.total_expenses)
    return ShiftCashSummary(
        shift_id=shift.shift_id,
        shift_date=shift.shift_date,
        shift_type=shift.shift_type,
        shift_time=submitted_at.time(),
        submitted_by=submitted_by,
        submitted_at=submitted_at,
        receipt_from=receipts.receipt_from,
        receipt_to=receipts.receipt_to,
        expense_from=expenses.expense_from,
        expense_to=expenses.expense_to,
        total_quantity=int(receipts.count),
        total_amount=to_money(receipts.total_amount),
        total_discount_quantity=int(receipts.discount_qty),
        total_discount_amount=to_money(receipts.total_discount),
        total_paid=total_paid,
        total_collected=total_paid,
        total_balance=to_money(receipts.total_balance),
        total_expenses=total_expenses,
        net_collection=to_money(total_paid - total_expenses),
    )
