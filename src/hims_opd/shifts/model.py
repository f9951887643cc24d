from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import ShiftType


@dataclass(frozen=True)
class Shift:
    """A bounded operating period; at most one is open system-wide."""

    shift_id: int
    shift_date: date
    shift_type: ShiftType
    opened_by: str
    opened_at: datetime
    is_closed: bool = False
    closed_by: Optional[str] = None
    closed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReceiptAggregate:
    """Non-cancelled OPD receipts of one shift."""

    count: int = 0
    receipt_from: Optional[str] = None
    receipt_to: Optional[str] = None
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    discount_qty: int = 0


@dataclass(frozen=True)
class ExpenseAggregate:
    count: int = 0
    expense_from: Optional[str] = None
    expense_to: Optional[str] = None
    total_expenses: Decimal = ZERO


@dataclass(frozen=True)
class CascadeResult:
    receipts_closed: int = 0
    payments_closed: int = 0
