from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..cash.model import ShiftCashSummary
from ..common.money import ZERO
from ..core.enums import ShiftType
from ..expenses.model import Expense
from ..payments.model import ConsultantPayment
from ..receipts.model import OpdReceipt
from ..shifts.model import Shift


@dataclass(frozen=True)
class OpdShiftTypeTotals:
    """Receipts of one shift type; money sums cover non-cancelled rows only."""

    shift_type: ShiftType
    patient_count: int = 0
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_dr_share: Decimal = ZERO
    total_hospital_share: Decimal = ZERO
    cancelled_count: int = 0
    total_refund: Decimal = ZERO


@dataclass(frozen=True)
class ExpenseShiftTypeTotals:
    shift_type: ShiftType
    expense_count: int = 0
    total_expense: Decimal = ZERO


@dataclass(frozen=True)
class PeriodTotals:
    """Non-cancelled receipts of one day (monthly report) or one month (yearly report)."""

    period: object
    patient_count: int = 0
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO


@dataclass(frozen=True)
class PeriodExpense:
    period: object
    total_expense: Decimal = ZERO


@dataclass(frozen=True)
class ReportTotals:
    patient_count: int = 0
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_dr_share: Decimal = ZERO
    total_hospital_share: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_collection: Decimal = ZERO


@dataclass(frozen=True)
class DailyReport:
    date: date
    shifts: Sequence[Shift]
    opd_summary: Sequence[OpdShiftTypeTotals]
    expenses: Sequence[ExpenseShiftTypeTotals]
    shift_cash: Sequence[ShiftCashSummary]
    totals: ReportTotals


@dataclass(frozen=True)
class ShiftReportSummary:
    patient_count: int = 0
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_dr_payments: Decimal = ZERO
    cancelled_count: int = 0
    refund_amount: Decimal = ZERO
    net_collection: Decimal = ZERO


@dataclass(frozen=True)
class ShiftReport:
    shift: Shift
    opd_records: Sequence[OpdReceipt]
    expenses: Sequence[Expense]
    payments: Sequence[ConsultantPayment]
    shift_cash: Optional[ShiftCashSummary]
    summary: ShiftReportSummary


@dataclass(frozen=True)
class MonthlyReport:
    year: int
    month: int
    daily_summaries: Sequence[PeriodTotals]
    expense_summary: Sequence[PeriodExpense]
    totals: ReportTotals


@dataclass(frozen=True)
class YearlyReport:
    year: int
    monthly_summaries: Sequence[PeriodTotals]
    expense_summary: Sequence[PeriodExpense]
    totals: ReportTotals


@dataclass(frozen=True)
class ServiceDay:
    report_date: date
    record_count: int = 0
    total_amount: Decimal = ZERO


@dataclass(frozen=True)
class ServiceLine:
    service_name: str
    quantity: int = 0
    total_amount: Decimal = ZERO


@dataclass(frozen=True)
class ServicesReport:
    start: date
    end: date
    days: Sequence[ServiceDay]
    services: Sequence[ServiceLine]
