from __future__ import annotations

from collections import OrderedDict
from datetime import date
from typing import Sequence

from ..cash.repository import CashSummaryRepository
from ..common.datetime_utils import month_bounds
from ..common.money import ZERO, money_sum, to_money
from ..core.exceptions import NotFoundError, ValidationError
from ..expenses.repository import ExpenseRepository
from ..payments.repository import PaymentRepository
from ..receipts.repository import ReceiptRepository
from ..shifts.repository import ShiftRepository
from .model import (
    DailyReport,
    MonthlyReport,
    PeriodExpense,
    PeriodTotals,
    ReportTotals,
    ServiceDay,
    ServiceLine,
    ServicesReport,
    ShiftReport,
    ShiftReportSummary,
    YearlyReport,
)
from .repository import ReportRepository


def _period_totals(opd: Sequence[PeriodTotals], expenses: Sequence[PeriodExpense]) -> ReportTotals:
    total_paid = money_sum(r.total_paid for r in opd)
    total_expense = money_sum(e.total_expense for e in expenses)
    return ReportTotals(
        patient_count=sum(r.patient_count for r in opd),
        total_amount=money_sum(r.total_amount for r in opd),
        total_discount=money_sum(r.total_discount for r in opd),
        total_paid=total_paid,
        total_balance=money_sum(r.total_balance for r in opd),
        total_expense=total_expense,
        net_collection=to_money(total_paid - total_expense),
    )


def _check_year(year: int) -> int:
    if year < 2000 or year > 2100:
        raise ValidationError("year must be between 2000 and 2100")
    return year


class ReportService:
    """Read-only financial views over shifts and their ledgers."""

    def __init__(
        self,
        reports: ReportRepository,
        shifts: ShiftRepository,
        receipts: ReceiptRepository,
        expenses: ExpenseRepository,
        payments: PaymentRepository,
        cash: CashSummaryRepository,
    ):
        self._reports = reports
        self._shifts = shifts
        self._receipts = receipts
        self._expenses = expenses
        self._payments = payments
        self._cash = cash

    def daily(self, report_date: date) -> DailyReport:
        opd = self._reports.opd_by_shift_type(report_date)
        expenses = self._reports.expenses_by_shift_type(report_date)

        total_paid = money_sum(r.total_paid for r in opd)
        total_expense = money_sum(e.total_expense for e in expenses)
        totals = ReportTotals(
            patient_count=sum(r.patient_count for r in opd),
            total_amount=money_sum(r.total_amount for r in opd),
            total_discount=money_sum(r.total_discount for r in opd),
            total_paid=total_paid,
            total_balance=money_sum(r.total_balance for r in opd),
            total_dr_share=money_sum(r.total_dr_share for r in opd),
            total_hospital_share=money_sum(r.total_hospital_share for r in opd),
            total_expense=total_expense,
            net_collection=to_money(total_paid - total_expense),
        )

        return DailyReport(
            date=report_date,
            shifts=self._shifts.list(shift_date=report_date),
            opd_summary=opd,
            expenses=expenses,
            shift_cash=self._cash.list(shift_date=report_date),
            totals=totals,
        )

    def shift(self, shift_id: int) -> ShiftReport:
        shift = self._shifts.get_by_id(int(shift_id))
        if shift is None:
            raise NotFoundError("Shift not found")

        receipts = self._receipts.list_for_shift(shift.shift_id)
        expenses = self._expenses.list_for_shift(shift.shift_id)
        payments = self._payments.list(shift_id=shift.shift_id)

        active = [r for r in receipts if not r.is_cancelled]
        total_paid = money_sum(r.paid for r in active)
        total_expenses = money_sum(e.expense_amount for e in expenses)

        summary = ShiftReportSummary(
            patient_count=len(active),
            total_amount=money_sum(r.total_amount for r in active),
            total_discount=money_sum(r.discount_amount for r in active),
            total_paid=total_paid,
            total_balance=money_sum(r.balance for r in active),
            total_expenses=total_expenses,
            total_dr_payments=money_sum(p.share_amount for p in payments),
            cancelled_count=len(receipts) - len(active),
            refund_amount=money_sum(r.refund_amount for r in receipts if r.is_refunded),
            net_collection=to_money(total_paid - total_expenses),
        )

        return ShiftReport(
            shift=shift,
            opd_records=receipts,
            expenses=expenses,
            payments=payments,
            shift_cash=self._cash.get_for_shift(shift.shift_id),
            summary=summary,
        )

    def monthly(self, year: int, month: int) -> MonthlyReport:
        start, end = month_bounds(_check_year(year), month)
        opd = self._reports.opd_by_day(start=start, end=end)
        expenses = self._reports.expenses_by_day(start=start, end=end)
        return MonthlyReport(
            year=year,
            month=month,
            daily_summaries=opd,
            expense_summary=expenses,
            totals=_period_totals(opd, expenses),
        )

    def yearly(self, year: int) -> YearlyReport:
        _check_year(year)
        opd = self._reports.opd_by_month(year)
        expenses = self._reports.expenses_by_month(year)
        return YearlyReport(
            year=year,
            monthly_summaries=opd,
            expense_summary=expenses,
            totals=_period_totals(opd, expenses),
        )

    def services(self, start: date, end: date) -> ServicesReport:
        if start > end:
            raise ValidationError("startDate must not be after endDate")

        receipts = sorted(self._reports.receipts_between(start=start, end=end), key=lambda r: r.receipt_date)

        days: "OrderedDict[date, list]" = OrderedDict()
        lines: dict[str, list] = {}
        for r in receipts:
            day = days.setdefault(r.receipt_date, [0, ZERO])
            day[0] += 1
            day[1] += r.total_amount
            for item in r.items:
                line = lines.setdefault(item.service_name, [0, ZERO])
                line[0] += item.quantity
                line[1] += item.amount

        return ServicesReport(
            start=start,
            end=end,
            days=[ServiceDay(report_date=d, record_count=c, total_amount=to_money(a)) for d, (c, a) in days.items()],
            services=sorted(
                (ServiceLine(service_name=n, quantity=q, total_amount=to_money(a)) for n, (q, a) in lines.items()),
                key=lambda s: (-s.total_amount, s.service_name),
            ),
        )

