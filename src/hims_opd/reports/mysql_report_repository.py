from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from ..common.money import to_money
from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..receipts.model import OpdReceipt
from ..receipts.mysql_receipt_repository import RECEIPT_COLUMNS, row_to_receipt
from .model import ExpenseShiftTypeTotals, OpdShiftTypeTotals, PeriodExpense, PeriodTotals
from .repository import ReportRepository

# Money sums skip cancelled receipts; counts of cancellations and refunds cover every row.
_OPD_SUMS = """
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN 1 ELSE 0 END), 0) AS patient_count,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN total_amount ELSE 0 END), 0) AS total_amount,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN discount_amount ELSE 0 END), 0) AS total_discount,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN paid ELSE 0 END), 0) AS total_paid,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN balance ELSE 0 END), 0) AS total_balance,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN dr_share_amount ELSE 0 END), 0) AS total_dr_share,
    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN hospital_share ELSE 0 END), 0) AS total_hospital_share,
    COALESCE(SUM(CASE WHEN is_cancelled=1 THEN 1 ELSE 0 END), 0) AS cancelled_count,
    COALESCE(SUM(CASE WHEN is_refunded=1 THEN refund_amount ELSE 0 END), 0) AS total_refund
"""

_PERIOD_SUMS = """
    COUNT(*) AS patient_count,
    COALESCE(SUM(total_amount), 0) AS total_amount,
    COALESCE(SUM(discount_amount), 0) AS total_discount,
    COALESCE(SUM(paid), 0) AS total_paid,
    COALESCE(SUM(balance), 0) AS total_balance
"""


def _row_to_period(r: dict[str, Any]) -> PeriodTotals:
    return PeriodTotals(
        period=r["period"],
        patient_count=int(r.get("patient_count") or 0),
        total_amount=to_money(r.get("total_amount")),
        total_discount=to_money(r.get("total_discount")),
        total_paid=to_money(r.get("total_paid")),
        total_balance=to_money(r.get("total_balance")),
    )


def _row_to_period_expense(r: dict[str, Any]) -> PeriodExpense:
    return PeriodExpense(period=r["period"], total_expense=to_money(r.get("total_expense")))


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def opd_by_shift_type(self, shift_date: date) -> Sequence[OpdShiftTypeTotals]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT shift_type, {_OPD_SUMS}
                FROM opd_patient_data
                WHERE shift_date=%s
                GROUP BY shift_type
                ORDER BY FIELD(shift_type, 'Morning', 'Evening', 'Night')
                """,
                (shift_date,),
            )
            return [
                OpdShiftTypeTotals(
                    shift_type=ShiftType(r["shift_type"]),
                    patient_count=int(r.get("patient_count") or 0),
                    total_amount=to_money(r.get("total_amount")),
                    total_discount=to_money(r.get("total_discount")),
                    total_paid=to_money(r.get("total_paid")),
                    total_balance=to_money(r.get("total_balance")),
                    total_dr_share=to_money(r.get("total_dr_share")),
                    total_hospital_share=to_money(r.get("total_hospital_share")),
                    cancelled_count=int(r.get("cancelled_count") or 0),
                    total_refund=to_money(r.get("total_refund")),
                )
                for r in fetchall(cur)
            ]

    def expenses_by_shift_type(self, shift_date: date) -> Sequence[ExpenseShiftTypeTotals]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT expense_shift, COUNT(*) AS expense_count, COALESCE(SUM(expense_amount), 0) AS total_expense
                FROM expenses
                WHERE shift_date=%s
                GROUP BY expense_shift
                ORDER BY FIELD(expense_shift, 'Morning', 'Evening', 'Night')
                """,
                (shift_date,),
            )
            return [
                ExpenseShiftTypeTotals(
                    shift_type=ShiftType(r["expense_shift"]),
                    expense_count=int(r.get("expense_count") or 0),
                    total_expense=to_money(r.get("total_expense")),
                )
                for r in fetchall(cur)
            ]

    def opd_by_day(self, *, start: date, end: date) -> Sequence[PeriodTotals]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT shift_date AS period, {_PERIOD_SUMS}
                FROM opd_patient_data
                WHERE shift_date BETWEEN %s AND %s AND is_cancelled=0
                GROUP BY shift_date
                ORDER BY shift_date
                """,
                (start, end),
            )
            return [_row_to_period(r) for r in fetchall(cur)]

    def expenses_by_day(self, *, start: date, end: date) -> Sequence[PeriodExpense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_date AS period, COALESCE(SUM(expense_amount), 0) AS total_expense
                FROM expenses
                WHERE shift_date BETWEEN %s AND %s
                GROUP BY shift_date
                ORDER BY shift_date
                """,
                (start, end),
            )
            return [_row_to_period_expense(r) for r in fetchall(cur)]

    def opd_by_month(self, year: int) -> Sequence[PeriodTotals]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT MONTH(shift_date) AS period, {_PERIOD_SUMS}
                FROM opd_patient_data
                WHERE YEAR(shift_date)=%s AND is_cancelled=0
                GROUP BY MONTH(shift_date)
                ORDER BY period
                """,
                (int(year),),
            )
            return [_row_to_period(r) for r in fetchall(cur)]

    def expenses_by_month(self, year: int) -> Sequence[PeriodExpense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT MONTH(shift_date) AS period, COALESCE(SUM(expense_amount), 0) AS total_expense
                FROM expenses
                WHERE YEAR(shift_date)=%s
                GROUP BY MONTH(shift_date)
                ORDER BY period
                """,
                (int(year),),
            )
            return [_row_to_period_expense(r) for r in fetchall(cur)]

    def receipts_between(self, *, start: date, end: date) -> Sequence[OpdReceipt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECEIPT_COLUMNS}
                FROM opd_patient_data
                WHERE receipt_date BETWEEN %s AND %s AND is_cancelled=0
                ORDER BY receipt_date, receipt_time, receipt_id
                """,
                (start, end),
            )
            return [row_to_receipt(r) for r in fetchall(cur)]
