from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..common.money import to_money
from ..core.enums import ConflictCode, ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    integrity_conflicts,
    normalize_mysql_time,
    update_assignments,
)
from .model import CashSummaryCorrection, ShiftCashSummary
from .repository import CashSummaryRepository

_COLUMNS = """
    cash_id, shift_id, shift_date, shift_type, shift_time, submitted_by, submitted_at,
    receipt_from, receipt_to, expense_from, expense_to, service_head,
    total_quantity, total_amount, total_discount_quantity, total_discount_amount,
    total_paid, total_collected, total_balance, total_expenses, net_collection,
    corrected_by, corrected_at, correction_note
"""

_CORRECTABLE = {
    "total_quantity": "total_quantity",
    "total_amount": "total_amount",
    "total_discount_quantity": "total_discount_quantity",
    "total_discount_amount": "total_discount_amount",
    "total_paid": "total_paid",
    "total_collected": "total_collected",
    "total_balance": "total_balance",
    "total_expenses": "total_expenses",
    "net_collection": "net_collection",
    "submitted_by": "submitted_by",
}


def row_to_summary(r: dict[str, Any]) -> ShiftCashSummary:
    return ShiftCashSummary(
        cash_id=int(r["cash_id"]),
        shift_id=int(r["shift_id"]),
        shift_date=r["shift_date"],
        shift_type=ShiftType(r["shift_type"]),
        shift_time=normalize_mysql_time(r["shift_time"]),
        submitted_by=r["submitted_by"],
        submitted_at=r["submitted_at"],
        receipt_from=r.get("receipt_from"),
        receipt_to=r.get("receipt_to"),
        expense_from=r.get("expense_from"),
        expense_to=r.get("expense_to"),
        service_head=r.get("service_head") or "OPD",
        total_quantity=int(r.get("total_quantity") or 0),
        total_amount=to_money(r.get("total_amount")),
        total_discount_quantity=int(r.get("total_discount_quantity") or 0),
        total_discount_amount=to_money(r.get("total_discount_amount")),
        total_paid=to_money(r.get("total_paid")),
        total_collected=to_money(r.get("total_collected")),
        total_balance=to_money(r.get("total_balance")),
        total_expenses=to_money(r.get("total_expenses")),
        net_collection=to_money(r.get("net_collection")),
        corrected_by=r.get("corrected_by"),
        corrected_at=r.get("corrected_at"),
        correction_note=r.get("correction_note"),
    )


def insert_summary(cur, summary: ShiftCashSummary) -> int:
    """Insert within the caller's transaction; the unique key on shift_id guards re-entry."""

    with integrity_conflicts(
        {"uq_opd_shift_cash_shift": (ConflictCode.ALREADY_CLOSED, "Shift already closed")}
    ):
        cur.execute(
            """
            INSERT INTO opd_shift_cash(
                shift_id, shift_date, shift_type, shift_time, submitted_by, submitted_at,
                receipt_from, receipt_to, expense_from, expense_to, service_head,
                total_quantity, total_amount, total_discount_quantity, total_discount_amount,
                total_paid, total_collected, total_balance, total_expenses, net_collection
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                summary.shift_id,
                summary.shift_date,
                summary.shift_type.value,
                summary.shift_time,
                summary.submitted_by,
                summary.submitted_at,
                summary.receipt_from,
                summary.receipt_to,
                summary.expense_from,
                summary.expense_to,
                summary.service_head,
                summary.total_quantity,
                summary.total_amount,
                summary.total_discount_quantity,
                summary.total_discount_amount,
                summary.total_paid,
                summary.total_collected,
                summary.total_balance,
                summary.total_expenses,
                summary.net_collection,
            ),
        )
    return int(cur.lastrowid)


class MySQLCashSummaryRepository(CashSummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, cash_id: int) -> Optional[ShiftCashSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM opd_shift_cash WHERE cash_id=%s", (int(cash_id),))
            r = fetchone(cur)
            return row_to_summary(r) if r else None

    def get_for_shift(self, shift_id: int) -> Optional[ShiftCashSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM opd_shift_cash WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return row_to_summary(r) if r else None

    def list(self, *, shift_date: Optional[date] = None, shift_type: Optional[ShiftType] = None) -> Sequence[ShiftCashSummary]:
        clauses = ["1=1"]
        params: list[object] = []

        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)
        if shift_type is not None:
            clauses.append("shift_type=%s")
            params.append(shift_type.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM opd_shift_cash
                WHERE {where}
                ORDER BY shift_date DESC, FIELD(shift_type, 'Morning', 'Evening', 'Night'), cash_id DESC
                """,
                tuple(params),
            )
            return [row_to_summary(r) for r in fetchall(cur)]

    def apply_correction(
        self,
        *,
        cash_id: int,
        correction: CashSummaryCorrection,
        corrected_by: str,
        corrected_at: datetime,
        note: Optional[str],
    ) -> bool:
        assignments, params = update_assignments(correction, _CORRECTABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE opd_shift_cash
                SET {assignments}, corrected_by=%s, corrected_at=%s, correction_note=%s
                WHERE cash_id=%s
                """,
                tuple(params + [corrected_by, corrected_at, note, int(cash_id)]),
            )
            return cur.rowcount > 0
