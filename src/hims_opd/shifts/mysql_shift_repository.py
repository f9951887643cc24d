from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator, Optional, Sequence

from ..cash.model import ShiftCashSummary
from ..cash.mysql_cash_repository import insert_summary
from ..common.money import to_money
from ..core.enums import ConflictCode, ShiftType
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, integrity_conflicts
from .model import CascadeResult, ExpenseAggregate, ReceiptAggregate, Shift
from .repository import ShiftClosingUnit, ShiftRepository

_COLUMNS = "shift_id, shift_date, shift_type, opened_by, opened_at, is_closed, closed_by, closed_at"


def row_to_shift(r: dict[str, Any]) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        shift_date=r["shift_date"],
        shift_type=ShiftType(r["shift_type"]),
        opened_by=r["opened_by"],
        opened_at=r["opened_at"],
        is_closed=bool(r["is_closed"]),
        closed_by=r.get("closed_by"),
        closed_at=r.get("closed_at"),
    )


class MySQLShiftClosingUnit(ShiftClosingUnit):
    def __init__(self, cur):
        self._cur = cur

    def lock_shift(self, shift_id: int) -> Optional[Shift]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s FOR UPDATE", (int(shift_id),))
        r = fetchone(self._cur)
        return row_to_shift(r) if r else None

    def aggregate_receipts(self, shift_id: int) -> ReceiptAggregate:
        # Locking read: receipts being written for this shift wait for the close to finish.
        self._cur.execute(
            """
            SELECT
                COUNT(*) AS total_count,
                MIN(receipt_code) AS receipt_from,
                MAX(receipt_code) AS receipt_to,
                COALESCE(SUM(total_amount), 0) AS total_amount,
                COALESCE(SUM(discount_amount), 0) AS total_discount,
                COALESCE(SUM(paid), 0) AS total_paid,
                COALESCE(SUM(balance), 0) AS total_balance,
                COALESCE(SUM(CASE WHEN discount_amount > 0 THEN 1 ELSE 0 END), 0) AS discount_qty
            FROM opd_patient_data
            WHERE shift_id=%s AND is_cancelled=0
            LOCK IN SHARE MODE
            """,
            (int(shift_id),),
        )
        r = fetchone(self._cur) or {}
        return ReceiptAggregate(
            count=int(r.get("total_count") or 0),
            receipt_from=r.get("receipt_from"),
            receipt_to=r.get("receipt_to"),
            total_amount=to_money(r.get("total_amount")),
            total_discount=to_money(r.get("total_discount")),
            total_paid=to_money(r.get("total_paid")),
            total_balance=to_money(r.get("total_balance")),
            discount_qty=int(r.get("discount_qty") or 0),
        )

    def aggregate_expenses(self, shift_id: int) -> ExpenseAggregate:
        self._cur.execute(
            """
            SELECT
                COUNT(*) AS total_count,
                MIN(expense_code) AS expense_from,
                MAX(expense_code) AS expense_to,
                COALESCE(SUM(expense_amount), 0) AS total_expenses
            FROM expenses
            WHERE shift_id=%s
            LOCK IN SHARE MODE
            """,
            (int(shift_id),),
        )
        r = fetchone(self._cur) or {}
        return ExpenseAggregate(
            count=int(r.get("total_count") or 0),
            expense_from=r.get("expense_from"),
            expense_to=r.get("expense_to"),
            total_expenses=to_money(r.get("total_expenses")),
        )

    def mark_closed(self, shift_id: int, *, closed_by: str, closed_at: datetime) -> bool:
        self._cur.execute(
            """
            UPDATE shifts
            SET is_closed=1, closed_by=%s, closed_at=%s
            WHERE shift_id=%s AND is_closed=0
            """,
            (closed_by, closed_at, int(shift_id)),
        )
        return self._cur.rowcount > 0

    def cascade_closed(self, shift_id: int) -> CascadeResult:
        self._cur.execute("UPDATE opd_patient_data SET shift_closed=1 WHERE shift_id=%s", (int(shift_id),))
        receipts = self._cur.rowcount
        self._cur.execute("UPDATE consultant_payments SET shift_closed=1 WHERE shift_id=%s", (int(shift_id),))
        payments = self._cur.rowcount
        return CascadeResult(receipts_closed=max(receipts, 0), payments_closed=max(payments, 0))

    def insert_cash_summary(self, summary: ShiftCashSummary) -> int:
        return insert_summary(self._cur, summary)


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return row_to_shift(r) if r else None

    def get_open(self) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE is_closed=0 ORDER BY shift_id DESC LIMIT 1")
            r = fetchone(cur)
            return row_to_shift(r) if r else None

    def get_for_date_and_type(self, *, shift_date: date, shift_type: ShiftType) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE shift_date=%s AND shift_type=%s",
                (shift_date, shift_type.value),
            )
            r = fetchone(cur)
            return row_to_shift(r) if r else None

    def count_for_date(self, shift_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM shifts WHERE shift_date=%s", (shift_date,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list(self, *, shift_date: Optional[date] = None, is_closed: Optional[bool] = None) -> Sequence[Shift]:
        clauses = ["1=1"]
        params: list[object] = []

        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)
        if is_closed is not None:
            clauses.append("is_closed=%s")
            params.append(1 if is_closed else 0)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE {where}
                ORDER BY shift_date DESC, shift_id DESC
                """,
                tuple(params),
            )
            return [row_to_shift(r) for r in fetchall(cur)]

    def create(self, *, shift_date: date, shift_type: ShiftType, opened_by: str, opened_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with integrity_conflicts(
                {
                    "uq_shifts_open": (
                        ConflictCode.OPEN_SHIFT_EXISTS,
                        "Cannot open new shift. Please close the current shift first.",
                    ),
                    "uq_shifts_date_type": (
                        ConflictCode.DUPLICATE_SHIFT,
                        f"{shift_type.value} shift already exists for {shift_date.isoformat()}",
                    ),
                }
            ):
                cur.execute(
                    """
                    INSERT INTO shifts(shift_date, shift_type, opened_by, opened_at, is_closed)
                    VALUES(%s,%s,%s,%s,0)
                    """,
                    (shift_date, shift_type.value, opened_by, opened_at),
                )
            return int(cur.lastrowid)

    @contextmanager
    def closing(self) -> Iterator[ShiftClosingUnit]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLShiftClosingUnit(cur)


def ensure_shift_open(cur, shift_id: int) -> None:
    """Share-lock the parent shift inside a ledger insert.

    Serializes against ``lock_shift`` of a concurrent close, so a row can
    never be added to a shift after its cash summary was computed.
    """

    cur.execute("SELECT is_closed FROM shifts WHERE shift_id=%s LOCK IN SHARE MODE", (int(shift_id),))
    r = fetchone(cur)
    if r is None:
        raise NotFoundError("Shift not found")
    if r["is_closed"]:
        raise ConflictError("Shift is already closed", code=ConflictCode.SHIFT_CLOSED.value)
