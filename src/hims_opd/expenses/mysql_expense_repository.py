from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Optional, Sequence

from ..common.codes import EXPENSE_CODE
from ..common.money import to_money
from ..core.enums import ConflictCode, ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    db_transaction,
    fetchall,
    fetchone,
    integrity_conflicts,
    normalize_mysql_time,
    update_assignments,
)
from ..database.sequences import next_code
from ..shifts.mysql_shift_repository import ensure_shift_open
from .model import Expense, ExpenseShiftTotal, ExpenseUpdate
from .repository import ExpenseRepository

_COLUMNS = """
    expense_id, expense_code, expense_date, expense_time, expense_shift, expense_name,
    expense_description, expense_amount, expense_by, shift_id, shift_date
"""

_UPDATABLE = {
    "expense_name": "expense_name",
    "expense_description": "expense_description",
    "expense_amount": "expense_amount",
    "expense_by": "expense_by",
}


def row_to_expense(r: dict[str, Any]) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        expense_code=r["expense_code"],
        expense_date=r["expense_date"],
        expense_time=normalize_mysql_time(r["expense_time"]),
        expense_shift=ShiftType(r["expense_shift"]),
        expense_name=r["expense_name"],
        expense_description=r.get("expense_description"),
        expense_amount=to_money(r.get("expense_amount")),
        expense_by=r["expense_by"],
        shift_id=int(r["shift_id"]),
        shift_date=r["shift_date"],
    )


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM expenses WHERE expense_id=%s", (int(expense_id),))
            r = fetchone(cur)
            return row_to_expense(r) if r else None

    def list(
        self,
        *,
        expense_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_type: Optional[ShiftType] = None,
    ) -> Sequence[Expense]:
        clauses = ["1=1"]
        params: list[object] = []

        if expense_date is not None:
            clauses.append("expense_date=%s")
            params.append(expense_date)
        if shift_id is not None:
            clauses.append("shift_id=%s")
            params.append(int(shift_id))
        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)
        if shift_type is not None:
            clauses.append("expense_shift=%s")
            params.append(shift_type.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM expenses
                WHERE {where}
                ORDER BY expense_date DESC, expense_time DESC, expense_id DESC
                """,
                tuple(params),
            )
            return [row_to_expense(r) for r in fetchall(cur)]

    def list_for_shift(self, shift_id: int) -> Sequence[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM expenses WHERE shift_id=%s ORDER BY expense_time, expense_id",
                (int(shift_id),),
            )
            return [row_to_expense(r) for r in fetchall(cur)]

    def create(self, expense: Expense) -> Expense:
        with db_transaction(self._conn_factory) as (_, cur):
            ensure_shift_open(cur, expense.shift_id)
            code = next_code(cur, EXPENSE_CODE, table="expenses", column="expense_code")
            with integrity_conflicts({"uq_expenses_code": (ConflictCode.DUPLICATE_ENTRY, "Expense ID already exists")}):
                cur.execute(
                    """
                    INSERT INTO expenses(
                        expense_code, expense_date, expense_time, expense_shift, expense_name,
                        expense_description, expense_amount, expense_by, shift_id, shift_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        code,
                        expense.expense_date,
                        expense.expense_time,
                        expense.expense_shift.value,
                        expense.expense_name,
                        expense.expense_description,
                        expense.expense_amount,
                        expense.expense_by,
                        expense.shift_id,
                        expense.shift_date,
                    ),
                )
            expense_id = int(cur.lastrowid)

        return replace(expense, expense_id=expense_id, expense_code=code)

    def update(self, expense_id: int, changes: ExpenseUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE expenses SET {assignments} WHERE expense_id=%s",
                tuple(params + [int(expense_id)]),
            )
            return cur.rowcount > 0

    def delete(self, expense_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM expenses WHERE expense_id=%s", (int(expense_id),))
            return cur.rowcount > 0

    def totals_by_shift(self, expense_date: date) -> Sequence[ExpenseShiftTotal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT expense_shift, COUNT(*) AS n, COALESCE(SUM(expense_amount), 0) AS total_amount
                FROM expenses
                WHERE expense_date=%s
                GROUP BY expense_shift
                ORDER BY FIELD(expense_shift, 'Morning', 'Evening', 'Night')
                """,
                (expense_date,),
            )
            return [
                ExpenseShiftTotal(
                    expense_shift=ShiftType(r["expense_shift"]),
                    count=int(r["n"]),
                    total_amount=to_money(r["total_amount"]),
                )
                for r in fetchall(cur)
            ]
