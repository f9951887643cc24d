from __future__ import annotations

from decimal import Decimal

import pytest

from hims_opd.database.mysql_base import update_assignments
from hims_opd.expenses.model import ExpenseUpdate

COLUMNS = {
    "expense_name": "expense_name",
    "expense_description": "expense_description",
    "expense_amount": "expense_amount",
    "expense_by": "expense_by",
}


def test_update_assignments_writes_only_set_fields():
    sql, params = update_assignments(ExpenseUpdate(expense_amount=Decimal("10"), expense_by="accounts"), COLUMNS)

    assert sql == "expense_amount=%s, expense_by=%s"
    assert params == [Decimal("10"), "accounts"]


def test_update_assignments_rejects_field_missing_from_allow_list():
    columns = {k: v for k, v in COLUMNS.items() if k != "expense_by"}

    with pytest.raises(ValueError) as exc:
        update_assignments(ExpenseUpdate(expense_by="accounts"), columns)

    assert str(exc.value) == "ExpenseUpdate.expense_by has no column in the update allow-list"
