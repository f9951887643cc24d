from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import optional_iso_date, parse_iso_date
from ..common.responses import json_body, ok
from ..common.validators import optional_decimal, optional_enum, optional_int, optional_str, parse_decimal
from ..container import Container
from ..core.enums import ShiftType
from .model import ExpenseUpdate, NewExpense


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/expenses"

    @app.route(base, methods=["GET"], endpoint="expenses_list")
    def expenses_list():
        shift_type = request.args.get("shift_type")
        rows = container.expense_service.list(
            expense_date=optional_iso_date(request.args.get("date"), "date"),
            shift_id=optional_int(request.args.get("shift_id"), "shift_id"),
            shift_date=optional_iso_date(request.args.get("shift_date"), "shift_date"),
            shift_type=None if shift_type == "All" else optional_enum(ShiftType, shift_type, "shift_type"),
        )
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="expenses_create")
    def expenses_create():
        body = json_body()
        expense = container.expense_service.create(
            NewExpense(
                expense_name=body.get("expense_name"),
                expense_amount=parse_decimal(body.get("expense_amount"), "expense_amount"),
                expense_by=body.get("expense_by"),
                expense_description=optional_str(body.get("expense_description")),
                shift_id=optional_int(body.get("shift_id"), "shift_id"),
            )
        )
        return ok(expense, message="Expense created successfully", status=201)

    @app.route(f"{base}/<int:expense_id>", methods=["GET"], endpoint="expenses_get")
    def expenses_get(expense_id: int):
        return ok(container.expense_service.get(expense_id))

    @app.route(f"{base}/<int:expense_id>", methods=["PUT"], endpoint="expenses_update")
    def expenses_update(expense_id: int):
        body = json_body()
        expense = container.expense_service.update(
            expense_id,
            ExpenseUpdate(
                expense_name=optional_str(body.get("expense_name")),
                expense_description=optional_str(body.get("expense_description")),
                expense_amount=optional_decimal(body.get("expense_amount"), "expense_amount"),
                expense_by=optional_str(body.get("expense_by")),
            ),
        )
        return ok(expense, message="Expense updated successfully")

    @app.route(f"{base}/<int:expense_id>", methods=["DELETE"], endpoint="expenses_delete")
    def expenses_delete(expense_id: int):
        container.expense_service.delete(expense_id)
        return ok(None, message="Expense deleted successfully")

    @app.route(f"{base}/shift/<int:shift_id>", methods=["GET"], endpoint="expenses_by_shift")
    def expenses_by_shift(shift_id: int):
        rows = container.expense_service.list_for_shift(shift_id)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/summary/<expense_date>", methods=["GET"], endpoint="expenses_summary")
    def expenses_summary(expense_date: str):
        return ok(container.expense_service.summary_for_date(parse_iso_date(expense_date, "date")))
