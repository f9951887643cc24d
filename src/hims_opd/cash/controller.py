from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import optional_iso_date, parse_iso_date
from ..common.responses import json_body, ok
from ..common.validators import optional_decimal, optional_enum, optional_int, optional_str, parse_int
from ..container import Container
from ..core.enums import ShiftType
from .model import CashSummaryCorrection


def _correction_from(body: dict) -> CashSummaryCorrection:
    return CashSummaryCorrection(
        total_quantity=optional_int(body.get("total_quantity"), "total_quantity"),
        total_amount=optional_decimal(body.get("total_amount"), "total_amount"),
        total_discount_quantity=optional_int(body.get("total_discount_quantity"), "total_discount_quantity"),
        total_discount_amount=optional_decimal(body.get("total_discount_amount"), "total_discount_amount"),
        total_paid=optional_decimal(body.get("total_paid"), "total_paid"),
        total_collected=optional_decimal(body.get("total_collected"), "total_collected"),
        total_balance=optional_decimal(body.get("total_balance"), "total_balance"),
        total_expenses=optional_decimal(body.get("total_expenses"), "total_expenses"),
        net_collection=optional_decimal(body.get("net_collection"), "net_collection"),
        submitted_by=optional_str(body.get("submitted_by")),
    )


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")

    @app.route(f"{prefix}/opd-shift-cash", methods=["GET"], endpoint="cash_list")
    def cash_list():
        rows = container.cash_service.list(
            shift_date=optional_iso_date(request.args.get("date"), "date"),
            shift_type=optional_enum(ShiftType, request.args.get("shift_type"), "shift_type"),
        )
        return ok(rows, count=len(rows))

    @app.route(f"{prefix}/opd-shift-cash/<int:cash_id>", methods=["GET"], endpoint="cash_get")
    def cash_get(cash_id: int):
        return ok(container.cash_service.get(cash_id))

    @app.route(f"{prefix}/opd-shift-cash/shift/<int:shift_id>", methods=["GET"], endpoint="cash_for_shift")
    def cash_for_shift(shift_id: int):
        return ok(container.cash_service.get_for_shift(shift_id))

    @app.route(f"{prefix}/opd-shift-cash/daily/<cash_date>", methods=["GET"], endpoint="cash_daily")
    def cash_daily(cash_date: str):
        return ok(container.cash_service.daily_cash(parse_iso_date(cash_date, "date")))

    @app.route(f"{prefix}/opd-shift-cash/close", methods=["POST"], endpoint="cash_close")
    def cash_close():
        body = json_body()
        closing = container.cash_service.close_with_summary(
            shift_id=parse_int(body.get("shift_id"), "shift_id", minimum=1),
            submitted_by=body.get("submitted_by"),
        )
        return ok(closing, message="Shift closed successfully", status=201)

    @app.route(f"{prefix}/opd-shift-cash/<int:cash_id>", methods=["PUT"], endpoint="cash_correct")
    def cash_correct(cash_id: int):
        body = json_body()
        summary = container.cash_service.correct(
            cash_id=cash_id,
            correction=_correction_from(body),
            corrected_by=body.get("corrected_by"),
            note=body.get("correction_note"),
        )
        return ok(summary, message="Shift cash updated successfully")
