from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import optional_iso_date, parse_iso_date
from ..common.responses import json_body, ok
from ..common.validators import optional_bool, parse_enum
from ..container import Container
from ..core.enums import ShiftType


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")

    @app.route(f"{prefix}/shifts", methods=["GET"], endpoint="shifts_list")
    def shifts_list():
        shifts = container.shift_service.list_shifts(
            shift_date=optional_iso_date(request.args.get("date"), "date"),
            is_closed=optional_bool(request.args.get("is_closed")),
        )
        return ok(shifts, count=len(shifts))

    @app.route(f"{prefix}/shifts/current", methods=["GET"], endpoint="shifts_current")
    def shifts_current():
        shift = container.shift_service.get_current_shift()
        if shift is None:
            return ok(None, message="No open shift found")
        return ok(shift)

    @app.route(f"{prefix}/shifts/date/<shift_date>", methods=["GET"], endpoint="shifts_by_date")
    def shifts_by_date(shift_date: str):
        shifts = container.shift_service.list_for_date(parse_iso_date(shift_date, "date"))
        return ok(shifts, count=len(shifts))

    @app.route(f"{prefix}/shifts/<int:shift_id>", methods=["GET"], endpoint="shifts_get")
    def shifts_get(shift_id: int):
        return ok(container.shift_service.get_shift(shift_id))

    @app.route(f"{prefix}/shifts/open", methods=["POST"], endpoint="shifts_open")
    def shifts_open():
        body = json_body()
        shift = container.shift_service.open_shift(
            shift_date=parse_iso_date(body.get("shift_date"), "shift_date"),
            shift_type=parse_enum(ShiftType, body.get("shift_type"), "shift_type"),
            opened_by=body.get("opened_by"),
        )
        return ok(shift, message="Shift opened successfully", status=201)

    @app.route(f"{prefix}/shifts/<int:shift_id>/close", methods=["PUT"], endpoint="shifts_close")
    def shifts_close(shift_id: int):
        body = json_body()
        closing = container.shift_service.close_shift(shift_id=shift_id, closed_by=body.get("closed_by"))
        return ok(closing, message="Shift closed successfully")
