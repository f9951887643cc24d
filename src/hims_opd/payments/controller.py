from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import optional_iso_date, parse_iso_date
from ..common.responses import json_body, ok
from ..common.validators import optional_bool, optional_decimal, optional_int, optional_str, parse_decimal
from ..container import Container
from .model import NewPayment, PaymentUpdate


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/consultant-payments"

    @app.route(base, methods=["GET"], endpoint="payments_list")
    def payments_list():
        rows = container.payment_service.list(
            payment_date=optional_iso_date(request.args.get("date"), "date"),
            doctor_name=optional_str(request.args.get("doctor_name")),
            shift_id=optional_int(request.args.get("shift_id"), "shift_id"),
            shift_date=optional_iso_date(request.args.get("shift_date"), "shift_date"),
            shift_closed=optional_bool(request.args.get("shift_closed")),
        )
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="payments_create")
    def payments_create():
        body = json_body()
        payment = container.payment_service.create(
            NewPayment(
                doctor_name=body.get("doctor_name"),
                total=parse_decimal(body.get("total"), "total"),
                share_percent=optional_decimal(body.get("share_percent"), "share_percent"),
                department=optional_str(body.get("department")),
                patient_mr_number=optional_str(body.get("patient_mr_number")),
                patient_name=optional_str(body.get("patient_name")),
                patient_service=optional_str(body.get("patient_service")),
                receipt_id=optional_int(body.get("receipt_id"), "receipt_id"),
                shift_id=optional_int(body.get("shift_id"), "shift_id"),
            )
        )
        return ok(payment, message="Payment recorded successfully", status=201)

    @app.route(f"{base}/pending", methods=["GET"], endpoint="payments_pending")
    def payments_pending():
        rows = container.payment_service.pending()
        return ok(rows, count=len(rows))

    @app.route(f"{base}/summary", methods=["GET"], endpoint="payments_summary")
    def payments_summary():
        rows = container.payment_service.doctor_summary(
            start=parse_iso_date(request.args.get("startDate"), "startDate"),
            end=parse_iso_date(request.args.get("endDate"), "endDate"),
        )
        return ok(rows, count=len(rows))

    @app.route(f"{base}/doctor/<doctor_name>", methods=["GET"], endpoint="payments_by_doctor")
    def payments_by_doctor(doctor_name: str):
        rows = container.payment_service.list_for_doctor(doctor_name)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/<int:payment_id>", methods=["GET"], endpoint="payments_get")
    def payments_get(payment_id: int):
        return ok(container.payment_service.get(payment_id))

    @app.route(f"{base}/<int:payment_id>", methods=["PUT"], endpoint="payments_update")
    def payments_update(payment_id: int):
        body = json_body()
        payment = container.payment_service.update(
            payment_id,
            PaymentUpdate(
                doctor_name=optional_str(body.get("doctor_name")),
                department=optional_str(body.get("department")),
                total=optional_decimal(body.get("total"), "total"),
                share_percent=optional_decimal(body.get("share_percent"), "share_percent"),
                patient_mr_number=optional_str(body.get("patient_mr_number")),
                patient_name=optional_str(body.get("patient_name")),
                patient_service=optional_str(body.get("patient_service")),
            ),
        )
        return ok(payment, message="Payment updated successfully")

    @app.route(f"{base}/<int:payment_id>", methods=["DELETE"], endpoint="payments_delete")
    def payments_delete(payment_id: int):
        container.payment_service.delete(payment_id)
        return ok(None, message="Payment deleted successfully")
