from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import optional_iso_date
from ..common.money import ZERO
from ..common.responses import json_body, ok
from ..common.validators import (
    optional_bool,
    optional_decimal,
    optional_enum,
    optional_int,
    optional_str,
    parse_bool,
    parse_decimal,
    parse_int,
    require_non_empty,
    require_percentage,
)
from ..container import Container
from ..core.enums import ItemCategory
from ..core.exceptions import ValidationError
from .model import NewReceipt, ReceiptUpdate, ServiceItem


def _item_from(raw: object, index: int) -> ServiceItem:
    if not isinstance(raw, dict):
        raise ValidationError(f"service_details[{index}] must be an object")
    pct = optional_decimal(raw.get("dr_share_percent"), "dr_share_percent")
    return ServiceItem(
        service_name=require_non_empty(raw.get("service_name"), "service_name"),
        rate=parse_decimal(raw.get("rate"), "rate"),
        quantity=parse_int(raw.get("quantity", 1), "quantity", minimum=1),
        category=optional_enum(ItemCategory, raw.get("category"), "category") or ItemCategory.SERVICE,
        doctor_name=optional_str(raw.get("doctor_name")),
        dr_share_percent=None if pct is None else require_percentage(pct, "dr_share_percent"),
    )


def _new_receipt_from(body: dict) -> NewReceipt:
    raw_items = body.get("service_details")
    if not isinstance(raw_items, list):
        raise ValidationError("service_details must be a list of items")

    return NewReceipt(
        items=tuple(_item_from(raw, i) for i, raw in enumerate(raw_items)),
        patient_mr_number=optional_str(body.get("patient_mr_number")),
        patient_name=optional_str(body.get("patient_name")),
        phone_number=optional_str(body.get("phone_number")),
        patient_age=optional_str(body.get("patient_age")),
        patient_gender=optional_str(body.get("patient_gender")),
        patient_address=optional_str(body.get("patient_address")),
        emergency_paid=parse_bool(body.get("emergency_paid")),
        opd_service=optional_str(body.get("opd_service")),
        service_detail=optional_str(body.get("service_detail")),
        discount_amount=optional_decimal(body.get("discount_amount"), "discount_amount", default=ZERO),
        discount_reason=optional_str(body.get("discount_reason")),
        paid=optional_decimal(body.get("paid"), "paid", default=ZERO),
        total_amount=optional_decimal(body.get("total_amount"), "total_amount"),
        payable=optional_decimal(body.get("payable"), "payable"),
        balance=optional_decimal(body.get("balance"), "balance"),
        shift_id=optional_int(body.get("shift_id"), "shift_id"),
    )


def _update_from(body: dict) -> ReceiptUpdate:
    return ReceiptUpdate(
        patient_name=optional_str(body.get("patient_name")),
        phone_number=optional_str(body.get("phone_number")),
        patient_age=optional_str(body.get("patient_age")),
        patient_gender=optional_str(body.get("patient_gender")),
        patient_address=optional_str(body.get("patient_address")),
        emergency_paid=optional_bool(body.get("emergency_paid")),
        opd_service=optional_str(body.get("opd_service")),
        service_detail=optional_str(body.get("service_detail")),
        discount_reason=optional_str(body.get("discount_reason")),
    )


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/opd-patient-data"

    @app.route(base, methods=["GET"], endpoint="receipts_list")
    def receipts_list():
        rows = container.receipt_service.list(
            receipt_date=optional_iso_date(request.args.get("date"), "date"),
            shift_id=optional_int(request.args.get("shift_id"), "shift_id"),
            shift_date=optional_iso_date(request.args.get("shift_date"), "shift_date"),
            mr_number=optional_str(request.args.get("mr_number")),
            is_cancelled=optional_bool(request.args.get("is_cancelled")),
        )
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="receipts_create")
    def receipts_create():
        receipt = container.receipt_service.create(_new_receipt_from(json_body()))
        return ok(receipt, message="OPD record created successfully", status=201)

    @app.route(f"{base}/<int:receipt_id>", methods=["GET"], endpoint="receipts_get")
    def receipts_get(receipt_id: int):
        return ok(container.receipt_service.get(receipt_id))

    @app.route(f"{base}/<int:receipt_id>", methods=["PUT"], endpoint="receipts_update")
    def receipts_update(receipt_id: int):
        receipt = container.receipt_service.update(receipt_id, _update_from(json_body()))
        return ok(receipt, message="Record updated successfully")

    @app.route(f"{base}/<int:receipt_id>/cancel", methods=["PUT"], endpoint="receipts_cancel")
    def receipts_cancel(receipt_id: int):
        body = json_body()
        receipt = container.receipt_service.cancel(receipt_id, cancel_details=body.get("cancel_details"))
        return ok(receipt, message="OPD record cancelled successfully")

    @app.route(f"{base}/<int:receipt_id>/refund", methods=["PUT"], endpoint="receipts_refund")
    def receipts_refund(receipt_id: int):
        body = json_body()
        receipt = container.receipt_service.refund(
            receipt_id,
            refund_reason=body.get("refund_reason"),
            refund_amount=parse_decimal(body.get("refund_amount"), "refund_amount"),
        )
        return ok(receipt, message="Refund processed successfully")

    @app.route(f"{base}/<int:receipt_id>/paid-to-doctor", methods=["PUT"], endpoint="receipts_paid_to_doctor")
    def receipts_paid_to_doctor(receipt_id: int):
        receipt = container.receipt_service.mark_paid_to_doctor(receipt_id)
        return ok(receipt, message="Doctor payment marked as done")

    @app.route(f"{base}/mr/<mr_number>", methods=["GET"], endpoint="receipts_by_mr")
    def receipts_by_mr(mr_number: str):
        rows = container.receipt_service.list_for_patient(mr_number)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/shift/<int:shift_id>", methods=["GET"], endpoint="receipts_by_shift")
    def receipts_by_shift(shift_id: int):
        rows = container.receipt_service.list_for_shift(shift_id)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/shift/<int:shift_id>/summary", methods=["GET"], endpoint="receipts_shift_summary")
    def receipts_shift_summary(shift_id: int):
        return ok(container.receipt_service.shift_summary(shift_id))
