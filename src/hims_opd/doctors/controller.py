from __future__ import annotations

from flask import Flask

from ..common.money import ZERO
from ..common.responses import json_body, ok
from ..common.validators import optional_bool, optional_decimal, optional_str
from ..container import Container
from .model import DoctorUpdate, NewDoctor


def _first(body: dict, *keys: str):
    # The dashboard still posts the legacy doctor_* field names.
    for key in keys:
        if body.get(key) is not None:
            return body.get(key)
    return None


def _new_doctor_from(body: dict) -> NewDoctor:
    return NewDoctor(
        doctor_code=_first(body, "doctor_code", "doctor_id"),
        doctor_name=body.get("doctor_name"),
        specialization=optional_str(_first(body, "specialization", "doctor_specialization")),
        department=optional_str(_first(body, "department", "doctor_department")),
        qualification=optional_str(_first(body, "qualification", "doctor_qualification")),
        phone=optional_str(_first(body, "phone", "doctor_phone")),
        email=optional_str(_first(body, "email", "doctor_email")),
        address=optional_str(_first(body, "address", "doctor_address")),
        share_percent=optional_decimal(_first(body, "share_percent", "doctor_share"), "share_percent", default=ZERO),
        consultation_fee=optional_decimal(body.get("consultation_fee"), "consultation_fee", default=ZERO),
    )


def _update_from(body: dict) -> DoctorUpdate:
    return DoctorUpdate(
        doctor_name=optional_str(body.get("doctor_name")),
        specialization=optional_str(_first(body, "specialization", "doctor_specialization")),
        department=optional_str(_first(body, "department", "doctor_department")),
        qualification=optional_str(_first(body, "qualification", "doctor_qualification")),
        phone=optional_str(_first(body, "phone", "doctor_phone")),
        email=optional_str(_first(body, "email", "doctor_email")),
        address=optional_str(_first(body, "address", "doctor_address")),
        share_percent=optional_decimal(_first(body, "share_percent", "doctor_share"), "share_percent"),
        consultation_fee=optional_decimal(body.get("consultation_fee"), "consultation_fee"),
        is_active=optional_bool(body.get("is_active")),
    )


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/doctors"

    @app.route(base, methods=["GET"], endpoint="doctors_list")
    def doctors_list():
        rows = container.doctor_service.list_active()
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="doctors_create")
    def doctors_create():
        doctor = container.doctor_service.create(_new_doctor_from(json_body()))
        return ok(doctor, message="Doctor registered successfully", status=201)

    @app.route(f"{base}/departments", methods=["GET"], endpoint="doctors_departments")
    def doctors_departments():
        return ok(container.doctor_service.departments())

    @app.route(f"{base}/department/<department>", methods=["GET"], endpoint="doctors_by_department")
    def doctors_by_department(department: str):
        rows = container.doctor_service.list_by_department(department)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/<int:doctor_id>", methods=["GET"], endpoint="doctors_get")
    def doctors_get(doctor_id: int):
        return ok(container.doctor_service.get(doctor_id))

    @app.route(f"{base}/<int:doctor_id>", methods=["PUT"], endpoint="doctors_update")
    def doctors_update(doctor_id: int):
        doctor = container.doctor_service.update(doctor_id, _update_from(json_body()))
        return ok(doctor, message="Doctor updated successfully")

    @app.route(f"{base}/<int:doctor_id>", methods=["DELETE"], endpoint="doctors_delete")
    def doctors_delete(doctor_id: int):
        container.doctor_service.deactivate(doctor_id)
        return ok(None, message="Doctor deleted successfully")
