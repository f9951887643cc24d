from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.responses import json_body, ok, to_jsonable
from ..common.validators import optional_int, optional_str
from ..container import Container
from .model import NewPatient, Patient, PatientUpdate, split_full_name


def _patient_json(patient: Patient) -> dict[str, Any]:
    # Aliases kept for the dashboard's receipt form.
    data = to_jsonable(patient)
    data["patient_name"] = patient.patient_name
    data["phone_number"] = patient.phone
    data["father_husband_name"] = patient.guardian_name
    return data


def _names_from(body: dict) -> tuple:
    first = optional_str(body.get("first_name"))
    last = optional_str(body.get("last_name"))
    full = optional_str(body.get("patient_name"))
    if first is None and full:
        first, split_last = split_full_name(full)
        last = last if last is not None else split_last
    return first, last


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/mr-data"

    @app.route(base, methods=["GET"], endpoint="patients_search")
    def patients_search():
        rows = [_patient_json(p) for p in container.patient_service.search(request.args.get("search"))]
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="patients_register")
    def patients_register():
        body = json_body()
        first, last = _names_from(body)
        patient = container.patient_service.register(
            NewPatient(
                first_name=first or "",
                last_name=last or "",
                mr_number=optional_str(body.get("mr_number")),
                guardian_name=optional_str(body.get("guardian_name") or body.get("father_husband_name")),
                guardian_relation=optional_str(body.get("guardian_relation")) or "Parent",
                cnic=optional_str(body.get("cnic")),
                age=optional_int(body.get("age"), "age"),
                gender=optional_str(body.get("gender")),
                phone=optional_str(body.get("phone") or body.get("phone_number")),
                email=optional_str(body.get("email")),
                address=optional_str(body.get("address")),
                city=optional_str(body.get("city")),
                blood_group=optional_str(body.get("blood_group")),
                profession=optional_str(body.get("profession")),
            )
        )
        return ok(_patient_json(patient), message="Patient MR created successfully", status=201)

    @app.route(f"{base}/<mr>", methods=["GET"], endpoint="patients_get")
    def patients_get(mr: str):
        profile = container.patient_service.get_by_mr(mr)
        data = _patient_json(profile.patient)
        data["history"] = to_jsonable(profile.history)
        return ok(data)

    @app.route(f"{base}/<mr>", methods=["PUT"], endpoint="patients_update")
    def patients_update(mr: str):
        body = json_body()
        first, last = _names_from(body)
        patient = container.patient_service.update(
            mr,
            PatientUpdate(
                first_name=first,
                last_name=last,
                guardian_name=optional_str(body.get("guardian_name") or body.get("father_husband_name")),
                guardian_relation=optional_str(body.get("guardian_relation")),
                cnic=optional_str(body.get("cnic")),
                age=optional_int(body.get("age"), "age"),
                gender=optional_str(body.get("gender")),
                phone=optional_str(body.get("phone") or body.get("phone_number")),
                email=optional_str(body.get("email")),
                address=optional_str(body.get("address")),
                city=optional_str(body.get("city")),
                blood_group=optional_str(body.get("blood_group")),
                profession=optional_str(body.get("profession")),
            ),
        )
        return ok(_patient_json(patient), message="Patient updated successfully")
