from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..common.money import to_money
from ..common.validators import require_non_empty, require_percentage
from ..core.exceptions import NotFoundError, ValidationError
from .model import Doctor, DoctorUpdate, NewDoctor
from .repository import DoctorRepository

logger = logging.getLogger(__name__)


def _check_money_fields(share_percent, consultation_fee) -> None:
    if share_percent is not None:
        require_percentage(share_percent, "share_percent")
    if consultation_fee is not None and consultation_fee < 0:
        raise ValidationError("consultation_fee cannot be negative")


class DoctorService:
    def __init__(self, doctors: DoctorRepository):
        self._doctors = doctors

    def create(self, data: NewDoctor) -> Doctor:
        code = require_non_empty(data.doctor_code, "doctor_id")
        name = require_non_empty(data.doctor_name, "doctor_name")
        _check_money_fields(data.share_percent, data.consultation_fee)

        doctor_id = self._doctors.create(
            replace(data, doctor_code=code, doctor_name=name, consultation_fee=to_money(data.consultation_fee))
        )
        logger.info("Doctor %s (%s) registered", name, code)
        return self.get(doctor_id)

    def get(self, doctor_id: int) -> Doctor:
        doctor = self._doctors.get_by_id(int(doctor_id))
        if doctor is None:
            raise NotFoundError("Doctor not found")
        return doctor

    def list_active(self) -> Sequence[Doctor]:
        return self._doctors.list_active()

    def list_by_department(self, department: str) -> Sequence[Doctor]:
        return self._doctors.list_by_department(require_non_empty(department, "department"))

    def departments(self) -> Sequence[str]:
        return self._doctors.departments()

    def update(self, doctor_id: int, changes: DoctorUpdate) -> Doctor:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        if changes.doctor_name is not None:
            require_non_empty(changes.doctor_name, "doctor_name")
        _check_money_fields(changes.share_percent, changes.consultation_fee)

        self.get(doctor_id)
        self._doctors.update(int(doctor_id), changes)
        return self.get(doctor_id)

    def deactivate(self, doctor_id: int) -> None:
        doctor = self.get(doctor_id)
        if doctor.is_active:
            self._doctors.deactivate(doctor.doctor_id)
            logger.info("Doctor %s deactivated", doctor.doctor_code)
