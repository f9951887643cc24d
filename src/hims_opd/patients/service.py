from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from ..common.codes import claimed_mr_sequence
from ..common.datetime_utils import now_local
from ..common.validators import optional_str, require_non_empty
from ..core.constants import PATIENT_HISTORY_LIMIT, PATIENT_SEARCH_LIMIT
from ..core.enums import ConflictCode
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..receipts.repository import ReceiptRepository
from .model import NewPatient, Patient, PatientProfile, PatientUpdate
from .repository import PatientRepository

logger = logging.getLogger(__name__)


class PatientService:
    """MR (patient master index) registration and lookup."""

    def __init__(self, patients: PatientRepository, receipts: ReceiptRepository, *, clock: Callable = now_local):
        self._patients = patients
        self._receipts = receipts
        self._clock = clock

    def register(self, data: NewPatient) -> Patient:
        first_name = require_non_empty(data.first_name, "patient_name")
        if data.age is not None and data.age < 0:
            raise ValidationError("age cannot be negative")

        mr_number = optional_str(data.mr_number)
        if mr_number:
            try:
                claimed_mr_sequence(mr_number)
            except ValueError:
                raise ValidationError("MR number in the MR-<year>- series must end in digits")
        if mr_number and self._patients.get_by_mr(mr_number) is not None:
            raise ConflictError("MR Number already exists", code=ConflictCode.DUPLICATE_ENTRY.value)

        patient = self._patients.create(
            replace(data, first_name=first_name, last_name=(data.last_name or "").strip(), mr_number=mr_number),
            year=self._clock().year,
        )
        logger.info("Registered patient %s", patient.mr_number)
        return patient

    def _find(self, mr: str) -> Patient:
        mr = require_non_empty(mr, "mr_number")
        patient = self._patients.get_by_mr(mr)
        if patient is None and mr.isdigit():
            patient = self._patients.get_by_id(int(mr))
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    def get_by_mr(self, mr: str) -> PatientProfile:
        patient = self._find(mr)
        history = self._receipts.list_for_patient(patient.mr_number, limit=PATIENT_HISTORY_LIMIT)
        return PatientProfile(patient=patient, history=history)

    def search(self, term: Optional[str] = None) -> Sequence[Patient]:
        return self._patients.search(optional_str(term), limit=PATIENT_SEARCH_LIMIT)

    def update(self, mr: str, changes: PatientUpdate) -> Patient:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        if changes.age is not None and changes.age < 0:
            raise ValidationError("age cannot be negative")

        patient = self._find(mr)
        self._patients.update(patient.mr_number, changes)
        return self._find(patient.mr_number)
