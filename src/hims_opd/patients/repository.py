from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewPatient, Patient, PatientUpdate


class PatientRepository(Protocol):
    def get_by_mr(self, mr_number: str) -> Optional[Patient]:
        raise NotImplementedError

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        raise NotImplementedError

    def search(self, term: Optional[str], *, limit: int) -> Sequence[Patient]:
        raise NotImplementedError

    def create(self, patient: NewPatient, *, year: int) -> Patient:
        """Insert; when ``patient.mr_number`` is empty the next MR-<year>- number is generated."""

        raise NotImplementedError

    def update(self, mr_number: str, changes: PatientUpdate) -> bool:
        raise NotImplementedError
