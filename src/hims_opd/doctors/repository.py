from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Doctor, DoctorUpdate, NewDoctor


class DoctorRepository(Protocol):
    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        raise NotImplementedError

    def get_by_name(self, doctor_name: str) -> Optional[Doctor]:
        """Active doctor with this exact name, if any."""

        raise NotImplementedError

    def list_active(self) -> Sequence[Doctor]:
        raise NotImplementedError

    def list_by_department(self, department: str) -> Sequence[Doctor]:
        raise NotImplementedError

    def departments(self) -> Sequence[str]:
        raise NotImplementedError

    def create(self, doctor: NewDoctor) -> int:
        raise NotImplementedError

    def update(self, doctor_id: int, changes: DoctorUpdate) -> bool:
        raise NotImplementedError

    def deactivate(self, doctor_id: int) -> bool:
        raise NotImplementedError
