from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.constants import DEFAULT_GUARDIAN_RELATION
from ..receipts.model import OpdReceipt


def split_full_name(full_name: str) -> Tuple[str, str]:
    """'Ali Raza Khan' -> ('Ali', 'Raza Khan')."""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


@dataclass(frozen=True)
class Patient:
    patient_id: int
    mr_number: str
    first_name: str
    last_name: str = ""
    guardian_name: Optional[str] = None
    guardian_relation: Optional[str] = None
    cnic: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    blood_group: Optional[str] = None
    profession: Optional[str] = None
    is_active: bool = True

    @property
    def patient_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class NewPatient:
    first_name: str
    last_name: str = ""
    mr_number: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_relation: str = DEFAULT_GUARDIAN_RELATION
    cnic: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    blood_group: Optional[str] = None
    profession: Optional[str] = None


@dataclass(frozen=True)
class PatientUpdate:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_relation: Optional[str] = None
    cnic: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    blood_group: Optional[str] = None
    profession: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


@dataclass(frozen=True)
class PatientProfile:
    patient: Patient
    history: Sequence[OpdReceipt]
