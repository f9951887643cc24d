from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO


@dataclass(frozen=True)
class Doctor:
    doctor_id: int
    doctor_code: str
    doctor_name: str
    specialization: Optional[str] = None
    department: Optional[str] = None
    qualification: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    share_percent: Decimal = ZERO
    consultation_fee: Decimal = ZERO
    is_active: bool = True


@dataclass(frozen=True)
class NewDoctor:
    doctor_code: str
    doctor_name: str
    specialization: Optional[str] = None
    department: Optional[str] = None
    qualification: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    share_percent: Decimal = ZERO
    consultation_fee: Decimal = ZERO


@dataclass(frozen=True)
class DoctorUpdate:
    doctor_name: Optional[str] = None
    specialization: Optional[str] = None
    department: Optional[str] = None
    qualification: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    share_percent: Optional[Decimal] = None
    consultation_fee: Optional[Decimal] = None
    is_active: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)
