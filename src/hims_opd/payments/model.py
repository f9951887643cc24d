from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import ShiftType


@dataclass(frozen=True)
class ConsultantPayment:
    """Voucher for a doctor's share; share_amount is always total x share_percent."""

    payment_date: date
    payment_time: time
    doctor_name: str
    total: Decimal
    share_percent: Decimal
    share_amount: Decimal
    shift_id: int
    shift_type: ShiftType
    shift_date: date
    department: Optional[str] = None
    patient_mr_number: Optional[str] = None
    patient_name: Optional[str] = None
    patient_service: Optional[str] = None
    receipt_id: Optional[int] = None
    shift_closed: bool = False
    payment_id: Optional[int] = None
    voucher_code: Optional[str] = None


@dataclass(frozen=True)
class NewPayment:
    doctor_name: str
    total: Decimal
    share_percent: Optional[Decimal] = None
    department: Optional[str] = None
    patient_mr_number: Optional[str] = None
    patient_name: Optional[str] = None
    patient_service: Optional[str] = None
    receipt_id: Optional[int] = None
    shift_id: Optional[int] = None


@dataclass(frozen=True)
class PaymentUpdate:
    doctor_name: Optional[str] = None
    department: Optional[str] = None
    total: Optional[Decimal] = None
    share_percent: Optional[Decimal] = None
    share_amount: Optional[Decimal] = None
    patient_mr_number: Optional[str] = None
    patient_name: Optional[str] = None
    patient_service: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


@dataclass(frozen=True)
class DoctorPaymentSummary:
    doctor_name: str
    payment_count: int = 0
    total_services: Decimal = ZERO
    total_paid: Decimal = ZERO
