from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import ZERO, percent_of, to_money
from ..common.validators import optional_str, require_non_empty, require_percentage
from ..core.enums import ConflictCode
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..doctors.repository import DoctorRepository
from ..shifts.service import ShiftService
from .model import ConsultantPayment, DoctorPaymentSummary, NewPayment, PaymentUpdate
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(
        self,
        payments: PaymentRepository,
        shift_service: ShiftService,
        doctors: DoctorRepository,
        *,
        clock: Callable = now_local,
    ):
        self._payments = payments
        self._shift_service = shift_service
        self._doctors = doctors
        self._clock = clock

    def create(self, data: NewPayment) -> ConsultantPayment:
        doctor_name = require_non_empty(data.doctor_name, "doctor_name")
        total = to_money(data.total)
        if total < 0:
            raise ValidationError("total cannot be negative")

        share_percent = data.share_percent
        department = optional_str(data.department)
        if share_percent is None or department is None:
            doctor = self._doctors.get_by_name(doctor_name)
            if doctor is not None:
                share_percent = doctor.share_percent if share_percent is None else share_percent
                department = department or doctor.department
        if share_percent is None:
            raise ValidationError("share_percent is required")
        share_percent = require_percentage(Decimal(share_percent), "share_percent")

        shift = self._shift_service.require_open_shift(data.shift_id)
        now = self._clock()
        payment = self._payments.create(
            ConsultantPayment(
                payment_date=now.date(),
                payment_time=now.time(),
                doctor_name=doctor_name,
                department=department,
                total=total,
                share_percent=share_percent,
                share_amount=percent_of(total, share_percent),
                patient_mr_number=optional_str(data.patient_mr_number),
                patient_name=optional_str(data.patient_name),
                patient_service=optional_str(data.patient_service),
                receipt_id=data.receipt_id,
                shift_id=shift.shift_id,
                shift_type=shift.shift_type,
                shift_date=shift.shift_date,
            )
        )
        logger.info(
            "Payment %s to %s: %s%% of %s = %s",
            payment.voucher_code,
            doctor_name,
            share_percent,
            total,
            payment.share_amount,
        )
        return payment

    def get(self, payment_id: int) -> ConsultantPayment:
        payment = self._payments.get_by_id(int(payment_id))
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment

    def list(
        self,
        *,
        payment_date: Optional[date] = None,
        doctor_name: Optional[str] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_closed: Optional[bool] = None,
    ) -> Sequence[ConsultantPayment]:
        return self._payments.list(
            payment_date=payment_date,
            doctor_name=doctor_name,
            shift_id=shift_id,
            shift_date=shift_date,
            shift_closed=shift_closed,
        )

    def list_for_doctor(self, doctor_name: str) -> Sequence[ConsultantPayment]:
        return self._payments.list(doctor_name=require_non_empty(doctor_name, "doctor_name"))

    def pending(self) -> Sequence[ConsultantPayment]:
        return self._payments.list(shift_closed=False)

    def doctor_summary(self, *, start: date, end: date) -> Sequence[DoctorPaymentSummary]:
        if start > end:
            raise ValidationError("startDate must be on or before endDate")
        return self._payments.doctor_summary(start=start, end=end)

    def update(self, payment_id: int, changes: PaymentUpdate) -> ConsultantPayment:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        if changes.share_amount is not None:
            raise ValidationError("share_amount is computed from total and share_percent")

        current = self.get(payment_id)
        if current.shift_closed:
            raise ConflictError("Payments of a closed shift cannot be changed", code=ConflictCode.SHIFT_CLOSED.value)

        total = to_money(changes.total) if changes.total is not None else current.total
        if total < ZERO:
            raise ValidationError("total cannot be negative")
        share_percent = changes.share_percent if changes.share_percent is not None else current.share_percent
        require_percentage(Decimal(share_percent), "share_percent")

        self._payments.update(
            current.payment_id,
            replace(changes, total=total, share_percent=share_percent, share_amount=percent_of(total, share_percent)),
        )
        return self.get(payment_id)

    def delete(self, payment_id: int) -> None:
        current = self.get(payment_id)
        if current.shift_closed:
            raise ConflictError("Payments of a closed shift cannot be changed", code=ConflictCode.SHIFT_CLOSED.value)
        if not self._payments.delete(current.payment_id):
            raise NotFoundError("Payment not found")
        logger.info("Payment %s deleted", current.voucher_code)
