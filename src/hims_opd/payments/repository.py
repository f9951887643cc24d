from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ConsultantPayment, DoctorPaymentSummary, PaymentUpdate


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: int) -> Optional[ConsultantPayment]:
        raise NotImplementedError

    def list(
        self,
        *,
        payment_date: Optional[date] = None,
        doctor_name: Optional[str] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_closed: Optional[bool] = None,
    ) -> Sequence[ConsultantPayment]:
        raise NotImplementedError

    def create(self, payment: ConsultantPayment) -> ConsultantPayment:
        raise NotImplementedError

    def update(self, payment_id: int, changes: PaymentUpdate) -> bool:
        raise NotImplementedError

    def delete(self, payment_id: int) -> bool:
        raise NotImplementedError

    def doctor_summary(self, *, start: date, end: date) -> Sequence[DoctorPaymentSummary]:
        raise NotImplementedError
