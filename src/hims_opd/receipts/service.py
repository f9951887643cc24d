from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import to_money
from ..common.validators import optional_str
from ..core.enums import ConflictCode, ItemCategory
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..doctors.repository import DoctorRepository
from ..shifts.service import ShiftService
from .model import NewReceipt, OpdReceipt, ReceiptShiftSummary, ReceiptUpdate, ServiceItem, compute_financials
from .repository import ReceiptRepository

logger = logging.getLogger(__name__)


class ReceiptService:
    def __init__(
        self,
        receipts: ReceiptRepository,
        shift_service: ShiftService,
        doctors: DoctorRepository,
        *,
        clock: Callable = now_local,
    ):
        self._receipts = receipts
        self._shift_service = shift_service
        self._doctors = doctors
        self._clock = clock

    def _with_doctor_shares(self, items: Sequence[ServiceItem]) -> tuple[ServiceItem, ...]:
        # Consultations without an explicit share use the doctor's configured percentage.
        resolved = []
        for item in items:
            if item.category == ItemCategory.CONSULTATION and item.dr_share_percent is None and item.doctor_name:
                doctor = self._doctors.get_by_name(item.doctor_name)
                if doctor is not None:
                    item = replace(item, dr_share_percent=doctor.share_percent)
            resolved.append(item)
        return tuple(resolved)

    def create(self, data: NewReceipt) -> OpdReceipt:
        for item in data.items:
            if not item.service_name.strip():
                raise ValidationError("service_name is required for every item")
            if item.quantity < 1:
                raise ValidationError("quantity must be >= 1")
            if item.rate < 0:
                raise ValidationError("rate cannot be negative")

        shift = self._shift_service.require_open_shift(data.shift_id)
        items = self._with_doctor_shares(data.items)
        money = compute_financials(
            items,
            discount=data.discount_amount,
            paid=data.paid,
            claimed_total=data.total_amount,
            claimed_payable=data.payable,
            claimed_balance=data.balance,
        )
        now = self._clock()
        receipt = self._receipts.create(
            OpdReceipt(
                receipt_date=now.date(),
                receipt_time=now.time(),
                shift_id=shift.shift_id,
                shift_type=shift.shift_type,
                shift_date=shift.shift_date,
                items=items,
                patient_mr_number=optional_str(data.patient_mr_number),
                patient_name=optional_str(data.patient_name),
                phone_number=optional_str(data.phone_number),
                patient_age=optional_str(data.patient_age),
                patient_gender=optional_str(data.patient_gender),
                patient_address=optional_str(data.patient_address),
                emergency_paid=data.emergency_paid,
                opd_service=optional_str(data.opd_service) or ", ".join(i.service_name for i in items),
                service_detail=optional_str(data.service_detail),
                total_amount=money.total_amount,
                discount_amount=money.discount_amount,
                discount_reason=optional_str(data.discount_reason),
                payable=money.payable,
                paid=money.paid,
                balance=money.balance,
                dr_share_amount=money.dr_share_amount,
                hospital_share=money.hospital_share,
            )
        )
        logger.info(
            "Receipt %s created in shift %s: total=%s paid=%s",
            receipt.receipt_code,
            shift.shift_id,
            receipt.total_amount,
            receipt.paid,
        )
        return receipt

    def get(self, receipt_id: int) -> OpdReceipt:
        receipt = self._receipts.get_by_id(int(receipt_id))
        if receipt is None:
            raise NotFoundError("Record not found")
        return receipt

    def list(
        self,
        *,
        receipt_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        mr_number: Optional[str] = None,
        is_cancelled: Optional[bool] = None,
    ) -> Sequence[OpdReceipt]:
        return self._receipts.list(
            receipt_date=receipt_date,
            shift_id=shift_id,
            shift_date=shift_date,
            mr_number=mr_number,
            is_cancelled=is_cancelled,
        )

    def list_for_patient(self, mr_number: str) -> Sequence[OpdReceipt]:
        return self._receipts.list_for_patient(mr_number)

    def list_for_shift(self, shift_id: int) -> Sequence[OpdReceipt]:
        return self._receipts.list_for_shift(int(shift_id))

    def shift_summary(self, shift_id: int) -> ReceiptShiftSummary:
        return self._receipts.shift_summary(int(shift_id))

    def update(self, receipt_id: int, changes: ReceiptUpdate) -> OpdReceipt:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        self.get(receipt_id)
        self._receipts.update(int(receipt_id), changes)
        return self.get(receipt_id)

    def cancel(self, receipt_id: int, *, cancel_details: Optional[str]) -> OpdReceipt:
        receipt = self.get(receipt_id)
        if not self._receipts.cancel(receipt.receipt_id, details=optional_str(cancel_details)):
            raise ConflictError("Receipt is already cancelled", code=ConflictCode.DUPLICATE_ENTRY.value)
        logger.info("Receipt %s cancelled: %s", receipt.receipt_code, cancel_details)
        return self.get(receipt_id)

    def refund(self, receipt_id: int, *, refund_reason: Optional[str], refund_amount: Decimal) -> OpdReceipt:
        receipt = self.get(receipt_id)
        amount = to_money(refund_amount)
        if amount <= 0:
            raise ValidationError("refund_amount must be greater than 0")
        if amount > receipt.paid:
            raise ValidationError("Refund amount cannot exceed the paid amount")
        if not self._receipts.refund(receipt.receipt_id, reason=optional_str(refund_reason), amount=amount):
            raise ConflictError("Receipt is already refunded", code=ConflictCode.DUPLICATE_ENTRY.value)
        logger.info("Receipt %s refunded %s: %s", receipt.receipt_code, amount, refund_reason)
        return self.get(receipt_id)

    def mark_paid_to_doctor(self, receipt_id: int) -> OpdReceipt:
        receipt = self.get(receipt_id)
        if not receipt.paid_to_doctor:
            self._receipts.mark_paid_to_doctor(receipt.receipt_id)
        return self.get(receipt_id)
