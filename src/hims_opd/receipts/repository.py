from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import OpdReceipt, ReceiptShiftSummary, ReceiptUpdate


class ReceiptRepository(Protocol):
    def get_by_id(self, receipt_id: int) -> Optional[OpdReceipt]:
        raise NotImplementedError

    def list(
        self,
        *,
        receipt_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        mr_number: Optional[str] = None,
        is_cancelled: Optional[bool] = None,
    ) -> Sequence[OpdReceipt]:
        raise NotImplementedError

    def list_for_patient(self, mr_number: str, *, limit: Optional[int] = None) -> Sequence[OpdReceipt]:
        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[OpdReceipt]:
        raise NotImplementedError

    def create(self, receipt: OpdReceipt) -> OpdReceipt:
        """Insert with a freshly generated receipt code; returns the stored receipt."""

        raise NotImplementedError

    def update(self, receipt_id: int, changes: ReceiptUpdate) -> bool:
        raise NotImplementedError

    def cancel(self, receipt_id: int, *, details: Optional[str]) -> bool:
        raise NotImplementedError

    def refund(self, receipt_id: int, *, reason: Optional[str], amount: Decimal) -> bool:
        raise NotImplementedError

    def mark_paid_to_doctor(self, receipt_id: int) -> bool:
        raise NotImplementedError

    def shift_summary(self, shift_id: int) -> ReceiptShiftSummary:
        raise NotImplementedError
