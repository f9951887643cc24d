from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftType
from .model import CashSummaryCorrection, ShiftCashSummary


class CashSummaryRepository(Protocol):
    def get_by_id(self, cash_id: int) -> Optional[ShiftCashSummary]:
        raise NotImplementedError

    def get_for_shift(self, shift_id: int) -> Optional[ShiftCashSummary]:
        raise NotImplementedError

    def list(self, *, shift_date: Optional[date] = None, shift_type: Optional[ShiftType] = None) -> Sequence[ShiftCashSummary]:
        raise NotImplementedError

    def apply_correction(
        self,
        *,
        cash_id: int,
        correction: CashSummaryCorrection,
        corrected_by: str,
        corrected_at: datetime,
        note: Optional[str],
    ) -> bool:
        raise NotImplementedError
