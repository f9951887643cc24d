from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import money_sum
from ..common.validators import optional_str, require_non_empty
from ..core.constants import SHIFT_ORDER
from ..core.enums import ShiftType
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.service import ShiftClosing, ShiftService
from .model import CashSummaryCorrection, ShiftCashSummary
from .repository import CashSummaryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyCash:
    date: date
    shifts: Sequence[ShiftCashSummary]
    total_quantity: int
    total_amount: Decimal
    total_discount_amount: Decimal
    total_paid: Decimal
    total_balance: Decimal
    total_expenses: Decimal
    net_collection: Decimal


class CashService:
    def __init__(
        self,
        summaries: CashSummaryRepository,
        shift_service: ShiftService,
        *,
        clock: Callable = now_local,
    ):
        self._summaries = summaries
        self._shift_service = shift_service
        self._clock = clock

    def list(self, *, shift_date: Optional[date] = None, shift_type: Optional[ShiftType] = None) -> Sequence[ShiftCashSummary]:
        return self._summaries.list(shift_date=shift_date, shift_type=shift_type)

    def get(self, cash_id: int) -> ShiftCashSummary:
        summary = self._summaries.get_by_id(int(cash_id))
        if summary is None:
            raise NotFoundError("Shift cash record not found")
        return summary

    def get_for_shift(self, shift_id: int) -> ShiftCashSummary:
        summary = self._summaries.get_for_shift(int(shift_id))
        if summary is None:
            raise NotFoundError("No cash summary for this shift")
        return summary

    def close_with_summary(self, *, shift_id: int, submitted_by: str) -> ShiftClosing:
        return self._shift_service.close_shift(shift_id=shift_id, closed_by=submitted_by)

    def correct(
        self,
        *,
        cash_id: int,
        correction: CashSummaryCorrection,
        corrected_by: str,
        note: Optional[str] = None,
    ) -> ShiftCashSummary:
        corrected_by = require_non_empty(corrected_by, "corrected_by")
        if correction.is_empty():
            raise ValidationError("No fields to update")

        self.get(cash_id)
        self._summaries.apply_correction(
            cash_id=int(cash_id),
            correction=correction,
            corrected_by=corrected_by,
            corrected_at=self._clock(),
            note=optional_str(note),
        )
        logger.info("Cash summary %s corrected by %s: %s", cash_id, corrected_by, correction)
        return self.get(cash_id)

    def daily_cash(self, shift_date: date) -> DailyCash:
        rows = sorted(
            self._summaries.list(shift_date=shift_date),
            key=lambda s: SHIFT_ORDER.index(s.shift_type),
        )
        return DailyCash(
            date=shift_date,
            shifts=rows,
            total_quantity=sum(s.total_quantity for s in rows),
            total_amount=money_sum(s.total_amount for s in rows),
            total_discount_amount=money_sum(s.total_discount_amount for s in rows),
            total_paid=money_sum(s.total_paid for s in rows),
            total_balance=money_sum(s.total_balance for s in rows),
            total_expenses=money_sum(s.total_expenses for s in rows),
            net_collection=money_sum(s.net_collection for s in rows),
        )
