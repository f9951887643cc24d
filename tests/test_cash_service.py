from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from hims_opd.cash.model import CashSummaryCorrection
from hims_opd.core.enums import ShiftType
from hims_opd.core.exceptions import NotFoundError, ValidationError
from hims_opd.receipts.model import NewReceipt, ServiceItem

DAY = date(2025, 1, 1)


def _run_shift(container, shift_type, rate):
    shift = container.shift_service.open_shift(shift_date=DAY, shift_type=shift_type, opened_by="reception")
    container.receipt_service.create(
        NewReceipt(items=(ServiceItem(service_name="CBC", rate=Decimal(rate)),), paid=Decimal(rate))
    )
    return container.cash_service.close_with_summary(shift_id=shift.shift_id, submitted_by="cashier")


def test_close_with_summary_stores_one_row_per_shift(container):
    closing = _run_shift(container, ShiftType.MORNING, "600")

    stored = container.cash_service.get_for_shift(closing.shift.shift_id)

    assert stored.cash_id == closing.summary.cash_id
    assert stored.total_amount == Decimal("600.00")
    assert stored.submitted_by == "cashier"
    assert stored.service_head == "OPD"


def test_correction_records_who_and_why(container, clock):
    closing = _run_shift(container, ShiftType.MORNING, "600")
    clock.now = datetime(2025, 1, 1, 18, 0, 0)

    corrected = container.cash_service.correct(
        cash_id=closing.summary.cash_id,
        correction=CashSummaryCorrection(total_paid=Decimal("550"), net_collection=Decimal("550")),
        corrected_by="manager",
        note="counted short",
    )

    assert corrected.total_paid == Decimal("550")
    assert corrected.total_amount == Decimal("600.00")
    assert corrected.corrected_by == "manager"
    assert corrected.corrected_at == clock.now
    assert corrected.correction_note == "counted short"
    assert corrected.receipt_from == closing.summary.receipt_from


def test_empty_correction_is_rejected(container):
    closing = _run_shift(container, ShiftType.MORNING, "600")

    with pytest.raises(ValidationError):
        container.cash_service.correct(
            cash_id=closing.summary.cash_id,
            correction=CashSummaryCorrection(),
            corrected_by="manager",
        )


def test_correct_unknown_summary(container):
    with pytest.raises(NotFoundError):
        container.cash_service.correct(
            cash_id=77,
            correction=CashSummaryCorrection(total_paid=Decimal("1")),
            corrected_by="manager",
        )


def test_daily_cash_orders_and_totals_shifts(container):
    _run_shift(container, ShiftType.EVENING, "300")
    _run_shift(container, ShiftType.MORNING, "600")

    daily = container.cash_service.daily_cash(DAY)

    assert [s.shift_type for s in daily.shifts] == [ShiftType.MORNING, ShiftType.EVENING]
    assert daily.total_quantity == 2
    assert daily.total_paid == Decimal("900.00")
    assert daily.net_collection == Decimal("900.00")
