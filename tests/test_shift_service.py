from __future__ import annotations

import threading
from datetime import date, time
from decimal import Decimal

import pytest

from fakes import InMemoryClosingUnit

from hims_opd.core.enums import ConflictCode, ItemCategory, ShiftType
from hims_opd.core.exceptions import ConflictError, NotFoundError
from hims_opd.expenses.model import Expense, NewExpense
from hims_opd.payments.model import NewPayment
from hims_opd.receipts.model import NewReceipt, ServiceItem

DAY = date(2025, 1, 1)


def _open(container, shift_type=ShiftType.MORNING, shift_date=DAY):
    return container.shift_service.open_shift(shift_date=shift_date, shift_type=shift_type, opened_by="reception")


def _receipt(container, rate, discount="0", paid=None):
    rate = Decimal(rate)
    discount = Decimal(discount)
    return container.receipt_service.create(
        NewReceipt(
            items=(ServiceItem(service_name="Consultation", rate=rate, category=ItemCategory.CONSULTATION),),
            patient_name="Test Patient",
            discount_amount=discount,
            paid=rate - discount if paid is None else Decimal(paid),
        )
    )


def test_open_shift_returns_open_shift(container, clock):
    shift = _open(container)

    assert shift.shift_type == ShiftType.MORNING
    assert shift.shift_date == DAY
    assert shift.is_closed is False
    assert shift.opened_at == clock.now
    assert container.shift_service.get_current_shift() == shift


def test_open_rejected_while_another_shift_is_open(container):
    first = _open(container)

    with pytest.raises(ConflictError) as exc:
        _open(container, ShiftType.EVENING)

    assert exc.value.code == ConflictCode.OPEN_SHIFT_EXISTS.value
    assert exc.value.record == first


def test_same_type_twice_on_one_date_is_rejected_before_insert(container, store):
    _open(container)

    with pytest.raises(ConflictError):
        _open(container)

    assert len(store.shifts) == 1


def test_duplicate_type_for_date_after_close(container):
    shift = _open(container)
    container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    with pytest.raises(ConflictError) as exc:
        _open(container)

    assert exc.value.code == ConflictCode.DUPLICATE_SHIFT.value
    assert str(exc.value) == "Morning shift already exists for 2025-01-01"


def test_a_date_holds_at_most_three_shifts(container):
    for shift_type in (ShiftType.MORNING, ShiftType.EVENING, ShiftType.NIGHT):
        s = _open(container, shift_type)
        container.shift_service.close_shift(shift_id=s.shift_id, closed_by="reception")

    assert len(container.shift_service.list_for_date(DAY)) == 3

    # Every type is taken, so the date itself is full.
    with pytest.raises(ConflictError) as exc:
        _open(container, ShiftType.NIGHT)
    assert exc.value.code == ConflictCode.DUPLICATE_SHIFT.value


def test_concurrent_opens_leave_a_single_open_shift(container, store):
    barrier = threading.Barrier(6)
    opened, conflicts = [], []

    def worker(shift_type, shift_date):
        barrier.wait()
        try:
            opened.append(_open(container, shift_type, shift_date))
        except ConflictError as e:
            conflicts.append(e)

    threads = [
        threading.Thread(target=worker, args=(t, d))
        for t in (ShiftType.MORNING, ShiftType.EVENING, ShiftType.NIGHT)
        for d in (DAY, date(2025, 1, 2))
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(opened) == 1
    assert len(conflicts) == 5
    assert sum(1 for s in store.shifts.values() if not s.is_closed) == 1


def test_scenario_close_aggregates_and_cascades(container, store):
    shift = _open(container)
    r1 = _receipt(container, "500")
    r2 = _receipt(container, "300", discount="50")
    expense = container.expense_service.create(
        NewExpense(expense_name="Tea", expense_amount=Decimal("100"), expense_by="reception")
    )

    closing = container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")
    summary = closing.summary

    assert summary.total_quantity == 2
    assert summary.total_amount == Decimal("800.00")
    assert summary.total_discount_amount == Decimal("50.00")
    assert summary.total_discount_quantity == 1
    assert summary.total_paid == Decimal("750.00")
    assert summary.total_collected == summary.total_paid
    assert summary.total_expenses == Decimal("100.00")
    assert summary.net_collection == Decimal("650.00")
    assert (summary.receipt_from, summary.receipt_to) == (r1.receipt_code, r2.receipt_code)
    assert summary.expense_from == summary.expense_to == expense.expense_code
    assert summary.cash_id is not None

    assert closing.shift.is_closed
    assert closing.cascade.receipts_closed == 2
    assert all(r.shift_closed for r in store.receipts.values())
    assert container.shift_service.get_current_shift() is None


def test_close_excludes_cancelled_receipts(container):
    shift = _open(container)
    _receipt(container, "500")
    cancelled = _receipt(container, "200")
    container.receipt_service.cancel(cancelled.receipt_id, cancel_details="wrong patient")

    summary = container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception").summary

    assert summary.total_quantity == 1
    assert summary.total_amount == Decimal("500.00")


def test_close_of_empty_shift_reports_zeroes(container):
    shift = _open(container)

    summary = container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception").summary

    assert summary.total_quantity == 0
    assert summary.total_amount == Decimal("0.00")
    assert summary.receipt_from is None
    assert summary.net_collection == Decimal("0.00")


def test_close_marks_payments_closed(container, store):
    shift = _open(container)
    container.payment_service.create(NewPayment(doctor_name="Dr A", total=Decimal("1000"), share_percent=Decimal("50")))

    closing = container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    assert closing.cascade.payments_closed == 1
    assert all(p.shift_closed for p in store.payments.values())


def test_second_close_fails_and_keeps_one_summary(container, store):
    shift = _open(container)
    _receipt(container, "500")
    container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    with pytest.raises(ConflictError) as exc:
        container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    assert exc.value.code == ConflictCode.ALREADY_CLOSED.value
    assert sum(1 for c in store.cash.values() if c.shift_id == shift.shift_id) == 1


def test_close_unknown_shift(container):
    with pytest.raises(NotFoundError):
        container.shift_service.close_shift(shift_id=999, closed_by="reception")


def test_failed_close_rolls_back_everything(container, store, monkeypatch):
    shift = _open(container)
    _receipt(container, "500")

    def boom(self, summary):
        raise RuntimeError("disk full")

    monkeypatch.setattr(InMemoryClosingUnit, "insert_cash_summary", boom)

    with pytest.raises(RuntimeError):
        container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    assert store.shifts[shift.shift_id].is_closed is False
    assert not any(r.shift_closed for r in store.receipts.values())
    assert not store.cash


def test_require_open_shift(container):
    with pytest.raises(ConflictError) as exc:
        container.shift_service.require_open_shift()
    assert exc.value.code == ConflictCode.NO_OPEN_SHIFT.value

    shift = _open(container)
    assert container.shift_service.require_open_shift(shift.shift_id) == shift

    with pytest.raises(ConflictError) as exc:
        container.shift_service.require_open_shift(shift.shift_id + 1)
    assert exc.value.code == ConflictCode.SHIFT_CLOSED.value


def test_ledger_insert_into_closed_shift_is_rejected_by_storage(container):
    # A writer that resolved the shift just before the close committed still cannot insert into it.
    shift = _open(container)
    container.shift_service.close_shift(shift_id=shift.shift_id, closed_by="reception")

    with pytest.raises(ConflictError) as exc:
        container.expenses_repo.create(
            Expense(
                expense_date=DAY,
                expense_time=time(10, 0),
                expense_shift=shift.shift_type,
                expense_name="Late",
                expense_amount=Decimal("10.00"),
                expense_by="reception",
                shift_id=shift.shift_id,
                shift_date=shift.shift_date,
            )
        )
    assert exc.value.code == ConflictCode.SHIFT_CLOSED.value
