from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from hims_opd.core.enums import ConflictCode, ShiftType
from hims_opd.core.exceptions import ConflictError, NotFoundError, ValidationError
from hims_opd.doctors.model import NewDoctor
from hims_opd.expenses.model import ExpenseUpdate, NewExpense
from hims_opd.payments.model import NewPayment, PaymentUpdate
from hims_opd.receipts.model import NewReceipt, ServiceItem

DAY = date(2025, 1, 1)


@pytest.fixture
def open_shift(container):
    return container.shift_service.open_shift(shift_date=DAY, shift_type=ShiftType.EVENING, opened_by="reception")


def _expense(container, amount="250", name="Printer paper"):
    return container.expense_service.create(
        NewExpense(expense_name=name, expense_amount=Decimal(amount), expense_by="accounts")
    )


def test_expense_takes_shift_type_and_code(container, open_shift):
    first = _expense(container)
    second = _expense(container, "50")

    assert first.expense_code == "EXP0001"
    assert second.expense_code == "EXP0002"
    assert first.expense_shift == ShiftType.EVENING
    assert first.shift_id == open_shift.shift_id


def test_expense_amount_must_be_positive(container, open_shift):
    with pytest.raises(ValidationError):
        _expense(container, "0")


def test_expense_of_closed_shift_is_frozen(container, open_shift):
    expense = _expense(container)
    container.shift_service.close_shift(shift_id=open_shift.shift_id, closed_by="reception")

    with pytest.raises(ConflictError) as exc:
        container.expense_service.update(expense.expense_id, ExpenseUpdate(expense_amount=Decimal("10")))
    assert exc.value.code == ConflictCode.SHIFT_CLOSED.value

    with pytest.raises(ConflictError):
        container.expense_service.delete(expense.expense_id)


def test_expense_update_and_delete_while_open(container, open_shift):
    expense = _expense(container)

    updated = container.expense_service.update(expense.expense_id, ExpenseUpdate(expense_amount=Decimal("300")))
    assert updated.expense_amount == Decimal("300")

    container.expense_service.delete(expense.expense_id)
    with pytest.raises(NotFoundError):
        container.expense_service.get(expense.expense_id)


def test_expense_day_summary(container, open_shift, clock):
    _expense(container, "100")
    _expense(container, "40.50")

    summary = container.expense_service.summary_for_date(clock.now.date())

    assert summary.count == 2
    assert summary.total_amount == Decimal("140.50")
    assert [s.expense_shift for s in summary.shifts] == [ShiftType.EVENING]


def test_payment_share_amount(container, open_shift):
    payment = container.payment_service.create(
        NewPayment(doctor_name="Dr Sara", total=Decimal("2000"), share_percent=Decimal("55"))
    )

    assert payment.voucher_code == "PAY0001"
    assert payment.share_amount == Decimal("1100.00")
    assert payment.shift_type == ShiftType.EVENING


def test_payment_share_defaults_to_doctor(container, open_shift):
    container.doctor_service.create(
        NewDoctor(doctor_code="DR009", doctor_name="Dr Sara", department="Gynecology", share_percent=Decimal("40"))
    )

    payment = container.payment_service.create(NewPayment(doctor_name="Dr Sara", total=Decimal("1000")))

    assert payment.share_percent == Decimal("40")
    assert payment.share_amount == Decimal("400.00")
    assert payment.department == "Gynecology"


def test_payment_without_any_share_percent(container, open_shift):
    with pytest.raises(ValidationError):
        container.payment_service.create(NewPayment(doctor_name="Unknown", total=Decimal("1000")))


def test_payment_update_recomputes_share(container, open_shift):
    payment = container.payment_service.create(
        NewPayment(doctor_name="Dr Sara", total=Decimal("2000"), share_percent=Decimal("50"))
    )

    updated = container.payment_service.update(payment.payment_id, PaymentUpdate(total=Decimal("3000")))
    assert updated.share_amount == Decimal("1500.00")

    with pytest.raises(ValidationError):
        container.payment_service.update(payment.payment_id, PaymentUpdate(share_amount=Decimal("1")))


def test_pending_payments_and_closed_shift(container, open_shift):
    payment = container.payment_service.create(
        NewPayment(doctor_name="Dr Sara", total=Decimal("1000"), share_percent=Decimal("50"))
    )
    assert [p.payment_id for p in container.payment_service.pending()] == [payment.payment_id]

    container.shift_service.close_shift(shift_id=open_shift.shift_id, closed_by="reception")

    assert container.payment_service.pending() == []
    with pytest.raises(ConflictError):
        container.payment_service.delete(payment.payment_id)


def test_doctor_summary(container, open_shift, clock):
    for total in ("1000", "500"):
        container.payment_service.create(
            NewPayment(doctor_name="Dr Sara", total=Decimal(total), share_percent=Decimal("50"))
        )
    container.payment_service.create(NewPayment(doctor_name="Dr Imran", total=Decimal("400"), share_percent=Decimal("25")))

    rows = container.payment_service.doctor_summary(start=clock.now.date(), end=clock.now.date())

    assert [r.doctor_name for r in rows] == ["Dr Sara", "Dr Imran"]
    assert rows[0].payment_count == 2
    assert rows[0].total_paid == Decimal("750.00")

    with pytest.raises(ValidationError):
        container.payment_service.doctor_summary(start=date(2025, 2, 1), end=date(2025, 1, 1))


def test_codes_continue_after_rows_stored_before_the_sequence(container, store, open_shift):
    def receipt():
        return container.receipt_service.create(NewReceipt(items=(ServiceItem(service_name="CBC", rate=Decimal("600")),)))

    def payment():
        return container.payment_service.create(
            NewPayment(doctor_name="Dr Sara", total=Decimal("1000"), share_percent=Decimal("50"))
        )

    r, e, p = receipt(), _expense(container), payment()
    # Rows carried over from an earlier system; the sequence table has never seen them.
    store.receipts[r.receipt_id] = replace(r, receipt_code="OPD00041")
    store.expenses[e.expense_id] = replace(e, expense_code="EXP0120")
    store.payments[p.payment_id] = replace(p, voucher_code="PAY0009")
    store.sequences.clear()

    assert receipt().receipt_code == "OPD00042"
    assert _expense(container).expense_code == "EXP0121"
    assert payment().voucher_code == "PAY0010"
