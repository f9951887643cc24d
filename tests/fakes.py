"""In-memory repositories that honour the same storage constraints as the MySQL schema."""

from __future__ import annotations

import copy
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Iterable, Optional

from hims_opd.cash.model import CashSummaryCorrection, ShiftCashSummary
from hims_opd.common.codes import EXPENSE_CODE, PAYMENT_CODE, RECEIPT_CODE, CodeFormat, claimed_mr_sequence, mr_code_format
from hims_opd.common.money import ZERO, money_sum, to_money
from hims_opd.container import wire_container
from hims_opd.core.constants import SHIFT_ORDER
from hims_opd.core.enums import ConflictCode, ShiftType
from hims_opd.core.exceptions import ConflictError, NotFoundError
from hims_opd.doctors.model import Doctor, DoctorUpdate, NewDoctor
from hims_opd.expenses.model import Expense, ExpenseShiftTotal, ExpenseUpdate
from hims_opd.opd_services.model import NewOpdService, OpdService, OpdServiceUpdate
from hims_opd.patients.model import NewPatient, Patient, PatientUpdate
from hims_opd.payments.model import ConsultantPayment, DoctorPaymentSummary, PaymentUpdate
from hims_opd.receipts.model import OpdReceipt, ReceiptShiftSummary, ReceiptUpdate
from hims_opd.reports.model import ExpenseShiftTypeTotals, OpdShiftTypeTotals, PeriodExpense, PeriodTotals
from hims_opd.shifts.model import CascadeResult, ExpenseAggregate, ReceiptAggregate, Shift


def _apply(record, changes):
    updates = {f.name: getattr(changes, f.name) for f in fields(changes) if getattr(changes, f.name) is not None}
    return replace(record, **updates)


class Store:
    """Shared tables; ``lock`` plays the part of InnoDB row locks."""

    def __init__(self):
        self.lock = threading.RLock()
        self.shifts: dict[int, Shift] = {}
        self.receipts: dict[int, OpdReceipt] = {}
        self.expenses: dict[int, Expense] = {}
        self.payments: dict[int, ConsultantPayment] = {}
        self.cash: dict[int, ShiftCashSummary] = {}
        self.doctors: dict[int, Doctor] = {}
        self.services: dict[int, OpdService] = {}
        self.patients: dict[int, Patient] = {}
        self.sequences: dict[str, int] = {}
        self._ids: dict[str, int] = defaultdict(int)

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    def _seed(self, fmt: CodeFormat, existing: Iterable[str]) -> None:
        # First use of a prefix starts after the highest numeric code already stored.
        if fmt.sequence_name in self.sequences:
            return
        numbers = [
            int(code[len(fmt.prefix):])
            for code in existing
            if code and code.startswith(fmt.prefix) and code[len(fmt.prefix):].isdigit()
        ]
        self.sequences[fmt.sequence_name] = max(numbers, default=0)

    def next_code(self, fmt: CodeFormat, existing: Iterable[str] = ()) -> str:
        self._seed(fmt, existing)
        self.sequences[fmt.sequence_name] += 1
        return fmt.format(self.sequences[fmt.sequence_name])

    def claim_code(self, fmt: CodeFormat, seq: int, existing: Iterable[str] = ()) -> None:
        self._seed(fmt, existing)
        self.sequences[fmt.sequence_name] = max(self.sequences[fmt.sequence_name], int(seq))

    def ensure_shift_open(self, shift_id: int) -> None:
        shift = self.shifts.get(int(shift_id))
        if shift is None:
            raise NotFoundError("Shift not found")
        if shift.is_closed:
            raise ConflictError("Shift is already closed", code=ConflictCode.SHIFT_CLOSED.value)

    def snapshot(self) -> dict:
        return {
            "shifts": dict(self.shifts),
            "receipts": dict(self.receipts),
            "payments": dict(self.payments),
            "cash": dict(self.cash),
            "sequences": dict(self.sequences),
            "_ids": copy.copy(self._ids),
        }

    def restore(self, snap: dict) -> None:
        for name, value in snap.items():
            setattr(self, name, value)


class InMemoryClosingUnit:
    def __init__(self, store: Store):
        self._s = store

    def lock_shift(self, shift_id: int) -> Optional[Shift]:
        return self._s.shifts.get(int(shift_id))

    def aggregate_receipts(self, shift_id: int) -> ReceiptAggregate:
        rows = [r for r in self._s.receipts.values() if r.shift_id == shift_id and not r.is_cancelled]
        codes = sorted(r.receipt_code for r in rows)
        return ReceiptAggregate(
            count=len(rows),
            receipt_from=codes[0] if codes else None,
            receipt_to=codes[-1] if codes else None,
            total_amount=money_sum(r.total_amount for r in rows),
            total_discount=money_sum(r.discount_amount for r in rows),
            total_paid=money_sum(r.paid for r in rows),
            total_balance=money_sum(r.balance for r in rows),
            discount_qty=sum(1 for r in rows if r.discount_amount > 0),
        )

    def aggregate_expenses(self, shift_id: int) -> ExpenseAggregate:
        rows = [e for e in self._s.expenses.values() if e.shift_id == shift_id]
        codes = sorted(e.expense_code for e in rows)
        return ExpenseAggregate(
            count=len(rows),
            expense_from=codes[0] if codes else None,
            expense_to=codes[-1] if codes else None,
            total_expenses=money_sum(e.expense_amount for e in rows),
        )

    def mark_closed(self, shift_id: int, *, closed_by: str, closed_at: datetime) -> bool:
        shift = self._s.shifts[shift_id]
        if shift.is_closed:
            return False
        self._s.shifts[shift_id] = replace(shift, is_closed=True, closed_by=closed_by, closed_at=closed_at)
        return True

    def cascade_closed(self, shift_id: int) -> CascadeResult:
        receipts = payments = 0
        for rid, r in list(self._s.receipts.items()):
            if r.shift_id == shift_id:
                self._s.receipts[rid] = replace(r, shift_closed=True)
                receipts += 1
        for pid, p in list(self._s.payments.items()):
            if p.shift_id == shift_id:
                self._s.payments[pid] = replace(p, shift_closed=True)
                payments += 1
        return CascadeResult(receipts_closed=receipts, payments_closed=payments)

    def insert_cash_summary(self, summary: ShiftCashSummary) -> int:
        if any(c.shift_id == summary.shift_id for c in self._s.cash.values()):
            raise ConflictError("Shift already closed", code=ConflictCode.ALREADY_CLOSED.value)
        cash_id = self._s.next_id("cash")
        self._s.cash[cash_id] = replace(summary, cash_id=cash_id)
        return cash_id


class InMemoryShifts:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with self._s.lock:
            return self._s.shifts.get(int(shift_id))

    def get_open(self) -> Optional[Shift]:
        with self._s.lock:
            open_shifts = [s for s in self._s.shifts.values() if not s.is_closed]
            return max(open_shifts, key=lambda s: s.shift_id) if open_shifts else None

    def get_for_date_and_type(self, *, shift_date: date, shift_type: ShiftType) -> Optional[Shift]:
        with self._s.lock:
            for s in self._s.shifts.values():
                if s.shift_date == shift_date and s.shift_type == shift_type:
                    return s
            return None

    def count_for_date(self, shift_date: date) -> int:
        with self._s.lock:
            return sum(1 for s in self._s.shifts.values() if s.shift_date == shift_date)

    def list(self, *, shift_date: Optional[date] = None, is_closed: Optional[bool] = None):
        with self._s.lock:
            rows = [
                s
                for s in self._s.shifts.values()
                if (shift_date is None or s.shift_date == shift_date) and (is_closed is None or s.is_closed == is_closed)
            ]
            return sorted(rows, key=lambda s: (s.shift_date, s.shift_id), reverse=True)

    def create(self, *, shift_date: date, shift_type: ShiftType, opened_by: str, opened_at: datetime) -> int:
        with self._s.lock:
            if any(not s.is_closed for s in self._s.shifts.values()):
                raise ConflictError(
                    "Cannot open new shift. Please close the current shift first.",
                    code=ConflictCode.OPEN_SHIFT_EXISTS.value,
                )
            if any(s.shift_date == shift_date and s.shift_type == shift_type for s in self._s.shifts.values()):
                raise ConflictError(
                    f"{shift_type.value} shift already exists for {shift_date.isoformat()}",
                    code=ConflictCode.DUPLICATE_SHIFT.value,
                )
            shift_id = self._s.next_id("shifts")
            self._s.shifts[shift_id] = Shift(
                shift_id=shift_id,
                shift_date=shift_date,
                shift_type=shift_type,
                opened_by=opened_by,
                opened_at=opened_at,
            )
            return shift_id

    @contextmanager
    def closing(self):
        with self._s.lock:
            snap = self._s.snapshot()
            try:
                yield InMemoryClosingUnit(self._s)
            except Exception:
                self._s.restore(snap)
                raise


class InMemoryCash:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, cash_id: int) -> Optional[ShiftCashSummary]:
        return self._s.cash.get(int(cash_id))

    def get_for_shift(self, shift_id: int) -> Optional[ShiftCashSummary]:
        for c in self._s.cash.values():
            if c.shift_id == int(shift_id):
                return c
        return None

    def list(self, *, shift_date: Optional[date] = None, shift_type: Optional[ShiftType] = None):
        return [
            c
            for c in self._s.cash.values()
            if (shift_date is None or c.shift_date == shift_date) and (shift_type is None or c.shift_type == shift_type)
        ]

    def apply_correction(
        self,
        *,
        cash_id: int,
        correction: CashSummaryCorrection,
        corrected_by: str,
        corrected_at: datetime,
        note: Optional[str],
    ) -> bool:
        current = self._s.cash.get(int(cash_id))
        if current is None:
            return False
        self._s.cash[int(cash_id)] = replace(
            _apply(current, correction),
            corrected_by=corrected_by,
            corrected_at=corrected_at,
            correction_note=note,
        )
        return True


class InMemoryReceipts:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, receipt_id: int) -> Optional[OpdReceipt]:
        return self._s.receipts.get(int(receipt_id))

    def list(self, *, receipt_date=None, shift_id=None, shift_date=None, mr_number=None, is_cancelled=None):
        rows = [
            r
            for r in self._s.receipts.values()
            if (receipt_date is None or r.receipt_date == receipt_date)
            and (shift_id is None or r.shift_id == shift_id)
            and (shift_date is None or r.shift_date == shift_date)
            and (not mr_number or r.patient_mr_number == mr_number)
            and (is_cancelled is None or r.is_cancelled == is_cancelled)
        ]
        return sorted(rows, key=lambda r: r.receipt_id, reverse=True)

    def list_for_patient(self, mr_number: str, *, limit: Optional[int] = None):
        rows = self.list(mr_number=mr_number)
        return rows[:limit] if limit is not None else rows

    def list_for_shift(self, shift_id: int):
        return sorted((r for r in self._s.receipts.values() if r.shift_id == shift_id), key=lambda r: r.receipt_id)

    def create(self, receipt: OpdReceipt) -> OpdReceipt:
        with self._s.lock:
            self._s.ensure_shift_open(receipt.shift_id)
            stored = replace(
                receipt,
                receipt_id=self._s.next_id("receipts"),
                receipt_code=self._s.next_code(RECEIPT_CODE, (r.receipt_code for r in self._s.receipts.values())),
                shift_closed=False,
            )
            self._s.receipts[stored.receipt_id] = stored
            return stored

    def update(self, receipt_id: int, changes: ReceiptUpdate) -> bool:
        self._s.receipts[receipt_id] = _apply(self._s.receipts[receipt_id], changes)
        return True

    def cancel(self, receipt_id: int, *, details: Optional[str]) -> bool:
        r = self._s.receipts[receipt_id]
        if r.is_cancelled:
            return False
        self._s.receipts[receipt_id] = replace(r, is_cancelled=True, cancel_details=details)
        return True

    def refund(self, receipt_id: int, *, reason, amount) -> bool:
        r = self._s.receipts[receipt_id]
        if r.is_refunded:
            return False
        self._s.receipts[receipt_id] = replace(r, is_refunded=True, refund_reason=reason, refund_amount=amount)
        return True

    def mark_paid_to_doctor(self, receipt_id: int) -> bool:
        self._s.receipts[receipt_id] = replace(self._s.receipts[receipt_id], paid_to_doctor=True)
        return True

    def shift_summary(self, shift_id: int) -> ReceiptShiftSummary:
        rows = self.list_for_shift(shift_id)
        active = [r for r in rows if not r.is_cancelled]
        return ReceiptShiftSummary(
            total_patients=len(active),
            total_amount=money_sum(r.total_amount for r in active),
            total_discount=money_sum(r.discount_amount for r in active),
            total_paid=money_sum(r.paid for r in active),
            total_balance=money_sum(r.balance for r in active),
            total_dr_share=money_sum(r.dr_share_amount for r in active),
            total_hospital_share=money_sum(r.hospital_share for r in active),
            cancelled_count=len(rows) - len(active),
            total_refund=money_sum(r.refund_amount for r in rows if r.is_refunded),
        )


class InMemoryExpenses:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        return self._s.expenses.get(int(expense_id))

    def list(self, *, expense_date=None, shift_id=None, shift_date=None, shift_type=None):
        rows = [
            e
            for e in self._s.expenses.values()
            if (expense_date is None or e.expense_date == expense_date)
            and (shift_id is None or e.shift_id == shift_id)
            and (shift_date is None or e.shift_date == shift_date)
            and (shift_type is None or e.expense_shift == shift_type)
        ]
        return sorted(rows, key=lambda e: e.expense_id, reverse=True)

    def list_for_shift(self, shift_id: int):
        return sorted((e for e in self._s.expenses.values() if e.shift_id == shift_id), key=lambda e: e.expense_id)

    def create(self, expense: Expense) -> Expense:
        with self._s.lock:
            self._s.ensure_shift_open(expense.shift_id)
            stored = replace(
                expense,
                expense_id=self._s.next_id("expenses"),
                expense_code=self._s.next_code(EXPENSE_CODE, (e.expense_code for e in self._s.expenses.values())),
            )
            self._s.expenses[stored.expense_id] = stored
            return stored

    def update(self, expense_id: int, changes: ExpenseUpdate) -> bool:
        self._s.expenses[expense_id] = _apply(self._s.expenses[expense_id], changes)
        return True

    def delete(self, expense_id: int) -> bool:
        return self._s.expenses.pop(int(expense_id), None) is not None

    def totals_by_shift(self, expense_date: date):
        out = []
        for shift_type in SHIFT_ORDER:
            rows = [e for e in self._s.expenses.values() if e.expense_date == expense_date and e.expense_shift == shift_type]
            if rows:
                out.append(
                    ExpenseShiftTotal(
                        expense_shift=shift_type,
                        count=len(rows),
                        total_amount=money_sum(e.expense_amount for e in rows),
                    )
                )
        return out


class InMemoryPayments:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, payment_id: int) -> Optional[ConsultantPayment]:
        return self._s.payments.get(int(payment_id))

    def list(self, *, payment_date=None, doctor_name=None, shift_id=None, shift_date=None, shift_closed=None):
        rows = [
            p
            for p in self._s.payments.values()
            if (payment_date is None or p.payment_date == payment_date)
            and (doctor_name is None or p.doctor_name == doctor_name)
            and (shift_id is None or p.shift_id == shift_id)
            and (shift_date is None or p.shift_date == shift_date)
            and (shift_closed is None or p.shift_closed == shift_closed)
        ]
        return sorted(rows, key=lambda p: p.payment_id, reverse=True)

    def create(self, payment: ConsultantPayment) -> ConsultantPayment:
        with self._s.lock:
            self._s.ensure_shift_open(payment.shift_id)
            stored = replace(
                payment,
                payment_id=self._s.next_id("payments"),
                voucher_code=self._s.next_code(PAYMENT_CODE, (p.voucher_code for p in self._s.payments.values())),
            )
            self._s.payments[stored.payment_id] = stored
            return stored

    def update(self, payment_id: int, changes: PaymentUpdate) -> bool:
        self._s.payments[payment_id] = _apply(self._s.payments[payment_id], changes)
        return True

    def delete(self, payment_id: int) -> bool:
        return self._s.payments.pop(int(payment_id), None) is not None

    def doctor_summary(self, *, start: date, end: date):
        grouped: dict[str, list] = defaultdict(list)
        for p in self._s.payments.values():
            if start <= p.payment_date <= end:
                grouped[p.doctor_name].append(p)
        rows = [
            DoctorPaymentSummary(
                doctor_name=name,
                payment_count=len(ps),
                total_services=money_sum(p.total for p in ps),
                total_paid=money_sum(p.share_amount for p in ps),
            )
            for name, ps in grouped.items()
        ]
        return sorted(rows, key=lambda r: r.total_paid, reverse=True)


class InMemoryDoctors:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        return self._s.doctors.get(int(doctor_id))

    def get_by_name(self, doctor_name: str) -> Optional[Doctor]:
        for d in sorted(self._s.doctors.values(), key=lambda d: d.doctor_id):
            if d.doctor_name == doctor_name and d.is_active:
                return d
        return None

    def list_active(self):
        return sorted((d for d in self._s.doctors.values() if d.is_active), key=lambda d: d.doctor_name)

    def list_by_department(self, department: str):
        return [d for d in self.list_active() if d.department == department]

    def departments(self):
        return sorted({d.department for d in self.list_active() if d.department})

    def create(self, doctor: NewDoctor) -> int:
        if any(d.doctor_code == doctor.doctor_code for d in self._s.doctors.values()):
            raise ConflictError("Doctor ID already exists", code=ConflictCode.DUPLICATE_ENTRY.value)
        doctor_id = self._s.next_id("doctors")
        self._s.doctors[doctor_id] = Doctor(doctor_id=doctor_id, **{f.name: getattr(doctor, f.name) for f in fields(doctor)})
        return doctor_id

    def update(self, doctor_id: int, changes: DoctorUpdate) -> bool:
        self._s.doctors[doctor_id] = _apply(self._s.doctors[doctor_id], changes)
        return True

    def deactivate(self, doctor_id: int) -> bool:
        self._s.doctors[doctor_id] = replace(self._s.doctors[doctor_id], is_active=False)
        return True


class InMemoryOpdServices:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, service_id: int) -> Optional[OpdService]:
        return self._s.services.get(int(service_id))

    def list_active(self):
        return sorted(
            (s for s in self._s.services.values() if s.is_active),
            key=lambda s: (s.service_head, s.service_name),
        )

    def list_by_head(self, service_head: str):
        return [s for s in self.list_active() if s.service_head == service_head]

    def heads(self):
        return sorted({s.service_head for s in self.list_active()})

    def create(self, service: NewOpdService) -> int:
        if any(s.service_code == service.service_code for s in self._s.services.values()):
            raise ConflictError("Service ID already exists", code=ConflictCode.DUPLICATE_ENTRY.value)
        service_id = self._s.next_id("services")
        self._s.services[service_id] = OpdService(
            service_id=service_id, **{f.name: getattr(service, f.name) for f in fields(service)}
        )
        return service_id

    def update(self, service_id: int, changes: OpdServiceUpdate) -> bool:
        self._s.services[service_id] = _apply(self._s.services[service_id], changes)
        return True

    def deactivate(self, service_id: int) -> bool:
        self._s.services[service_id] = replace(self._s.services[service_id], is_active=False)
        return True


class InMemoryPatients:
    def __init__(self, store: Store):
        self._s = store

    def get_by_mr(self, mr_number: str) -> Optional[Patient]:
        for p in self._s.patients.values():
            if p.mr_number == mr_number:
                return p
        return None

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        return self._s.patients.get(int(patient_id))

    def search(self, term: Optional[str], *, limit: int):
        rows = [p for p in self._s.patients.values() if p.is_active]
        if term:
            t = term.lower()
            rows = [
                p
                for p in rows
                if any(t in (v or "").lower() for v in (p.mr_number, p.first_name, p.last_name, p.phone, p.cnic))
            ]
        return sorted(rows, key=lambda p: p.patient_id, reverse=True)[:limit]

    def create(self, patient: NewPatient, *, year: int) -> Patient:
        with self._s.lock:
            stored_mrs = [p.mr_number for p in self._s.patients.values()]
            claimed = claimed_mr_sequence(patient.mr_number) if patient.mr_number else None
            mr_number = patient.mr_number or self._s.next_code(mr_code_format(year), stored_mrs)
            if self.get_by_mr(mr_number) is not None:
                raise ConflictError("MR Number already exists", code=ConflictCode.DUPLICATE_ENTRY.value)
            if patient.cnic and any(p.cnic == patient.cnic for p in self._s.patients.values()):
                raise ConflictError("Duplicate entry (CNIC or MR)", code=ConflictCode.DUPLICATE_ENTRY.value)
            if claimed is not None:
                fmt, seq = claimed
                self._s.claim_code(fmt, seq, stored_mrs)
            patient_id = self._s.next_id("patients")
            values = {f.name: getattr(patient, f.name) for f in fields(patient)}
            values["mr_number"] = mr_number
            stored = Patient(patient_id=patient_id, **values)
            self._s.patients[patient_id] = stored
            return stored

    def update(self, mr_number: str, changes: PatientUpdate) -> bool:
        current = self.get_by_mr(mr_number)
        self._s.patients[current.patient_id] = _apply(current, changes)
        return True


class InMemoryReports:
    def __init__(self, store: Store):
        self._s = store

    def opd_by_shift_type(self, shift_date: date):
        out = []
        for shift_type in SHIFT_ORDER:
            rows = [r for r in self._s.receipts.values() if r.shift_date == shift_date and r.shift_type == shift_type]
            if not rows:
                continue
            active = [r for r in rows if not r.is_cancelled]
            out.append(
                OpdShiftTypeTotals(
                    shift_type=shift_type,
                    patient_count=len(active),
                    total_amount=money_sum(r.total_amount for r in active),
                    total_discount=money_sum(r.discount_amount for r in active),
                    total_paid=money_sum(r.paid for r in active),
                    total_balance=money_sum(r.balance for r in active),
                    total_dr_share=money_sum(r.dr_share_amount for r in active),
                    total_hospital_share=money_sum(r.hospital_share for r in active),
                    cancelled_count=len(rows) - len(active),
                    total_refund=money_sum(r.refund_amount for r in rows if r.is_refunded),
                )
            )
        return out

    def expenses_by_shift_type(self, shift_date: date):
        out = []
        for shift_type in SHIFT_ORDER:
            rows = [e for e in self._s.expenses.values() if e.shift_date == shift_date and e.expense_shift == shift_type]
            if rows:
                out.append(
                    ExpenseShiftTypeTotals(
                        shift_type=shift_type,
                        expense_count=len(rows),
                        total_expense=money_sum(e.expense_amount for e in rows),
                    )
                )
        return out

    def _opd_grouped(self, key, predicate):
        grouped: dict = defaultdict(list)
        for r in self._s.receipts.values():
            if not r.is_cancelled and predicate(r.shift_date):
                grouped[key(r.shift_date)].append(r)
        return [
            PeriodTotals(
                period=period,
                patient_count=len(rows),
                total_amount=money_sum(r.total_amount for r in rows),
                total_discount=money_sum(r.discount_amount for r in rows),
                total_paid=money_sum(r.paid for r in rows),
                total_balance=money_sum(r.balance for r in rows),
            )
            for period, rows in sorted(grouped.items())
        ]

    def _expenses_grouped(self, key, predicate):
        grouped: dict = defaultdict(lambda: ZERO)
        for e in self._s.expenses.values():
            if predicate(e.shift_date):
                grouped[key(e.shift_date)] += e.expense_amount
        return [PeriodExpense(period=p, total_expense=to_money(v)) for p, v in sorted(grouped.items())]

    def opd_by_day(self, *, start: date, end: date):
        return self._opd_grouped(lambda d: d, lambda d: start <= d <= end)

    def expenses_by_day(self, *, start: date, end: date):
        return self._expenses_grouped(lambda d: d, lambda d: start <= d <= end)

    def opd_by_month(self, year: int):
        return self._opd_grouped(lambda d: d.month, lambda d: d.year == year)

    def expenses_by_month(self, year: int):
        return self._expenses_grouped(lambda d: d.month, lambda d: d.year == year)

    def receipts_between(self, *, start: date, end: date):
        return sorted(
            (r for r in self._s.receipts.values() if not r.is_cancelled and start <= r.receipt_date <= end),
            key=lambda r: r.receipt_id,
        )


def in_memory_container(store: Store, *, clock):
    return wire_container(
        conn=None,
        shifts_repo=InMemoryShifts(store),
        cash_repo=InMemoryCash(store),
        receipts_repo=InMemoryReceipts(store),
        expenses_repo=InMemoryExpenses(store),
        payments_repo=InMemoryPayments(store),
        doctors_repo=InMemoryDoctors(store),
        opd_services_repo=InMemoryOpdServices(store),
        patients_repo=InMemoryPatients(store),
        reports_repo=InMemoryReports(store),
        clock=clock,
    )
