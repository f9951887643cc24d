from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.codes import PAYMENT_CODE
from ..common.money import to_money
from ..core.enums import ConflictCode, ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    db_transaction,
    fetchall,
    fetchone,
    integrity_conflicts,
    normalize_mysql_time,
    update_assignments,
)
from ..database.sequences import next_code
from ..shifts.mysql_shift_repository import ensure_shift_open
from .model import ConsultantPayment, DoctorPaymentSummary, PaymentUpdate
from .repository import PaymentRepository

_COLUMNS = """
    payment_id, voucher_code, payment_date, payment_time, doctor_name, department, total,
    share_percent, share_amount, patient_mr_number, patient_name, patient_service, receipt_id,
    shift_closed, shift_id, shift_type, shift_date
"""

_UPDATABLE = {
    "doctor_name": "doctor_name",
    "department": "department",
    "total": "total",
    "share_percent": "share_percent",
    "share_amount": "share_amount",
    "patient_mr_number": "patient_mr_number",
    "patient_name": "patient_name",
    "patient_service": "patient_service",
}


def row_to_payment(r: dict[str, Any]) -> ConsultantPayment:
    return ConsultantPayment(
        payment_id=int(r["payment_id"]),
        voucher_code=r["voucher_code"],
        payment_date=r["payment_date"],
        payment_time=normalize_mysql_time(r["payment_time"]),
        doctor_name=r["doctor_name"],
        department=r.get("department"),
        total=to_money(r.get("total")),
        share_percent=Decimal(str(r.get("share_percent") or 0)),
        share_amount=to_money(r.get("share_amount")),
        patient_mr_number=r.get("patient_mr_number"),
        patient_name=r.get("patient_name"),
        patient_service=r.get("patient_service"),
        receipt_id=int(r["receipt_id"]) if r.get("receipt_id") is not None else None,
        shift_closed=bool(r.get("shift_closed")),
        shift_id=int(r["shift_id"]),
        shift_type=ShiftType(r["shift_type"]),
        shift_date=r["shift_date"],
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payment_id: int) -> Optional[ConsultantPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM consultant_payments WHERE payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return row_to_payment(r) if r else None

    def list(
        self,
        *,
        payment_date: Optional[date] = None,
        doctor_name: Optional[str] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_closed: Optional[bool] = None,
    ) -> Sequence[ConsultantPayment]:
        clauses = ["1=1"]
        params: list[object] = []

        if payment_date is not None:
            clauses.append("payment_date=%s")
            params.append(payment_date)
        if doctor_name:
            clauses.append("doctor_name=%s")
            params.append(doctor_name)
        if shift_id is not None:
            clauses.append("shift_id=%s")
            params.append(int(shift_id))
        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)
        if shift_closed is not None:
            clauses.append("shift_closed=%s")
            params.append(1 if shift_closed else 0)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM consultant_payments
                WHERE {where}
                ORDER BY payment_date DESC, payment_time DESC, payment_id DESC
                """,
                tuple(params),
            )
            return [row_to_payment(r) for r in fetchall(cur)]

    def create(self, payment: ConsultantPayment) -> ConsultantPayment:
        with db_transaction(self._conn_factory) as (_, cur):
            ensure_shift_open(cur, payment.shift_id)
            code = next_code(cur, PAYMENT_CODE, table="consultant_payments", column="voucher_code")
            with integrity_conflicts(
                {"uq_consultant_payments_code": (ConflictCode.DUPLICATE_ENTRY, "Payment ID already exists")}
            ):
                cur.execute(
                    """
                    INSERT INTO consultant_payments(
                        voucher_code, payment_date, payment_time, doctor_name, department, total,
                        share_percent, share_amount, patient_mr_number, patient_name, patient_service,
                        receipt_id, shift_closed, shift_id, shift_type, shift_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0,%s,%s,%s)
                    """,
                    (
                        code,
                        payment.payment_date,
                        payment.payment_time,
                        payment.doctor_name,
                        payment.department,
                        payment.total,
                        payment.share_percent,
                        payment.share_amount,
                        payment.patient_mr_number,
                        payment.patient_name,
                        payment.patient_service,
                        payment.receipt_id,
                        payment.shift_id,
                        payment.shift_type.value,
                        payment.shift_date,
                    ),
                )
            payment_id = int(cur.lastrowid)

        return replace(payment, payment_id=payment_id, voucher_code=code, shift_closed=False)

    def update(self, payment_id: int, changes: PaymentUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE consultant_payments SET {assignments} WHERE payment_id=%s",
                tuple(params + [int(payment_id)]),
            )
            return cur.rowcount > 0

    def delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM consultant_payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0

    def doctor_summary(self, *, start: date, end: date) -> Sequence[DoctorPaymentSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT doctor_name,
                       COUNT(*) AS payment_count,
                       COALESCE(SUM(total), 0) AS total_services,
                       COALESCE(SUM(share_amount), 0) AS total_paid
                FROM consultant_payments
                WHERE payment_date BETWEEN %s AND %s
                GROUP BY doctor_name
                ORDER BY total_paid DESC
                """,
                (start, end),
            )
            return [
                DoctorPaymentSummary(
                    doctor_name=r["doctor_name"],
                    payment_count=int(r["payment_count"]),
                    total_services=to_money(r["total_services"]),
                    total_paid=to_money(r["total_paid"]),
                )
                for r in fetchall(cur)
            ]
