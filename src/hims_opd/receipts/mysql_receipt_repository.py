from __future__ import annotations

import json
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.codes import RECEIPT_CODE
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
from .model import OpdReceipt, ReceiptShiftSummary, ReceiptUpdate, ServiceItem
from .repository import ReceiptRepository

RECEIPT_COLUMNS = """
    receipt_id, receipt_code, patient_mr_number, patient_name, phone_number, patient_age,
    patient_gender, patient_address, receipt_date, receipt_time, emergency_paid, opd_service,
    service_detail, service_details, total_amount, discount_amount, discount_reason, payable,
    paid, balance, dr_share_amount, hospital_share, paid_to_doctor, is_cancelled, cancel_details,
    is_refunded, refund_reason, refund_amount, shift_closed, shift_id, shift_type, shift_date
"""

_UPDATABLE = {
    "patient_name": "patient_name",
    "phone_number": "phone_number",
    "patient_age": "patient_age",
    "patient_gender": "patient_gender",
    "patient_address": "patient_address",
    "emergency_paid": "emergency_paid",
    "opd_service": "opd_service",
    "service_detail": "service_detail",
    "discount_reason": "discount_reason",
}


def _load_items(raw: Any) -> tuple[ServiceItem, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw) if raw.strip() else []
    return tuple(ServiceItem.from_dict(d) for d in raw or [])


def row_to_receipt(r: dict[str, Any]) -> OpdReceipt:
    return OpdReceipt(
        receipt_id=int(r["receipt_id"]),
        receipt_code=r["receipt_code"],
        patient_mr_number=r.get("patient_mr_number"),
        patient_name=r.get("patient_name"),
        phone_number=r.get("phone_number"),
        patient_age=r.get("patient_age"),
        patient_gender=r.get("patient_gender"),
        patient_address=r.get("patient_address"),
        receipt_date=r["receipt_date"],
        receipt_time=normalize_mysql_time(r["receipt_time"]),
        emergency_paid=bool(r.get("emergency_paid")),
        opd_service=r.get("opd_service"),
        service_detail=r.get("service_detail"),
        items=_load_items(r.get("service_details")),
        total_amount=to_money(r.get("total_amount")),
        discount_amount=to_money(r.get("discount_amount")),
        discount_reason=r.get("discount_reason"),
        payable=to_money(r.get("payable")),
        paid=to_money(r.get("paid")),
        balance=to_money(r.get("balance")),
        dr_share_amount=to_money(r.get("dr_share_amount")),
        hospital_share=to_money(r.get("hospital_share")),
        paid_to_doctor=bool(r.get("paid_to_doctor")),
        is_cancelled=bool(r.get("is_cancelled")),
        cancel_details=r.get("cancel_details"),
        is_refunded=bool(r.get("is_refunded")),
        refund_reason=r.get("refund_reason"),
        refund_amount=to_money(r.get("refund_amount")),
        shift_closed=bool(r.get("shift_closed")),
        shift_id=int(r["shift_id"]),
        shift_type=ShiftType(r["shift_type"]),
        shift_date=r["shift_date"],
    )


class MySQLReceiptRepository(ReceiptRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, receipt_id: int) -> Optional[OpdReceipt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {RECEIPT_COLUMNS} FROM opd_patient_data WHERE receipt_id=%s", (int(receipt_id),))
            r = fetchone(cur)
            return row_to_receipt(r) if r else None

    def list(
        self,
        *,
        receipt_date: Optional[date] = None,
        shift_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        mr_number: Optional[str] = None,
        is_cancelled: Optional[bool] = None,
    ) -> Sequence[OpdReceipt]:
        clauses = ["1=1"]
        params: list[object] = []

        if receipt_date is not None:
            clauses.append("receipt_date=%s")
            params.append(receipt_date)
        if shift_id is not None:
            clauses.append("shift_id=%s")
            params.append(int(shift_id))
        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)
        if mr_number:
            clauses.append("patient_mr_number=%s")
            params.append(mr_number)
        if is_cancelled is not None:
            clauses.append("is_cancelled=%s")
            params.append(1 if is_cancelled else 0)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECEIPT_COLUMNS}
                FROM opd_patient_data
                WHERE {where}
                ORDER BY receipt_date DESC, receipt_time DESC, receipt_id DESC
                """,
                tuple(params),
            )
            return [row_to_receipt(r) for r in fetchall(cur)]

    def list_for_patient(self, mr_number: str, *, limit: Optional[int] = None) -> Sequence[OpdReceipt]:
        sql = f"""
            SELECT {RECEIPT_COLUMNS}
            FROM opd_patient_data
            WHERE patient_mr_number=%s
            ORDER BY receipt_date DESC, receipt_time DESC, receipt_id DESC
        """
        params: list[object] = [mr_number]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [row_to_receipt(r) for r in fetchall(cur)]

    def list_for_shift(self, shift_id: int) -> Sequence[OpdReceipt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {RECEIPT_COLUMNS} FROM opd_patient_data WHERE shift_id=%s ORDER BY receipt_time, receipt_id",
                (int(shift_id),),
            )
            return [row_to_receipt(r) for r in fetchall(cur)]

    def create(self, receipt: OpdReceipt) -> OpdReceipt:
        items_json = json.dumps([i.to_dict() for i in receipt.items])

        with db_transaction(self._conn_factory) as (_, cur):
            ensure_shift_open(cur, receipt.shift_id)
            code = next_code(cur, RECEIPT_CODE, table="opd_patient_data", column="receipt_code")
            with integrity_conflicts(
                {"uq_opd_patient_data_code": (ConflictCode.DUPLICATE_ENTRY, "Receipt ID already exists")}
            ):
                cur.execute(
                    """
                    INSERT INTO opd_patient_data(
                        receipt_code, patient_mr_number, patient_name, phone_number, patient_age,
                        patient_gender, patient_address, receipt_date, receipt_time, emergency_paid,
                        opd_service, service_detail, service_details, total_amount, discount_amount,
                        discount_reason, payable, paid, balance, dr_share_amount, hospital_share,
                        paid_to_doctor, is_cancelled, is_refunded, refund_amount, shift_closed,
                        shift_id, shift_type, shift_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0,0,0,0,0,%s,%s,%s)
                    """,
                    (
                        code,
                        receipt.patient_mr_number,
                        receipt.patient_name,
                        receipt.phone_number,
                        receipt.patient_age,
                        receipt.patient_gender,
                        receipt.patient_address,
                        receipt.receipt_date,
                        receipt.receipt_time,
                        1 if receipt.emergency_paid else 0,
                        receipt.opd_service,
                        receipt.service_detail,
                        items_json,
                        receipt.total_amount,
                        receipt.discount_amount,
                        receipt.discount_reason,
                        receipt.payable,
                        receipt.paid,
                        receipt.balance,
                        receipt.dr_share_amount,
                        receipt.hospital_share,
                        receipt.shift_id,
                        receipt.shift_type.value,
                        receipt.shift_date,
                    ),
                )
            receipt_id = int(cur.lastrowid)

        return replace(receipt, receipt_id=receipt_id, receipt_code=code, shift_closed=False)

    def update(self, receipt_id: int, changes: ReceiptUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE opd_patient_data SET {assignments} WHERE receipt_id=%s",
                tuple(params + [int(receipt_id)]),
            )
            return cur.rowcount > 0

    def cancel(self, receipt_id: int, *, details: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE opd_patient_data SET is_cancelled=1, cancel_details=%s WHERE receipt_id=%s AND is_cancelled=0",
                (details, int(receipt_id)),
            )
            return cur.rowcount > 0

    def refund(self, receipt_id: int, *, reason: Optional[str], amount: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE opd_patient_data
                SET is_refunded=1, refund_reason=%s, refund_amount=%s
                WHERE receipt_id=%s AND is_refunded=0
                """,
                (reason, amount, int(receipt_id)),
            )
            return cur.rowcount > 0

    def mark_paid_to_doctor(self, receipt_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE opd_patient_data SET paid_to_doctor=1 WHERE receipt_id=%s", (int(receipt_id),))
            return cur.rowcount > 0

    def shift_summary(self, shift_id: int) -> ReceiptShiftSummary:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN 1 ELSE 0 END), 0) AS total_patients,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN total_amount ELSE 0 END), 0) AS total_amount,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN discount_amount ELSE 0 END), 0) AS total_discount,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN paid ELSE 0 END), 0) AS total_paid,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN balance ELSE 0 END), 0) AS total_balance,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN dr_share_amount ELSE 0 END), 0) AS total_dr_share,
                    COALESCE(SUM(CASE WHEN is_cancelled=0 THEN hospital_share ELSE 0 END), 0) AS total_hospital_share,
                    COALESCE(SUM(CASE WHEN is_cancelled=1 THEN 1 ELSE 0 END), 0) AS cancelled_count,
                    COALESCE(SUM(CASE WHEN is_refunded=1 THEN refund_amount ELSE 0 END), 0) AS total_refund
                FROM opd_patient_data
                WHERE shift_id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur) or {}
            return ReceiptShiftSummary(
                total_patients=int(r.get("total_patients") or 0),
                total_amount=to_money(r.get("total_amount")),
                total_discount=to_money(r.get("total_discount")),
                total_paid=to_money(r.get("total_paid")),
                total_balance=to_money(r.get("total_balance")),
                total_dr_share=to_money(r.get("total_dr_share")),
                total_hospital_share=to_money(r.get("total_hospital_share")),
                cancelled_count=int(r.get("cancelled_count") or 0),
                total_refund=to_money(r.get("total_refund")),
            )
