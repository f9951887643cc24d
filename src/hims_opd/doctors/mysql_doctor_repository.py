from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.money import to_money
from ..core.enums import ConflictCode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_conflicts, update_assignments
from .model import Doctor, DoctorUpdate, NewDoctor
from .repository import DoctorRepository

_COLUMNS = """
    doctor_id, doctor_code, doctor_name, specialization, department, qualification,
    phone, email, address, share_percent, consultation_fee, is_active
"""

_UPDATABLE = {
    "doctor_name": "doctor_name",
    "specialization": "specialization",
    "department": "department",
    "qualification": "qualification",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "share_percent": "share_percent",
    "consultation_fee": "consultation_fee",
    "is_active": "is_active",
}


def row_to_doctor(r: dict[str, Any]) -> Doctor:
    return Doctor(
        doctor_id=int(r["doctor_id"]),
        doctor_code=r["doctor_code"],
        doctor_name=r["doctor_name"],
        specialization=r.get("specialization"),
        department=r.get("department"),
        qualification=r.get("qualification"),
        phone=r.get("phone"),
        email=r.get("email"),
        address=r.get("address"),
        share_percent=Decimal(str(r.get("share_percent") or 0)),
        consultation_fee=to_money(r.get("consultation_fee")),
        is_active=bool(r.get("is_active")),
    )


class MySQLDoctorRepository(DoctorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM doctors WHERE doctor_id=%s", (int(doctor_id),))
            r = fetchone(cur)
            return row_to_doctor(r) if r else None

    def get_by_name(self, doctor_name: str) -> Optional[Doctor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM doctors WHERE doctor_name=%s AND is_active=1 ORDER BY doctor_id LIMIT 1",
                (doctor_name,),
            )
            r = fetchone(cur)
            return row_to_doctor(r) if r else None

    def list_active(self) -> Sequence[Doctor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM doctors WHERE is_active=1 ORDER BY doctor_name")
            return [row_to_doctor(r) for r in fetchall(cur)]

    def list_by_department(self, department: str) -> Sequence[Doctor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM doctors WHERE department=%s AND is_active=1 ORDER BY doctor_name",
                (department,),
            )
            return [row_to_doctor(r) for r in fetchall(cur)]

    def departments(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT department
                FROM doctors
                WHERE is_active=1 AND department IS NOT NULL AND department <> ''
                ORDER BY department
                """
            )
            return [r["department"] for r in fetchall(cur)]

    def create(self, doctor: NewDoctor) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with integrity_conflicts({"uq_doctors_code": (ConflictCode.DUPLICATE_ENTRY, "Doctor ID already exists")}):
                cur.execute(
                    """
                    INSERT INTO doctors(
                        doctor_code, doctor_name, specialization, department, qualification,
                        phone, email, address, share_percent, consultation_fee, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        doctor.doctor_code,
                        doctor.doctor_name,
                        doctor.specialization,
                        doctor.department,
                        doctor.qualification,
                        doctor.phone,
                        doctor.email,
                        doctor.address,
                        doctor.share_percent,
                        doctor.consultation_fee,
                    ),
                )
            return int(cur.lastrowid)

    def update(self, doctor_id: int, changes: DoctorUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE doctors SET {assignments} WHERE doctor_id=%s",
                tuple(params + [int(doctor_id)]),
            )
            return cur.rowcount > 0

    def deactivate(self, doctor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE doctors SET is_active=0 WHERE doctor_id=%s AND is_active=1", (int(doctor_id),))
            return cur.rowcount > 0
