from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.codes import claimed_mr_sequence, mr_code_format
from ..core.enums import ConflictCode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, integrity_conflicts, update_assignments
from ..database.sequences import claim_code, next_code
from .model import NewPatient, Patient, PatientUpdate
from .repository import PatientRepository

_COLUMNS = """
    patient_id, mr_number, first_name, last_name, guardian_name, guardian_relation, cnic,
    age, gender, phone, email, address, city, blood_group, profession, is_active
"""

_UPDATABLE = {
    "first_name": "first_name",
    "last_name": "last_name",
    "guardian_name": "guardian_name",
    "guardian_relation": "guardian_relation",
    "cnic": "cnic",
    "age": "age",
    "gender": "gender",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "city": "city",
    "blood_group": "blood_group",
    "profession": "profession",
}

_DUPLICATES = {
    "uq_mr_data_mr_number": (ConflictCode.DUPLICATE_ENTRY, "MR Number already exists"),
    "uq_mr_data_cnic": (ConflictCode.DUPLICATE_ENTRY, "Duplicate entry (CNIC or MR)"),
}


def row_to_patient(r: dict[str, Any]) -> Patient:
    return Patient(
        patient_id=int(r["patient_id"]),
        mr_number=r["mr_number"],
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        guardian_name=r.get("guardian_name"),
        guardian_relation=r.get("guardian_relation"),
        cnic=r.get("cnic"),
        age=int(r["age"]) if r.get("age") is not None else None,
        gender=r.get("gender"),
        phone=r.get("phone"),
        email=r.get("email"),
        address=r.get("address"),
        city=r.get("city"),
        blood_group=r.get("blood_group"),
        profession=r.get("profession"),
        is_active=bool(r.get("is_active")),
    )


class MySQLPatientRepository(PatientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_mr(self, mr_number: str) -> Optional[Patient]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM mr_data WHERE mr_number=%s", (mr_number,))
            r = fetchone(cur)
            return row_to_patient(r) if r else None

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM mr_data WHERE patient_id=%s", (int(patient_id),))
            r = fetchone(cur)
            return row_to_patient(r) if r else None

    def search(self, term: Optional[str], *, limit: int) -> Sequence[Patient]:
        clauses = ["is_active=1"]
        params: list[object] = []

        if term:
            like = f"%{term}%"
            clauses.append(
                "(mr_number LIKE %s OR first_name LIKE %s OR last_name LIKE %s OR phone LIKE %s OR cnic LIKE %s)"
            )
            params.extend([like] * 5)

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM mr_data WHERE {where} ORDER BY patient_id DESC LIMIT %s",
                tuple(params),
            )
            return [row_to_patient(r) for r in fetchall(cur)]

    def create(self, patient: NewPatient, *, year: int) -> Patient:
        with db_transaction(self._conn_factory) as (_, cur):
            if patient.mr_number:
                mr_number = patient.mr_number
                claimed = claimed_mr_sequence(mr_number)
                if claimed is not None:
                    fmt, seq = claimed
                    claim_code(cur, fmt, seq, table="mr_data", column="mr_number")
            else:
                mr_number = next_code(cur, mr_code_format(year), table="mr_data", column="mr_number")
            with integrity_conflicts(_DUPLICATES):
                cur.execute(
                    """
                    INSERT INTO mr_data(
                        mr_number, first_name, last_name, guardian_name, guardian_relation, cnic,
                        age, gender, phone, email, address, city, blood_group, profession, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        mr_number,
                        patient.first_name,
                        patient.last_name,
                        patient.guardian_name,
                        patient.guardian_relation,
                        patient.cnic,
                        patient.age,
                        patient.gender,
                        patient.phone,
                        patient.email,
                        patient.address,
                        patient.city,
                        patient.blood_group,
                        patient.profession,
                    ),
                )
            patient_id = int(cur.lastrowid)

        return Patient(
            patient_id=patient_id,
            mr_number=mr_number,
            first_name=patient.first_name,
            last_name=patient.last_name,
            guardian_name=patient.guardian_name,
            guardian_relation=patient.guardian_relation,
            cnic=patient.cnic,
            age=patient.age,
            gender=patient.gender,
            phone=patient.phone,
            email=patient.email,
            address=patient.address,
            city=patient.city,
            blood_group=patient.blood_group,
            profession=patient.profession,
        )

    def update(self, mr_number: str, changes: PatientUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            with integrity_conflicts(_DUPLICATES):
                cur.execute(
                    f"UPDATE mr_data SET {assignments} WHERE mr_number=%s",
                    tuple(params + [mr_number]),
                )
            return cur.rowcount > 0
