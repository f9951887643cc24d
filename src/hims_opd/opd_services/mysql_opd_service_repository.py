from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.money import to_money
from ..core.enums import ConflictCode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_conflicts, update_assignments
from .model import NewOpdService, OpdService, OpdServiceUpdate
from .repository import OpdServiceRepository

_COLUMNS = "service_id, service_code, service_name, service_head, service_rate, required_consultant, price_editable, is_active"

_UPDATABLE = {
    "service_name": "service_name",
    "service_head": "service_head",
    "service_rate": "service_rate",
    "required_consultant": "required_consultant",
    "price_editable": "price_editable",
    "is_active": "is_active",
}


def row_to_service(r: dict[str, Any]) -> OpdService:
    return OpdService(
        service_id=int(r["service_id"]),
        service_code=r["service_code"],
        service_name=r["service_name"],
        service_head=r["service_head"],
        service_rate=to_money(r.get("service_rate")),
        required_consultant=bool(r.get("required_consultant")),
        price_editable=bool(r.get("price_editable")),
        is_active=bool(r.get("is_active")),
    )


class MySQLOpdServiceRepository(OpdServiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, service_id: int) -> Optional[OpdService]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM opd_services WHERE service_id=%s", (int(service_id),))
            r = fetchone(cur)
            return row_to_service(r) if r else None

    def list_active(self) -> Sequence[OpdService]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM opd_services WHERE is_active=1 ORDER BY service_head, service_name")
            return [row_to_service(r) for r in fetchall(cur)]

    def list_by_head(self, service_head: str) -> Sequence[OpdService]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM opd_services WHERE service_head=%s AND is_active=1 ORDER BY service_name",
                (service_head,),
            )
            return [row_to_service(r) for r in fetchall(cur)]

    def heads(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT service_head FROM opd_services WHERE is_active=1 ORDER BY service_head")
            return [r["service_head"] for r in fetchall(cur)]

    def create(self, service: NewOpdService) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with integrity_conflicts(
                {"uq_opd_services_code": (ConflictCode.DUPLICATE_ENTRY, "Service ID already exists")}
            ):
                cur.execute(
                    """
                    INSERT INTO opd_services(
                        service_code, service_name, service_head, service_rate,
                        required_consultant, price_editable, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        service.service_code,
                        service.service_name,
                        service.service_head,
                        service.service_rate,
                        1 if service.required_consultant else 0,
                        1 if service.price_editable else 0,
                    ),
                )
            return int(cur.lastrowid)

    def update(self, service_id: int, changes: OpdServiceUpdate) -> bool:
        assignments, params = update_assignments(changes, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE opd_services SET {assignments} WHERE service_id=%s",
                tuple(params + [int(service_id)]),
            )
            return cur.rowcount > 0

    def deactivate(self, service_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE opd_services SET is_active=0 WHERE service_id=%s AND is_active=1", (int(service_id),))
            return cur.rowcount > 0
