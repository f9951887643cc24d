from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import fields
from datetime import time, timedelta
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import ConflictCode
from ..core.exceptions import ConflictError, NotFoundError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def db_transaction(conn_factory: DatabaseConnection):
    """Explicit multi-statement unit of work: all statements commit together or none do."""
    conn = conn_factory.connect()
    try:
        conn.start_transaction()
        cur = conn.cursor(dictionary=True)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


@contextmanager
def integrity_conflicts(
    key_messages: Optional[Mapping[str, Tuple[ConflictCode, str]]] = None,
    *,
    default_message: str = "Duplicate entry. This record already exists.",
) -> Iterator[None]:
    """Translate MySQL constraint violations into domain errors.

    ``key_messages`` maps a unique key name (as it appears in the driver's
    message) to the conflict code/message reported for it.
    """

    try:
        yield
    except mysql.connector.IntegrityError as e:
        if e.errno == errorcode.ER_DUP_ENTRY:
            msg = str(e.msg or "")
            for key, (code, message) in (key_messages or {}).items():
                if key in msg:
                    logger.warning("Unique key %s violated: %s", key, msg)
                    raise ConflictError(message, code=code.value) from e
            logger.warning("Duplicate entry: %s", msg)
            raise ConflictError(default_message, code=ConflictCode.DUPLICATE_ENTRY.value) from e
        if e.errno in (errorcode.ER_NO_REFERENCED_ROW, errorcode.ER_NO_REFERENCED_ROW_2):
            raise NotFoundError("Referenced record not found.") from e
        raise


def update_assignments(changes: object, columns: Mapping[str, str]) -> Tuple[str, List[Any]]:
    """Build ``col=%s, ...`` from a typed partial-update dataclass.

    Only fields listed in ``columns`` (field name -> column name) and set to a
    non-None value are written, so request bodies never decide column names.
    """

    parts: list[str] = []
    params: list[Any] = []
    for f in fields(changes):
        value = getattr(changes, f.name)
        if value is None:
            continue
        column = columns.get(f.name)
        if column is None:
            raise ValueError(f"{type(changes).__name__}.{f.name} has no column in the update allow-list")
        parts.append(f"{column}=%s")
        params.append(value.value if isinstance(value, Enum) else value)
    return ", ".join(parts), params


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
