"""Storage-level atomic sequences for ledger codes.

One ``code_sequences`` row per prefix. The row is seeded lazily from the
highest numeric code already stored in the owning table, then bumped
with ``LAST_INSERT_ID(expr)``, which is both atomic and connection-local.
Call ``next_code`` with the cursor of the transaction that inserts the row,
so a rolled-back insert also gives its number back.
"""

from __future__ import annotations

import re

from ..common.codes import CodeFormat
from .mysql_base import fetchone


def _seed_from_table(cur, fmt: CodeFormat, *, table: str, column: str) -> None:
    cur.execute("SELECT 1 AS present FROM code_sequences WHERE seq_name=%s", (fmt.sequence_name,))
    if fetchone(cur):
        return

    # Free-form codes sharing the prefix (e.g. a hand-typed MR) are not part of the series.
    cur.execute(
        f"""
        SELECT MAX(CAST(SUBSTRING({column}, %s) AS UNSIGNED)) AS last_seq
        FROM {table}
        WHERE {column} REGEXP %s
        """,
        (len(fmt.prefix) + 1, "^" + re.escape(fmt.prefix) + "[0-9]+$"),
    )
    r = fetchone(cur)
    seed = int(r["last_seq"] or 0) if r else 0

    # Concurrent first uses both compute the same seed; only one row survives.
    cur.execute(
        "INSERT IGNORE INTO code_sequences(seq_name, last_value) VALUES(%s,%s)",
        (fmt.sequence_name, seed),
    )


def next_code(cur, fmt: CodeFormat, *, table: str, column: str) -> str:
    _seed_from_table(cur, fmt, table=table, column=column)
    cur.execute(
        "UPDATE code_sequences SET last_value=LAST_INSERT_ID(last_value + 1) WHERE seq_name=%s",
        (fmt.sequence_name,),
    )
    cur.execute("SELECT LAST_INSERT_ID() AS seq")
    r = fetchone(cur)
    return fmt.format(int(r["seq"]))


def claim_code(cur, fmt: CodeFormat, seq: int, *, table: str, column: str) -> None:
    """Move the sequence past a code the caller supplied, so it is never generated again."""
    _seed_from_table(cur, fmt, table=table, column=column)
    cur.execute(
        "UPDATE code_sequences SET last_value=GREATEST(last_value, %s) WHERE seq_name=%s",
        (int(seq), fmt.sequence_name),
    )
