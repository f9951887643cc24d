"""Human-readable sequential codes (OPD00001, EXP0001, PAY0001, MR-2026-00001).

The numbers themselves come from the storage-level sequence in
``database.sequences``; this module only formats and parses them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    EXPENSE_PREFIX,
    EXPENSE_WIDTH,
    MR_WIDTH,
    PAYMENT_PREFIX,
    PAYMENT_WIDTH,
    RECEIPT_PREFIX,
    RECEIPT_WIDTH,
)


@dataclass(frozen=True)
class CodeFormat:
    prefix: str
    width: int

    def format(self, seq: int) -> str:
        if seq < 1:
            raise ValueError(f"Sequence must be positive, got {seq}")
        return f"{self.prefix}{seq:0{self.width}d}"

    def parse(self, code: str) -> int:
        if not code or not code.startswith(self.prefix):
            raise ValueError(f"{code!r} does not start with {self.prefix!r}")
        suffix = code[len(self.prefix):]
        if not suffix.isdigit():
            raise ValueError(f"{code!r} has a non-numeric suffix")
        return int(suffix)

    def next_after(self, last_code: Optional[str]) -> str:
        if not last_code:
            return self.format(1)
        return self.format(self.parse(last_code) + 1)

    @property
    def sequence_name(self) -> str:
        return self.prefix


RECEIPT_CODE = CodeFormat(RECEIPT_PREFIX, RECEIPT_WIDTH)
EXPENSE_CODE = CodeFormat(EXPENSE_PREFIX, EXPENSE_WIDTH)
PAYMENT_CODE = CodeFormat(PAYMENT_PREFIX, PAYMENT_WIDTH)


def mr_code_format(year: int) -> CodeFormat:
    # MR numbers restart every calendar year.
    return CodeFormat(f"MR-{year}-", MR_WIDTH)


_MR_LAYOUT = re.compile(r"^MR-(\d{4})-")


def claimed_mr_sequence(mr_number: str) -> Optional[tuple[CodeFormat, int]]:
    """Year series and number of a manual MR written in the generated layout.

    Free-form MR numbers return None. Raises ValueError when the generated
    prefix is followed by anything but digits.
    """
    m = _MR_LAYOUT.match(mr_number)
    if m is None:
        return None
    fmt = mr_code_format(int(m.group(1)))
    return fmt, fmt.parse(mr_number)
