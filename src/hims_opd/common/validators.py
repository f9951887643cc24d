from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def parse_decimal(value: Any, field_name: str, *, minimum: Optional[Decimal] = Decimal("0")) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not d.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if minimum is not None and d < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return d


def optional_decimal(value: Any, field_name: str, *, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return parse_decimal(value, field_name)


def parse_int(value: Any, field_name: str, *, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if minimum is not None and n < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return n


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_int(value, field_name)


def parse_bool(value: Any, *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    raise ValidationError(f"Invalid boolean value: {value!r}")


def optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return parse_bool(value)


def require_percentage(value: Decimal, field_name: str) -> Decimal:
    if value < 0 or value > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")
    return value


def parse_enum(enum_cls, value: Any, field_name: str):
    """Match an Enum by value, case-insensitively ('morning' -> ShiftType.MORNING)."""
    if isinstance(value, enum_cls):
        return value
    v = str(value or "").strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == v:
            return member
    allowed = ", ".join(str(m.value) for m in enum_cls)
    raise ValidationError(f"{field_name} must be one of: {allowed}")


def optional_enum(enum_cls, value: Any, field_name: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_enum(enum_cls, value, field_name)
