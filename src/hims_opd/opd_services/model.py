from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO


@dataclass(frozen=True)
class OpdService:
    service_id: int
    service_code: str
    service_name: str
    service_head: str
    service_rate: Decimal = ZERO
    required_consultant: bool = False
    price_editable: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class NewOpdService:
    service_code: str
    service_name: str
    service_head: str
    service_rate: Decimal = ZERO
    required_consultant: bool = False
    price_editable: bool = False


@dataclass(frozen=True)
class OpdServiceUpdate:
    service_name: Optional[str] = None
    service_head: Optional[str] = None
    service_rate: Optional[Decimal] = None
    required_consultant: Optional[bool] = None
    price_editable: Optional[bool] = None
    is_active: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)
