from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Any, Optional, Sequence, Tuple

from ..common.money import ZERO, money_sum, percent_of, to_money
from ..core.enums import ItemCategory, ShiftType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ServiceItem:
    """One line of a receipt. ``dr_share_percent`` only matters for consultations."""

    service_name: str
    rate: Decimal
    quantity: int = 1
    category: ItemCategory = ItemCategory.SERVICE
    doctor_name: Optional[str] = None
    dr_share_percent: Optional[Decimal] = None

    @property
    def amount(self) -> Decimal:
        return to_money(self.rate * self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_name": self.service_name,
            "rate": str(to_money(self.rate)),
            "quantity": self.quantity,
            "category": self.category.value,
            "doctor_name": self.doctor_name,
            "dr_share_percent": None if self.dr_share_percent is None else str(self.dr_share_percent),
            "amount": str(self.amount),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ServiceItem":
        pct = d.get("dr_share_percent")
        return cls(
            service_name=str(d.get("service_name") or ""),
            rate=to_money(d.get("rate")),
            quantity=int(d.get("quantity") or 1),
            category=ItemCategory(d.get("category") or ItemCategory.SERVICE.value),
            doctor_name=d.get("doctor_name"),
            dr_share_percent=None if pct is None else Decimal(str(pct)),
        )


@dataclass(frozen=True)
class ReceiptFinancials:
    total_amount: Decimal
    discount_amount: Decimal
    payable: Decimal
    paid: Decimal
    balance: Decimal
    dr_share_amount: Decimal
    hospital_share: Decimal


def compute_financials(
    items: Sequence[ServiceItem],
    *,
    discount: Decimal = ZERO,
    paid: Decimal = ZERO,
    claimed_total: Optional[Decimal] = None,
    claimed_payable: Optional[Decimal] = None,
    claimed_balance: Optional[Decimal] = None,
) -> ReceiptFinancials:
    """Derive the money decomposition of a receipt from its items.

    total = sum(rate x qty); payable = total - discount; balance = payable - paid.
    Figures sent by the client are only cross-checked: any disagreement with
    the recomputed value is rejected instead of stored.
    """

    if not items:
        raise ValidationError("At least one service item is required")

    total = money_sum(i.amount for i in items)
    discount = to_money(discount)
    paid = to_money(paid)

    if discount < 0 or paid < 0:
        raise ValidationError("Discount and paid amounts cannot be negative")
    if discount > total:
        raise ValidationError("Discount cannot exceed the total amount")

    payable = to_money(total - discount)
    if paid > payable:
        raise ValidationError("Paid amount cannot exceed the payable amount")
    balance = to_money(payable - paid)

    for name, claimed, actual in (
        ("total_amount", claimed_total, total),
        ("payable", claimed_payable, payable),
        ("balance", claimed_balance, balance),
    ):
        if claimed is not None and to_money(claimed) != actual:
            raise ValidationError(f"{name} {to_money(claimed)} does not match the computed {actual}")

    consultation = [i for i in items if i.category == ItemCategory.CONSULTATION]
    consultation_amount = money_sum(i.amount for i in consultation)
    dr_share = money_sum(percent_of(i.amount, i.dr_share_percent or ZERO) for i in consultation)

    return ReceiptFinancials(
        total_amount=total,
        discount_amount=discount,
        payable=payable,
        paid=paid,
        balance=balance,
        dr_share_amount=dr_share,
        hospital_share=to_money(consultation_amount - dr_share),
    )


@dataclass(frozen=True)
class NewReceipt:
    items: Tuple[ServiceItem, ...]
    patient_mr_number: Optional[str] = None
    patient_name: Optional[str] = None
    phone_number: Optional[str] = None
    patient_age: Optional[str] = None
    patient_gender: Optional[str] = None
    patient_address: Optional[str] = None
    emergency_paid: bool = False
    opd_service: Optional[str] = None
    service_detail: Optional[str] = None
    discount_amount: Decimal = ZERO
    discount_reason: Optional[str] = None
    paid: Decimal = ZERO
    total_amount: Optional[Decimal] = None
    payable: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    shift_id: Optional[int] = None


@dataclass(frozen=True)
class OpdReceipt:
    receipt_date: date
    receipt_time: time
    shift_id: int
    shift_type: ShiftType
    shift_date: date
    items: Tuple[ServiceItem, ...] = field(default_factory=tuple)
    patient_mr_number: Optional[str] = None
    patient_name: Optional[str] = None
    phone_number: Optional[str] = None
    patient_age: Optional[str] = None
    patient_gender: Optional[str] = None
    patient_address: Optional[str] = None
    emergency_paid: bool = False
    opd_service: Optional[str] = None
    service_detail: Optional[str] = None
    total_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    discount_reason: Optional[str] = None
    payable: Decimal = ZERO
    paid: Decimal = ZERO
    balance: Decimal = ZERO
    dr_share_amount: Decimal = ZERO
    hospital_share: Decimal = ZERO
    paid_to_doctor: bool = False
    is_cancelled: bool = False
    cancel_details: Optional[str] = None
    is_refunded: bool = False
    refund_reason: Optional[str] = None
    refund_amount: Decimal = ZERO
    shift_closed: bool = False
    receipt_id: Optional[int] = None
    receipt_code: Optional[str] = None


@dataclass(frozen=True)
class ReceiptUpdate:
    """Editable receipt fields. Money, shift and state flags have dedicated paths."""

    patient_name: Optional[str] = None
    phone_number: Optional[str] = None
    patient_age: Optional[str] = None
    patient_gender: Optional[str] = None
    patient_address: Optional[str] = None
    emergency_paid: Optional[bool] = None
    opd_service: Optional[str] = None
    service_detail: Optional[str] = None
    discount_reason: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


@dataclass(frozen=True)
class ReceiptShiftSummary:
    total_patients: int = 0
    total_amount: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    total_dr_share: Decimal = ZERO
    total_hospital_share: Decimal = ZERO
    cancelled_count: int = 0
    total_refund: Decimal = ZERO
