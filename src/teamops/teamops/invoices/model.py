from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..common.rounding import round_half_up
from ..core.constants import TAX_RATE
from ..core.enums import InvoiceStatus, SalaryType

DUPLICATE_INVOICE = "すでに請求書が生成されています"


@dataclass(frozen=True)
class InvoiceItem:
    name: str
    amount: int
    taxable: bool = True
    linked_project_id: Optional[int] = None
    sort_order: int = 0


@dataclass(frozen=True)
class Invoice:
    invoice_id: int
    invoice_number: str
    member_id: int
    target_month: str
    work_hours_total: float
    unit_price: int
    amount_excl_tax: int
    amount_incl_tax: int
    expense_amount: int
    status: InvoiceStatus
    issued_at: date
    note: Optional[str] = None
    member_name: Optional[str] = None
    salary_type: Optional[SalaryType] = None

    def to_dict(self) -> dict:
        return {
            "id": self.invoice_id,
            "invoiceNumber": self.invoice_number,
            "targetMonth": self.target_month,
            "workHoursTotal": self.work_hours_total,
            "unitPrice": self.unit_price,
            "amountExclTax": self.amount_excl_tax,
            "amountInclTax": self.amount_incl_tax,
            "issuedAt": self.issued_at.isoformat(),
        }


@dataclass(frozen=True)
class NewInvoice:
    member_id: int
    target_month: str
    work_hours_total: float
    unit_price: int
    amount_excl_tax: int
    amount_incl_tax: int
    expense_amount: int
    status: InvoiceStatus
    issued_at: date
    note: Optional[str] = None


@dataclass(frozen=True)
class InvoiceAmounts:
    amount_excl_tax: int
    expense_amount: int
    tax: int

    @property
    def amount_incl_tax(self) -> int:
        return self.amount_excl_tax + self.tax + self.expense_amount


def tax_on(amount: int) -> int:
    return round_half_up(amount * TAX_RATE)


def amounts_for_items(items: Iterable[InvoiceItem]) -> InvoiceAmounts:
    """Tax applies to taxable items only; expenses pass through untaxed."""
    items = list(items)
    taxable = sum(i.amount for i in items if i.taxable)
    expense = sum(i.amount for i in items if not i.taxable)
    return InvoiceAmounts(amount_excl_tax=taxable, expense_amount=expense, tax=tax_on(taxable))


def amounts_for_hours(work_hours_total: float, unit_price: int) -> InvoiceAmounts:
    excl = round_half_up(work_hours_total * unit_price)
    return InvoiceAmounts(amount_excl_tax=excl, expense_amount=0, tax=tax_on(excl))


def invoice_number(target_month: str, sequence: int) -> str:
    """INV-YYYYMM-NNNN."""
    return f"INV-{target_month.replace('-', '')}-{sequence:04d}"


def invoice_filename(target_month: str, number: str) -> str:
    return f"invoice-{target_month}-{number}.xlsx"
