from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus
from .model import Invoice, InvoiceAmounts, InvoiceItem, NewInvoice


class InvoiceRepository(Protocol):
    def get(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def get_for_member_month(self, member_id: int, target_month: str) -> Optional[Invoice]:
        raise NotImplementedError

    def list_for_month(self, target_month: str) -> Sequence[Invoice]:
        """Ordered by member name."""
        raise NotImplementedError

    def create(self, new: NewInvoice, items: Sequence[InvoiceItem] = ()) -> Invoice:
        """Allocate the month's next number and insert, in one transaction.

        Raises ConflictError when the member already has an invoice that month.
        """
        raise NotImplementedError

    def replace_items(
        self,
        invoice_id: int,
        *,
        items: Sequence[InvoiceItem],
        amounts: InvoiceAmounts,
        issued_at: date,
        status: InvoiceStatus,
        work_hours_total: Optional[float] = None,
        unit_price: Optional[int] = None,
    ) -> None:
        """Swap the items and amounts; hours and unit price change only when given."""
        raise NotImplementedError

    def list_items(self, invoice_id: int) -> Sequence[InvoiceItem]:
        """Ordered by sort_order."""
        raise NotImplementedError

    def set_status(self, invoice_id: int, status: InvoiceStatus) -> None:
        raise NotImplementedError

    def expense_totals_by_project(self, target_month: str, project_ids: Sequence[int]) -> Mapping[int, int]:
        """Non-taxable item totals of the month's invoices, per linked project."""
        raise NotImplementedError
