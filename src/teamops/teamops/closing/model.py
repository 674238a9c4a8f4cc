from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import ClosingConfirmStatus, ClosingInvoiceStatus, ConfirmStatus, InvoiceStatus, SalaryType

CONTRACT_LABELS = {SalaryType.HOURLY: "時給制", SalaryType.MONTHLY: "月給制"}

_INVOICE_STATUS_MAP = {
    InvoiceStatus.DRAFT: ClosingInvoiceStatus.GENERATED,
    InvoiceStatus.SENT: ClosingInvoiceStatus.SENT,
    InvoiceStatus.CONFIRMED: ClosingInvoiceStatus.ACCOUNTING_SENT,
}


@dataclass(frozen=True)
class ClosingRow:
    member_id: int
    member_name: str
    salary_type: SalaryType
    salary_amount: int
    work_days: int
    total_hours: float
    missing_days: int
    estimated_amount: int
    confirm_status: ClosingConfirmStatus
    invoice_status: ClosingInvoiceStatus
    invoice_id: Optional[int] = None
    invoice_number: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "memberId": self.member_id,
            "memberName": self.member_name,
            "salaryType": self.salary_type.value,
            "salaryAmount": self.salary_amount,
            "contractType": CONTRACT_LABELS[self.salary_type],
            "workDays": self.work_days,
            "totalHours": self.total_hours,
            "missingDays": self.missing_days,
            "estimatedAmount": self.estimated_amount,
            "confirmStatus": self.confirm_status.value,
            "invoiceStatus": self.invoice_status.value,
            "hourlyRate": self.salary_amount if self.salary_type is SalaryType.HOURLY else None,
            "invoiceId": self.invoice_id,
            "invoiceNumber": self.invoice_number,
        }


def confirm_status_of(records: Iterable[AttendanceRecord]) -> ClosingConfirmStatus:
    """Compare confirmed/approved rows against work days, then look at notification.

    FORCED is never produced here.
    """
    records = list(records)
    work_days = sum(1 for r in records if r.clock_in is not None)
    confirmed = sum(1 for r in records if r.confirm_status in (ConfirmStatus.CONFIRMED, ConfirmStatus.APPROVED))
    notified = sum(1 for r in records if r.slack_notified)

    if work_days > 0 and confirmed >= work_days:
        return ClosingConfirmStatus.CONFIRMED
    if notified > 0:
        return ClosingConfirmStatus.WAITING
    return ClosingConfirmStatus.NOT_SENT


def invoice_status_of(status: Optional[InvoiceStatus]) -> ClosingInvoiceStatus:
    if status is None:
        return ClosingInvoiceStatus.NONE
    return _INVOICE_STATUS_MAP[status]
