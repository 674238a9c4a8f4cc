from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import InvoiceStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..notifications.mailer import Attachment
from ..notifications.service import NotificationService
from ..system_configs.service import SystemConfigService
from ..users.model import SessionUser
from .excel import InvoiceSheet, build_invoice_workbook
from .model import (
    DUPLICATE_INVOICE,
    Invoice,
    InvoiceItem,
    NewInvoice,
    amounts_for_hours,
    amounts_for_items,
    invoice_filename,
)
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceGenerate

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ACCOUNTING_EMAIL_KEY = "accounting_email"


@dataclass(frozen=True)
class InvoiceFile:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


class InvoiceService:
    """Use case: monthly invoices, their workbook and the hand-off to accounting."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        members: MemberRepository,
        notifications: NotificationService,
        configs: SystemConfigService,
        *,
        accounting_email: Optional[str] = None,
    ):
        self._invoices = invoices
        self._members = members
        self._notifications = notifications
        self._configs = configs
        self._accounting_email = accounting_email

    def list(self, actor: SessionUser, target_month: str, *, mine: bool = False):
        if mine or not authorizer.allows(actor, "invoice", "read_all"):
            inv = self._invoices.get_for_member_month(actor.member_id, target_month)
            return inv.to_dict() if inv else None

        rows = []
        for inv in self._invoices.list_for_month(target_month):
            data = inv.to_dict()
            data.update(
                {
                    "memberId": inv.member_id,
                    "memberName": inv.member_name,
                    "salaryType": inv.salary_type.value if inv.salary_type else None,
                }
            )
            rows.append(data)
        return rows

    def create(self, actor: SessionUser, payload: InvoiceCreate, *, today: Optional[date] = None) -> dict:
        if self._invoices.get_for_member_month(actor.member_id, payload.targetMonth):
            raise ConflictError(DUPLICATE_INVOICE)

        amounts = amounts_for_hours(payload.workHoursTotal, payload.unitPrice)
        inv = self._invoices.create(
            NewInvoice(
                member_id=actor.member_id,
                target_month=payload.targetMonth,
                work_hours_total=payload.workHoursTotal,
                unit_price=payload.unitPrice,
                amount_excl_tax=amounts.amount_excl_tax,
                amount_incl_tax=amounts.amount_incl_tax,
                expense_amount=0,
                status=InvoiceStatus.DRAFT,
                issued_at=today or now_local().date(),
                note=payload.note,
            )
        )
        logger.info("invoice %s created for member %s", inv.invoice_number, actor.member_id)
        return {
            "id": inv.invoice_id,
            "invoiceNumber": inv.invoice_number,
            "amountExclTax": inv.amount_excl_tax,
            "amountInclTax": inv.amount_incl_tax,
        }

    def generate(self, actor: SessionUser, payload: InvoiceGenerate, *, today: Optional[date] = None) -> InvoiceFile:
        """Store the itemised invoice (replacing items of an existing one) and build its workbook."""
        issued_on = today or now_local().date()
        items = [
            InvoiceItem(
                name=i.name,
                amount=i.amount,
                taxable=i.taxable,
                linked_project_id=i.linkedProjectId,
                sort_order=idx,
            )
            for idx, i in enumerate(payload.items)
        ]
        amounts = amounts_for_items(items)

        existing = self._invoices.get_for_member_month(actor.member_id, payload.targetMonth)
        if existing:
            self._invoices.replace_items(
                existing.invoice_id,
                items=items,
                amounts=amounts,
                issued_at=issued_on,
                status=InvoiceStatus.SENT,
                work_hours_total=payload.workHoursTotal,
                unit_price=payload.unitPrice,
            )
            number = existing.invoice_number
        else:
            inv = self._invoices.create(
                NewInvoice(
                    member_id=actor.member_id,
                    target_month=payload.targetMonth,
                    work_hours_total=payload.workHoursTotal or 0,
                    unit_price=payload.unitPrice or 0,
                    amount_excl_tax=amounts.amount_excl_tax,
                    amount_incl_tax=amounts.amount_incl_tax,
                    expense_amount=amounts.expense_amount,
                    status=InvoiceStatus.SENT,
                    issued_at=issued_on,
                    note=payload.note,
                ),
                items,
            )
            number = inv.invoice_number

        member = self._members.get_member(actor.member_id)
        content = build_invoice_workbook(
            self._sheet(number, payload.targetMonth, issued_on, actor.name, items, payload.note, member)
        )
        logger.info("invoice %s generated (%d items)", number, len(items))
        return InvoiceFile(filename=invoice_filename(payload.targetMonth, number), content=content)

    def send_to_accounting(self, actor: SessionUser, invoice_id: int) -> dict:
        authorizer.require(actor, "invoice", "accounting")
        inv = self._invoices.get(invoice_id)
        if not inv:
            raise NotFoundError("請求書が見つかりません")

        member = self._members.get_member(inv.member_id)
        issuer = member.name if member else (inv.member_name or "")
        items = self._invoices.list_items(invoice_id)
        content = build_invoice_workbook(
            self._sheet(inv.invoice_number, inv.target_month, inv.issued_at, issuer, items, inv.note, member)
        )

        to = self._configs.lookup(ACCOUNTING_EMAIL_KEY) or self._accounting_email
        if to:
            self._notifications.email(
                to=to,
                subject=self._subject(inv, issuer),
                body=self._body(inv, issuer),
                attachments=[
                    Attachment(
                        filename=invoice_filename(inv.target_month, inv.invoice_number),
                        content=content,
                        maintype="application",
                        subtype="vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                    )
                ],
            )
        else:
            logger.info("accounting email not configured; invoice %s not mailed", inv.invoice_number)

        self._invoices.set_status(invoice_id, InvoiceStatus.CONFIRMED)
        return {"ok": True}

    @staticmethod
    def _sheet(number, target_month, issued_on, issuer, items, note, member) -> InvoiceSheet:
        return InvoiceSheet(
            invoice_number=number,
            target_month=target_month,
            issued_on=issued_on,
            issuer_name=issuer,
            items=tuple(items),
            note=note,
            address=member.address if member else None,
            bank_name=member.bank_name if member else None,
            bank_branch=member.bank_branch if member else None,
            bank_account_number=member.bank_account_number if member else None,
            bank_account_holder=member.bank_account_holder if member else None,
        )

    @staticmethod
    def _subject(inv: Invoice, issuer: str) -> str:
        yr, mo = inv.target_month.split("-")
        return f"【請求書】{issuer} {yr}年{mo}月分 {inv.invoice_number}"

    @staticmethod
    def _body(inv: Invoice, issuer: str) -> str:
        yr, mo = inv.target_month.split("-")
        return "\n".join(
            [
                f"{issuer} さんの {yr}年{mo}月分 請求書を送付します。",
                "",
                f"請求書番号: {inv.invoice_number}",
                f"金額（税抜）: ¥{inv.amount_excl_tax:,}",
                f"金額（税込）: ¥{inv.amount_incl_tax:,}",
            ]
        )
