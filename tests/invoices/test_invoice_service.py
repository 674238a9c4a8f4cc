from __future__ import annotations

import io
from dataclasses import replace
from datetime import date

import pytest
from openpyxl import load_workbook

from src.teamops.teamops.core.enums import Company, InvoiceStatus, MemberStatus, SalaryType
from src.teamops.teamops.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from src.teamops.teamops.invoices.model import Invoice, InvoiceItem, amounts_for_items, invoice_number
from src.teamops.teamops.invoices.schemas import InvoiceCreate, InvoiceGenerate
from src.teamops.teamops.invoices.service import InvoiceService
from src.teamops.teamops.members.model import Member

ISSUED = date(2026, 4, 30)


class InMemoryInvoices:
    def __init__(self):
        self.invoices: dict[int, Invoice] = {}
        self.items: dict[int, list[InvoiceItem]] = {}

    def get(self, invoice_id):
        return self.invoices.get(invoice_id)

    def get_for_member_month(self, member_id, target_month):
        for inv in self.invoices.values():
            if inv.member_id == member_id and inv.target_month == target_month:
                return inv
        return None

    def list_for_month(self, target_month):
        return [i for i in self.invoices.values() if i.target_month == target_month]

    def create(self, new, items=()):
        invoice_id = len(self.invoices) + 1
        seq = len(self.list_for_month(new.target_month)) + 1
        inv = Invoice(
            invoice_id=invoice_id,
            invoice_number=invoice_number(new.target_month, seq),
            member_id=new.member_id,
            target_month=new.target_month,
            work_hours_total=new.work_hours_total,
            unit_price=new.unit_price,
            amount_excl_tax=new.amount_excl_tax,
            amount_incl_tax=new.amount_incl_tax,
            expense_amount=new.expense_amount,
            status=new.status,
            issued_at=new.issued_at,
            note=new.note,
            member_name="山田",
            salary_type=SalaryType.MONTHLY,
        )
        self.invoices[invoice_id] = inv
        self.items[invoice_id] = list(items)
        return inv

    def replace_items(
        self, invoice_id, *, items, amounts, issued_at, status, work_hours_total=None, unit_price=None
    ):
        self.items[invoice_id] = list(items)
        current = self.invoices[invoice_id]
        self.invoices[invoice_id] = replace(
            current,
            work_hours_total=current.work_hours_total if work_hours_total is None else work_hours_total,
            unit_price=current.unit_price if unit_price is None else unit_price,
            amount_excl_tax=amounts.amount_excl_tax,
            expense_amount=amounts.expense_amount,
            amount_incl_tax=amounts.amount_incl_tax,
            issued_at=issued_at,
            status=status,
        )

    def list_items(self, invoice_id):
        return list(self.items.get(invoice_id, []))

    def set_status(self, invoice_id, status):
        self.invoices[invoice_id] = replace(self.invoices[invoice_id], status=status)


class InMemoryMembers:
    def get_member(self, member_id):
        return Member(
            member_id=member_id,
            name="山田",
            status=MemberStatus.EMPLOYEE,
            company=Company.BOOST,
            salary_type=SalaryType.MONTHLY,
            salary_amount=300000,
            joined_at=date(2025, 4, 1),
            bank_name="みずほ銀行",
            bank_account_number="1234567",
        )


class StaticConfigs:
    def __init__(self, values=None):
        self.values = values or {}

    def lookup(self, key):
        return self.values.get(key)


@pytest.fixture
def repo():
    return InMemoryInvoices()


def _service(repo, notifications, configs=None, **kwargs):
    return InvoiceService(repo, InMemoryMembers(), notifications, configs or StaticConfigs(), **kwargs)


GENERATE = InvoiceGenerate.model_validate(
    {
        "targetMonth": "2026-04",
        "items": [
            {"name": "4月分 稼働", "amount": 100000},
            {"name": "交通費", "amount": 5000, "taxable": False, "linkedProjectId": 7},
        ],
    }
)


def test_tax_applies_only_to_taxable_items():
    amounts = amounts_for_items([InvoiceItem("稼働", 100000), InvoiceItem("交通費", 5000, taxable=False)])

    assert amounts.tax == 10000
    assert amounts.amount_incl_tax == 115000


def test_invoice_number_format():
    assert invoice_number("2026-04", 3) == "INV-202604-0003"


def test_create_starts_as_draft_and_rejects_duplicates(repo, member, notifications):
    svc = _service(repo, notifications)
    payload = InvoiceCreate(targetMonth="2026-04", workHoursTotal=120.5, unitPrice=2000)

    created = svc.create(member, payload, today=ISSUED)

    assert created["invoiceNumber"] == "INV-202604-0001"
    assert created["amountExclTax"] == 241000
    assert created["amountInclTax"] == 265100
    assert repo.get(created["id"]).status is InvoiceStatus.DRAFT
    with pytest.raises(ConflictError):
        svc.create(member, payload, today=ISSUED)


def test_generate_stores_items_and_builds_workbook(repo, member, notifications):
    svc = _service(repo, notifications)

    file = svc.generate(member, GENERATE, today=ISSUED)

    inv = repo.get_for_member_month(member.member_id, "2026-04")
    assert inv.status is InvoiceStatus.SENT
    assert inv.amount_incl_tax == 115000
    assert inv.expense_amount == 5000
    assert file.filename == "invoice-2026-04-INV-202604-0001.xlsx"

    ws = load_workbook(io.BytesIO(file.content))["請求書"]
    assert ws["A1"].value == "請　求　書"
    assert ws["A3"].value == "請求先: 株式会社SALT2"
    assert ws["A4"].value == "件名: 2026年04月分 業務委託費"
    assert ws["B2"].value == "発行日: 2026/04/30"
    labels = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value for r in range(1, ws.max_row + 1)}
    assert labels["合計（税込＋経費）"] == 115000
    assert labels["  消費税（10%）"] == 10000
    assert labels["  経費小計"] == 5000


def test_generate_twice_replaces_items_and_keeps_number(repo, member, notifications):
    svc = _service(repo, notifications)
    svc.generate(member, GENERATE, today=ISSUED)
    again = InvoiceGenerate.model_validate({"targetMonth": "2026-04", "items": [{"name": "稼働", "amount": 200000}]})

    file = svc.generate(member, again, today=ISSUED)

    assert file.filename.endswith("INV-202604-0001.xlsx")
    inv = repo.get_for_member_month(member.member_id, "2026-04")
    assert inv.amount_incl_tax == 220000
    assert len(repo.list_items(inv.invoice_id)) == 1


def test_list_mine_returns_single_invoice_or_none(repo, member, manager, notifications):
    svc = _service(repo, notifications)
    assert svc.list(member, "2026-04") is None

    svc.generate(member, GENERATE, today=ISSUED)

    assert svc.list(member, "2026-04")["invoiceNumber"] == "INV-202604-0001"
    [row] = svc.list(manager, "2026-04")
    assert row["memberId"] == member.member_id
    assert row["salaryType"] == "monthly"


def test_send_to_accounting_mails_workbook_and_confirms(repo, member, manager, notifications):
    svc = _service(repo, notifications, StaticConfigs({"accounting_email": "keiri@example.com"}))
    svc.generate(member, GENERATE, today=ISSUED)
    inv = repo.get_for_member_month(member.member_id, "2026-04")

    assert svc.send_to_accounting(manager, inv.invoice_id) == {"ok": True}

    [mail] = notifications.emails
    assert mail["to"] == "keiri@example.com"
    assert mail["subject"] == "【請求書】山田 2026年04月分 INV-202604-0001"
    assert mail["attachments"][0].filename == "invoice-2026-04-INV-202604-0001.xlsx"
    assert repo.get(inv.invoice_id).status is InvoiceStatus.CONFIRMED


def test_send_to_accounting_without_address_still_confirms(repo, member, manager, notifications):
    svc = _service(repo, notifications)
    svc.generate(member, GENERATE, today=ISSUED)
    inv = repo.get_for_member_month(member.member_id, "2026-04")

    svc.send_to_accounting(manager, inv.invoice_id)

    assert notifications.emails == []
    assert repo.get(inv.invoice_id).status is InvoiceStatus.CONFIRMED


def test_send_to_accounting_checks_role_and_existence(repo, member, manager, notifications):
    svc = _service(repo, notifications)
    with pytest.raises(AuthorizationError):
        svc.send_to_accounting(member, 1)
    with pytest.raises(NotFoundError):
        svc.send_to_accounting(manager, 404)


def test_regenerate_updates_hours_and_price_only_when_given(repo, member, notifications):
    svc = _service(repo, notifications)
    svc.create(member, InvoiceCreate(targetMonth="2026-04", workHoursTotal=100, unitPrice=2000), today=ISSUED)

    svc.generate(member, GENERATE, today=ISSUED)
    inv = repo.get_for_member_month(member.member_id, "2026-04")
    assert (inv.work_hours_total, inv.unit_price) == (100, 2000)

    revised = InvoiceGenerate.model_validate(
        {
            "targetMonth": "2026-04",
            "workHoursTotal": 120.5,
            "unitPrice": 2500,
            "items": [{"name": "稼働", "amount": 301250}],
        }
    )
    svc.generate(member, revised, today=ISSUED)

    inv = repo.get_for_member_month(member.member_id, "2026-04")
    assert (inv.work_hours_total, inv.unit_price) == (120.5, 2500)
    assert inv.amount_excl_tax == 301250
