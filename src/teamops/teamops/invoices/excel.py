"""Invoice workbook (one sheet, fixed layout) built with openpyxl."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from ..common.datetime_utils import format_jp_month
from ..core.constants import INVOICE_ADDRESSEE, YEN_FORMAT
from .model import InvoiceItem, amounts_for_items

SHEET_TITLE = "請求書"
HEADER_ROW = 6

_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE2E8F0")
_TOTAL_FILL = PatternFill(fill_type="solid", fgColor="FFDBEAFE")
_TAXABLE_COLOR = "FF1E40AF"
_EXPENSE_COLOR = "FF065F46"
_MUTED_COLOR = "FF64748B"
_RIGHT = Alignment(horizontal="right")


@dataclass(frozen=True)
class InvoiceSheet:
    invoice_number: str
    target_month: str
    issued_on: date
    issuer_name: str
    items: Sequence[InvoiceItem] = field(default_factory=tuple)
    note: Optional[str] = None
    address: Optional[str] = None
    bank_name: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_account_holder: Optional[str] = None


def _money(ws, row: int, amount: int, *, bold: bool = False) -> None:
    cell = ws.cell(row=row, column=2, value=amount)
    cell.number_format = YEN_FORMAT
    cell.alignment = _RIGHT
    if bold:
        cell.font = Font(bold=True)


def _bank_line(sheet: InvoiceSheet) -> str:
    parts = [
        sheet.bank_name,
        sheet.bank_branch,
        f"口座番号: {sheet.bank_account_number}" if sheet.bank_account_number else None,
        f"（{sheet.bank_account_holder}）" if sheet.bank_account_holder else None,
    ]
    return " ".join(p for p in parts if p)


def build_invoice_workbook(sheet: InvoiceSheet) -> bytes:
    taxable_items = [i for i in sheet.items if i.taxable]
    expense_items = [i for i in sheet.items if not i.taxable]
    amounts = amounts_for_items(sheet.items)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.column_dimensions["A"].width = 36
    ws.column_dimensions["B"].width = 18

    ws.merge_cells("A1:B1")
    ws["A1"] = "請　求　書"
    ws["A1"].font = Font(bold=True, size=16)
    ws["A1"].alignment = Alignment(horizontal="center")

    ws["A2"] = f"請求書番号: {sheet.invoice_number}"
    ws["B2"] = f"発行日: {sheet.issued_on.strftime('%Y/%m/%d')}"
    ws["B2"].alignment = _RIGHT
    ws["A3"] = f"請求先: {INVOICE_ADDRESSEE}"
    ws["A4"] = f"件名: {format_jp_month(sheet.target_month)}分 業務委託費"

    ws.cell(row=HEADER_ROW, column=1, value="項目")
    ws.cell(row=HEADER_ROW, column=2, value="金額")
    for col in (1, 2):
        cell = ws.cell(row=HEADER_ROW, column=col)
        cell.font = Font(bold=True)
        cell.fill = _HEADER_FILL
        cell.border = Border(bottom=Side(style="thin"))
    ws.cell(row=HEADER_ROW, column=2).alignment = _RIGHT

    row = HEADER_ROW + 1

    if taxable_items:
        ws.cell(row=row, column=1, value="【稼働分（課税対象）】").font = Font(bold=True, color=_TAXABLE_COLOR)
        row += 1
        for item in taxable_items:
            ws.cell(row=row, column=1, value=item.name)
            _money(ws, row, item.amount)
            row += 1
        ws.cell(row=row, column=1, value="  稼働小計（税抜）").font = Font(bold=True)
        _money(ws, row, amounts.amount_excl_tax)
        row += 1
        ws.cell(row=row, column=1, value="  消費税（10%）")
        _money(ws, row, amounts.tax)
        row += 1

    if expense_items:
        row += 1
        ws.cell(row=row, column=1, value="【経費・交通費（非課税）】").font = Font(bold=True, color=_EXPENSE_COLOR)
        row += 1
        for item in expense_items:
            ws.cell(row=row, column=1, value=item.name)
            _money(ws, row, item.amount)
            row += 1
        ws.cell(row=row, column=1, value="  経費小計").font = Font(bold=True)
        _money(ws, row, amounts.expense_amount)
        row += 1

    row += 1
    label = "合計（税込＋経費）" if expense_items else "合計（税込）"
    total_label = ws.cell(row=row, column=1, value=label)
    total_label.font = Font(bold=True)
    total_label.fill = _TOTAL_FILL
    _money(ws, row, amounts.amount_incl_tax, bold=True)
    ws.cell(row=row, column=2).fill = _TOTAL_FILL
    row += 2

    if sheet.note:
        ws.cell(row=row, column=1, value=f"備考: {sheet.note}")
        row += 1

    ws.cell(row=row, column=1, value=f"発行者: {sheet.issuer_name}")
    row += 1

    if sheet.address:
        ws.cell(row=row, column=1, value=f"住所: {sheet.address}").font = Font(color=_MUTED_COLOR)
        row += 1

    if sheet.bank_name or sheet.bank_account_number:
        ws.cell(row=row, column=1, value=f"振込先: {_bank_line(sheet)}").font = Font(color=_MUTED_COLOR)

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
