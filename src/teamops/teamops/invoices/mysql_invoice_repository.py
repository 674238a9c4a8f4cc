from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..core.enums import InvoiceStatus, SalaryType
from ..database.connection import Database
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone, in_clause
from .model import DUPLICATE_INVOICE, Invoice, InvoiceAmounts, InvoiceItem, NewInvoice, invoice_number
from .repository import InvoiceRepository

_SELECT = """
    SELECT i.id, i.invoice_number, i.member_id, i.target_month, i.work_hours_total, i.unit_price,
           i.amount_excl_tax, i.amount_incl_tax, i.expense_amount, i.status, i.issued_at, i.note,
           m.name AS member_name, m.salary_type
    FROM invoices i
    JOIN members m ON m.id = i.member_id
"""


def _to_invoice(r: dict) -> Invoice:
    return Invoice(
        invoice_id=int(r["id"]),
        invoice_number=r["invoice_number"],
        member_id=int(r["member_id"]),
        target_month=r["target_month"],
        work_hours_total=float(r.get("work_hours_total") or 0),
        unit_price=int(r.get("unit_price") or 0),
        amount_excl_tax=int(r.get("amount_excl_tax") or 0),
        amount_incl_tax=int(r.get("amount_incl_tax") or 0),
        expense_amount=int(r.get("expense_amount") or 0),
        status=InvoiceStatus(r["status"]),
        issued_at=r["issued_at"],
        note=r.get("note"),
        member_name=r.get("member_name"),
        salary_type=SalaryType(r["salary_type"]) if r.get("salary_type") else None,
    )


def _insert_items(cur, invoice_id: int, items: Sequence[InvoiceItem]) -> None:
    for idx, item in enumerate(items):
        cur.execute(
            """
            INSERT INTO invoice_items (invoice_id, name, amount, taxable, linked_project_id, sort_order)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (invoice_id, item.name, int(item.amount), 1 if item.taxable else 0, item.linked_project_id, idx),
        )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, db: Database):
        self._db = db

    def get(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE i.id=%s", (invoice_id,))
            row = fetchone(cur)
        return _to_invoice(row) if row else None

    def get_for_member_month(self, member_id: int, target_month: str) -> Optional[Invoice]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE i.member_id=%s AND i.target_month=%s", (member_id, target_month))
            row = fetchone(cur)
        return _to_invoice(row) if row else None

    def list_for_month(self, target_month: str) -> Sequence[Invoice]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE i.target_month=%s ORDER BY m.name ASC", (target_month,))
            rows = fetchall(cur)
        return [_to_invoice(r) for r in rows]

    def create(self, new: NewInvoice, items: Sequence[InvoiceItem] = ()) -> Invoice:
        with conflict_on_duplicate(DUPLICATE_INVOICE):
            with db_cursor(self._db) as (_, cur):
                cur.execute(
                    "SELECT COUNT(*) AS cnt FROM invoices WHERE target_month=%s FOR UPDATE",
                    (new.target_month,),
                )
                count = int((fetchone(cur) or {}).get("cnt") or 0)
                number = invoice_number(new.target_month, count + 1)
                cur.execute(
                    """
                    INSERT INTO invoices (
                        member_id, invoice_number, target_month, work_hours_total, unit_price,
                        amount_excl_tax, amount_incl_tax, expense_amount, status, note, issued_at
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        new.member_id,
                        number,
                        new.target_month,
                        new.work_hours_total,
                        new.unit_price,
                        new.amount_excl_tax,
                        new.amount_incl_tax,
                        new.expense_amount,
                        new.status.value,
                        new.note,
                        new.issued_at,
                    ),
                )
                invoice_id = int(cur.lastrowid)
                _insert_items(cur, invoice_id, items)
                cur.execute(_SELECT + " WHERE i.id=%s", (invoice_id,))
                row = fetchone(cur)
        return _to_invoice(row)

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
        with db_cursor(self._db) as (_, cur):
            cur.execute("DELETE FROM invoice_items WHERE invoice_id=%s", (invoice_id,))
            cur.execute(
                """
                UPDATE invoices
                SET amount_excl_tax=%s, expense_amount=%s, amount_incl_tax=%s, issued_at=%s, status=%s,
                    work_hours_total=COALESCE(%s, work_hours_total), unit_price=COALESCE(%s, unit_price)
                WHERE id=%s
                """,
                (
                    amounts.amount_excl_tax,
                    amounts.expense_amount,
                    amounts.amount_incl_tax,
                    issued_at,
                    status.value,
                    work_hours_total,
                    unit_price,
                    invoice_id,
                ),
            )
            _insert_items(cur, invoice_id, items)

    def list_items(self, invoice_id: int) -> Sequence[InvoiceItem]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                SELECT name, amount, taxable, linked_project_id, sort_order
                FROM invoice_items WHERE invoice_id=%s ORDER BY sort_order ASC, id ASC
                """,
                (invoice_id,),
            )
            rows = fetchall(cur)
        return [
            InvoiceItem(
                name=r["name"],
                amount=int(r["amount"]),
                taxable=bool(r["taxable"]),
                linked_project_id=int(r["linked_project_id"]) if r.get("linked_project_id") else None,
                sort_order=int(r.get("sort_order") or 0),
            )
            for r in rows
        ]

    def set_status(self, invoice_id: int, status: InvoiceStatus) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("UPDATE invoices SET status=%s WHERE id=%s", (status.value, invoice_id))

    def expense_totals_by_project(self, target_month: str, project_ids: Sequence[int]) -> Mapping[int, int]:
        if not project_ids:
            return {}
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT it.linked_project_id AS project_id, SUM(it.amount) AS total
                FROM invoice_items it
                JOIN invoices i ON i.id = it.invoice_id
                WHERE it.taxable=0 AND i.target_month=%s
                  AND it.linked_project_id IN ({in_clause(project_ids)})
                GROUP BY it.linked_project_id
                """,
                (target_month, *project_ids),
            )
            rows = fetchall(cur)
        return {int(r["project_id"]): int(r["total"] or 0) for r in rows}
