from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Company
from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import MemberTool
from .tool_repository import ToolRepository

_SELECT = """
    SELECT t.id, t.member_id, t.tool_name, t.plan, t.monthly_cost, t.company_label, t.note,
           t.updated_at, m.name AS member_name
    FROM member_tools t
    JOIN members m ON m.id = t.member_id
"""

TOOL_COLUMNS = {
    "toolName": "tool_name",
    "plan": "plan",
    "monthlyCost": "monthly_cost",
    "companyLabel": "company_label",
    "note": "note",
}


def _to_tool(r: dict) -> MemberTool:
    return MemberTool(
        tool_id=int(r["id"]),
        member_id=int(r["member_id"]),
        tool_name=r["tool_name"],
        plan=r.get("plan"),
        monthly_cost=int(r.get("monthly_cost") or 0),
        company_label=Company(r["company_label"]),
        note=r.get("note"),
        member_name=r.get("member_name"),
        updated_at=r.get("updated_at"),
    )


class MySQLToolRepository(ToolRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_for_member(self, member_id: int) -> Sequence[MemberTool]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE t.member_id=%s ORDER BY t.created_at ASC", (int(member_id),))
            return [_to_tool(r) for r in fetchall(cur)]

    def list_all(self, *, company=None, member_id=None, tool_name=None) -> Sequence[MemberTool]:
        clauses = ["m.deleted_at IS NULL"]
        params: list[object] = []
        if company:
            clauses.append("t.company_label=%s")
            params.append(company)
        if member_id is not None:
            clauses.append("t.member_id=%s")
            params.append(int(member_id))
        if tool_name:
            clauses.append("t.tool_name=%s")
            params.append(tool_name)
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY t.created_at ASC", tuple(params))
            return [_to_tool(r) for r in fetchall(cur)]

    def get(self, *, member_id: int, tool_id: int) -> Optional[MemberTool]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE t.id=%s AND t.member_id=%s", (int(tool_id), int(member_id)))
            r = fetchone(cur)
            return _to_tool(r) if r else None

    def create(self, *, member_id: int, fields: dict) -> int:
        cols = [TOOL_COLUMNS[k] for k in fields]
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"INSERT INTO member_tools (member_id, {', '.join(cols)}) VALUES (%s, {in_clause(cols)})",
                (int(member_id), *fields.values()),
            )
            return int(cur.lastrowid)

    def update(self, *, tool_id: int, fields: dict) -> None:
        if not fields:
            return
        sets = ", ".join(f"{TOOL_COLUMNS[k]}=%s" for k in fields)
        with db_cursor(self._db) as (_, cur):
            cur.execute(f"UPDATE member_tools SET {sets} WHERE id=%s", (*fields.values(), int(tool_id)))

    def delete(self, *, tool_id: int) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("DELETE FROM member_tools WHERE id=%s", (int(tool_id),))

    def monthly_totals(self, member_ids: Sequence[int]) -> dict[int, int]:
        if not member_ids:
            return {}
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT member_id, COALESCE(SUM(monthly_cost), 0) AS total
                FROM member_tools
                WHERE member_id IN ({in_clause(member_ids)})
                GROUP BY member_id
                """,
                tuple(int(m) for m in member_ids),
            )
            return {int(r["member_id"]): int(r["total"]) for r in fetchall(cur)}
