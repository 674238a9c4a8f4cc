from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .generator import ExistingAdjustment
from .model import RECORD_TYPE_PL, GeneratedPL, PLRecord, PLValues, gross_profit_rate
from .repository import PLRecordRepository

_SELECT = """
    SELECT r.*, p.name AS project_name, p.project_type, p.company, p.status AS project_status, p.client_name
    FROM pl_records r
    LEFT JOIN projects p ON p.id = r.project_id
"""


def _to_record(r: dict) -> PLRecord:
    return PLRecord(
        record_id=int(r["id"]),
        project_id=int(r["project_id"]),
        target_month=r["target_month"],
        values=PLValues(
            revenue_contract=int(r["revenue_contract"] or 0),
            revenue_extra=int(r["revenue_extra"] or 0),
            cost_labor_monthly=int(r["cost_labor_monthly"] or 0),
            cost_labor_hourly=int(r["cost_labor_hourly"] or 0),
            cost_outsourcing=int(r["cost_outsourcing"] or 0),
            cost_tools=int(r["cost_tools"] or 0),
            cost_other=int(r["cost_other"] or 0),
        ),
        gross_profit=int(r["gross_profit"] or 0),
        gross_profit_rate=float(r["gross_profit_rate"] or 0),
        markup_rate=float(r["markup_rate"]) if r.get("markup_rate") is not None else None,
        memo=r.get("memo"),
        project_name=r.get("project_name"),
        project_type=r.get("project_type"),
        company=r.get("company"),
        project_status=r.get("project_status"),
        client_name=r.get("client_name"),
    )


class MySQLPLRecordRepository(PLRecordRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_records(self, months: Sequence[str], *, project_id: Optional[int] = None) -> Sequence[PLRecord]:
        if not months:
            return []
        sql = _SELECT + f" WHERE r.record_type=%s AND r.target_month IN ({in_clause(months)})"
        params: list = [RECORD_TYPE_PL, *months]
        if project_id is not None:
            sql += " AND r.project_id=%s"
            params.append(project_id)
        with db_cursor(self._db) as (_, cur):
            cur.execute(sql + " ORDER BY r.target_month ASC, p.name ASC", tuple(params))
            rows = fetchall(cur)
        return [_to_record(r) for r in rows]

    def get(self, record_id: int) -> Optional[PLRecord]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE r.id=%s", (record_id,))
            row = fetchone(cur)
        return _to_record(row) if row else None

    def upsert(
        self,
        project_id: int,
        target_month: str,
        values: PLValues,
        *,
        markup_rate: Optional[float],
        memo: Optional[str],
        actor_id: Optional[int],
    ) -> int:
        gp = values.gross_profit
        rate = gross_profit_rate(gp, values.revenue)
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                INSERT INTO pl_records (
                    record_type, project_id, target_month, revenue_contract, revenue_extra,
                    cost_labor_monthly, cost_labor_hourly, cost_outsourcing, cost_tools, cost_other,
                    gross_profit, gross_profit_rate, markup_rate, memo, created_by
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    revenue_contract=VALUES(revenue_contract), revenue_extra=VALUES(revenue_extra),
                    cost_labor_monthly=VALUES(cost_labor_monthly), cost_labor_hourly=VALUES(cost_labor_hourly),
                    cost_outsourcing=VALUES(cost_outsourcing), cost_tools=VALUES(cost_tools),
                    cost_other=VALUES(cost_other), gross_profit=VALUES(gross_profit),
                    gross_profit_rate=VALUES(gross_profit_rate), markup_rate=VALUES(markup_rate),
                    memo=VALUES(memo)
                """,
                (
                    RECORD_TYPE_PL,
                    project_id,
                    target_month,
                    values.revenue_contract,
                    values.revenue_extra,
                    values.cost_labor_monthly,
                    values.cost_labor_hourly,
                    values.cost_outsourcing,
                    values.cost_tools,
                    values.cost_other,
                    gp,
                    rate,
                    markup_rate,
                    memo,
                    actor_id,
                ),
            )
            cur.execute(
                "SELECT id FROM pl_records WHERE project_id=%s AND target_month=%s AND record_type=%s",
                (project_id, target_month, RECORD_TYPE_PL),
            )
            row = fetchone(cur)
        return int(row["id"])

    def update_adjustment(
        self,
        record_id: int,
        *,
        revenue_contract: int,
        revenue_extra: int,
        markup_rate: Optional[float],
        gross_profit: int,
        gross_profit_rate: float,
    ) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                UPDATE pl_records
                SET revenue_contract=%s, revenue_extra=%s, markup_rate=COALESCE(%s, markup_rate),
                    gross_profit=%s, gross_profit_rate=%s
                WHERE id=%s
                """,
                (revenue_contract, revenue_extra, markup_rate, gross_profit, gross_profit_rate, record_id),
            )

    def adjustments(self, target_month: str, project_ids: Sequence[int]) -> Mapping[int, ExistingAdjustment]:
        if not project_ids:
            return {}
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT project_id, markup_rate, cost_other FROM pl_records
                WHERE record_type=%s AND target_month=%s AND project_id IN ({in_clause(project_ids)})
                """,
                (RECORD_TYPE_PL, target_month, *project_ids),
            )
            rows = fetchall(cur)
        return {
            int(r["project_id"]): ExistingAdjustment(
                markup_rate=float(r["markup_rate"]) if r.get("markup_rate") is not None else None,
                cost_other=int(r["cost_other"] or 0),
            )
            for r in rows
        }

    def save_generated(self, target_month: str, rows: Sequence[GeneratedPL], *, actor_id: Optional[int]) -> int:
        with db_cursor(self._db) as (_, cur):
            for g in rows:
                cur.execute(
                    """
                    INSERT INTO pl_records (
                        record_type, project_id, target_month, revenue_contract, revenue_extra,
                        cost_labor_monthly, cost_labor_hourly, cost_outsourcing, cost_tools, cost_other,
                        gross_profit, gross_profit_rate, markup_rate, created_by
                    )
                    VALUES (%s, %s, %s, %s, 0, 0, %s, 0, %s, %s, %s, %s, %s, %s)
                    ON DUPLICATE KEY UPDATE
                        revenue_contract=VALUES(revenue_contract), cost_labor_hourly=VALUES(cost_labor_hourly),
                        cost_tools=VALUES(cost_tools), gross_profit=VALUES(gross_profit),
                        gross_profit_rate=VALUES(gross_profit_rate)
                    """,
                    (
                        RECORD_TYPE_PL,
                        g.project_id,
                        target_month,
                        g.revenue_contract,
                        g.cost_labor_hourly,
                        g.cost_tools,
                        g.cost_other,
                        g.gross_profit,
                        g.gross_profit_rate,
                        g.markup_rate,
                        actor_id,
                    ),
                )
        return len(rows)
