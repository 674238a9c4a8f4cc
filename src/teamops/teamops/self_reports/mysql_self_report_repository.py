from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall
from .model import Allocation, SelfReport
from .repository import SelfReportRepository


class MySQLSelfReportRepository(SelfReportRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_for_month(self, target_month: str, *, member_id: Optional[int] = None) -> Sequence[SelfReport]:
        sql = """
            SELECT r.id, r.member_id, r.target_month, r.project_id, r.reported_hours, r.submitted_at,
                   p.name AS project_name
            FROM monthly_self_reports r
            JOIN projects p ON p.id = r.project_id
            WHERE r.target_month=%s
        """
        params: list = [target_month]
        if member_id is not None:
            sql += " AND r.member_id=%s"
            params.append(member_id)
        with db_cursor(self._db) as (_, cur):
            cur.execute(sql + " ORDER BY r.created_at ASC, r.id ASC", tuple(params))
            rows = fetchall(cur)
        return [
            SelfReport(
                report_id=int(r["id"]),
                member_id=int(r["member_id"]),
                target_month=r["target_month"],
                project_id=int(r["project_id"]),
                reported_hours=float(r["reported_hours"] or 0),
                project_name=r.get("project_name"),
                submitted_at=r.get("submitted_at"),
            )
            for r in rows
        ]

    def upsert_many(
        self, member_id: int, target_month: str, allocations: Sequence[Allocation], *, submitted_at: datetime
    ) -> int:
        with db_cursor(self._db) as (_, cur):
            for a in allocations:
                cur.execute(
                    """
                    INSERT INTO monthly_self_reports (member_id, target_month, project_id, reported_hours, submitted_at)
                    VALUES (%s, %s, %s, %s, %s)
                    ON DUPLICATE KEY UPDATE reported_hours=VALUES(reported_hours), submitted_at=VALUES(submitted_at)
                    """,
                    (member_id, target_month, a.project_id, a.reported_hours, submitted_at),
                )
        return len(allocations)
