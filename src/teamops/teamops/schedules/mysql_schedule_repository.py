from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LocationType
from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, in_clause, normalize_mysql_time
from .model import ScheduleEntry, WorkSchedule
from .repository import ScheduleRepository

_COLUMNS = "id, member_id, work_date, start_time, end_time, is_off, location_type"


def _to_schedule(r: dict) -> WorkSchedule:
    return WorkSchedule(
        schedule_id=int(r["id"]),
        member_id=int(r["member_id"]),
        work_date=r["work_date"],
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        is_off=bool(r.get("is_off")),
        location_type=LocationType(r["location_type"]) if r.get("location_type") else None,
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_for_member(
        self, member_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[WorkSchedule]:
        clauses = ["member_id=%s"]
        params: list[object] = [int(member_id)]
        if start is not None:
            clauses.append("work_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("work_date <= %s")
            params.append(end)

        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_schedules WHERE {' AND '.join(clauses)} ORDER BY work_date ASC",
                tuple(params),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def bulk_upsert(self, member_id: int, entries: Sequence[ScheduleEntry]) -> int:
        with db_cursor(self._db) as (_, cur):
            for e in entries:
                cur.execute(
                    """
                    INSERT INTO work_schedules (member_id, work_date, start_time, end_time, is_off, location_type)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON DUPLICATE KEY UPDATE
                        start_time=VALUES(start_time),
                        end_time=VALUES(end_time),
                        is_off=VALUES(is_off),
                        location_type=VALUES(location_type)
                    """,
                    (
                        int(member_id),
                        e.work_date,
                        e.start_time,
                        e.end_time,
                        1 if e.is_off else 0,
                        e.location_type.value if e.location_type else None,
                    ),
                )
        return len(entries)

    def list_in_range(self, *, member_ids: Sequence[int], start: date, end: date) -> Sequence[WorkSchedule]:
        if not member_ids:
            return []
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM work_schedules
                WHERE member_id IN ({in_clause(member_ids)}) AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, member_id ASC
                """,
                (*[int(m) for m in member_ids], start, end),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def members_with_schedules(self, *, member_ids: Sequence[int], start: date, end: date) -> set[int]:
        if not member_ids:
            return set()
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT member_id FROM work_schedules
                WHERE member_id IN ({in_clause(member_ids)}) AND work_date BETWEEN %s AND %s
                """,
                (*[int(m) for m in member_ids], start, end),
            )
            return {int(r["member_id"]) for r in fetchall(cur)}
