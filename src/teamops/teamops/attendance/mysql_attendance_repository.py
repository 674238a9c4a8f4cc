from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, ConfirmStatus, LocationType
from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.id, a.member_id, a.work_date, a.clock_in, a.clock_out, a.break_minutes, a.work_minutes,
           a.todo_today, a.done_today, a.todo_tomorrow, a.status, a.confirm_status,
           a.slack_notified, a.location_type, m.name AS member_name
    FROM attendances a
    JOIN members m ON m.id = a.member_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        member_id=int(r["member_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        break_minutes=int(r.get("break_minutes") or 0),
        work_minutes=int(r["work_minutes"]) if r.get("work_minutes") is not None else None,
        todo_today=r.get("todo_today"),
        done_today=r.get("done_today"),
        todo_tomorrow=r.get("todo_tomorrow"),
        status=AttendanceStatus(r["status"]),
        confirm_status=ConfirmStatus(r["confirm_status"]),
        slack_notified=bool(r.get("slack_notified")),
        location_type=LocationType(r.get("location_type") or LocationType.OFFICE.value),
        member_name=r.get("member_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, db: Database):
        self._db = db

    def _get(self, cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(_SELECT + " WHERE a.id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._db) as (_, cur):
            return self._get(cur, attendance_id)

    def get_for_member_and_date(self, member_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE a.member_id=%s AND a.work_date=%s", (int(member_id), work_date))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_clock_in(
        self,
        *,
        member_id: int,
        work_date: date,
        clock_in: datetime,
        todo_today: Optional[str],
        location_type: LocationType,
    ) -> AttendanceRecord:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances (member_id, work_date, clock_in, todo_today, location_type)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    clock_in=IF(clock_in IS NULL OR clock_in > VALUES(clock_in), VALUES(clock_in), clock_in),
                    todo_today=COALESCE(VALUES(todo_today), todo_today)
                """,
                (int(member_id), work_date, clock_in, todo_today, location_type.value),
            )
            cur.execute(_SELECT + " WHERE a.member_id=%s AND a.work_date=%s", (int(member_id), work_date))
            return _to_record(fetchone(cur))

    def record_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        break_minutes: int,
        work_minutes: int,
        done_today: Optional[str],
        todo_tomorrow: Optional[str],
    ) -> AttendanceRecord:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET clock_out=%s, break_minutes=%s, work_minutes=%s, done_today=%s, todo_tomorrow=%s
                WHERE id=%s
                """,
                (clock_out, int(break_minutes), int(work_minutes), done_today, todo_tomorrow, int(attendance_id)),
            )
            return self._get(cur, attendance_id)

    def apply_correction(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        break_minutes: int,
        work_minutes: Optional[int],
    ) -> AttendanceRecord:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET clock_in=%s, clock_out=%s, break_minutes=%s, work_minutes=%s,
                    status=%s, confirm_status=%s
                WHERE id=%s
                """,
                (
                    clock_in,
                    clock_out,
                    int(break_minutes),
                    work_minutes,
                    AttendanceStatus.MODIFIED.value,
                    ConfirmStatus.UNCONFIRMED.value,
                    int(attendance_id),
                ),
            )
            return self._get(cur, attendance_id)

    def set_confirm_status(self, attendance_id: int, confirm_status: ConfirmStatus) -> AttendanceRecord:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE attendances SET confirm_status=%s WHERE id=%s",
                (confirm_status.value, int(attendance_id)),
            )
            return self._get(cur, attendance_id)

    def list_for_member(self, member_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.member_id=%s AND a.work_date BETWEEN %s AND %s ORDER BY a.work_date ASC",
                (int(member_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_in_range(self, *, member_ids: Sequence[int], start: date, end: date) -> Sequence[AttendanceRecord]:
        if not member_ids:
            return []
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _SELECT
                + f" WHERE a.member_id IN ({in_clause(member_ids)}) AND a.work_date BETWEEN %s AND %s"
                + " ORDER BY a.work_date ASC, a.member_id ASC",
                (*[int(m) for m in member_ids], start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_pending_corrections(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.status=%s AND a.confirm_status=%s ORDER BY a.work_date DESC",
                (AttendanceStatus.MODIFIED.value, ConfirmStatus.UNCONFIRMED.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_notified(self, member_id: int, *, start: date, end: date) -> int:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE attendances SET slack_notified=1 WHERE member_id=%s AND work_date BETWEEN %s AND %s",
                (int(member_id), start, end),
            )
            return int(cur.rowcount)
