from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ConfirmStatus, LocationType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_member_and_date(self, member_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_clock_in(
        self,
        *,
        member_id: int,
        work_date: date,
        clock_in: datetime,
        todo_today: Optional[str],
        location_type: LocationType,
    ) -> AttendanceRecord:
        """Insert or update the (member, date) row keyed by the unique constraint.

        On an existing row the stored clock-in is replaced only when it is
        empty or later than ``clock_in``; ``location_type`` is kept and a
        ``todo_today`` of None keeps the stored plan text.
        """
        raise NotImplementedError

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
        raise NotImplementedError

    def apply_correction(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        break_minutes: int,
        work_minutes: Optional[int],
    ) -> AttendanceRecord:
        """Store corrected times; status=modified, confirmStatus=unconfirmed."""
        raise NotImplementedError

    def set_confirm_status(self, attendance_id: int, confirm_status: ConfirmStatus) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_member(self, member_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_in_range(self, *, member_ids: Sequence[int], start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_pending_corrections(self) -> Sequence[AttendanceRecord]:
        """Rows with status=modified and confirmStatus=unconfirmed, member_name filled."""
        raise NotImplementedError

    def mark_notified(self, member_id: int, *, start: date, end: date) -> int:
        raise NotImplementedError
