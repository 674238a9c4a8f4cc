from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import combine_hhmm, format_hhmm, month_bounds, month_of, now_local
from ..core.enums import NotificationChannel
from ..core.exceptions import NotFoundError
from ..core.policy import authorizer
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from .calculator.base import WorkTimeCalculator
from .calculator.standard_calculator import StandardWorkTimeCalculator
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .schemas import ClockInRequest, ClockOutRequest, ConfirmRequest, CorrectionRequest
from .status import display_status

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "勤怠記録が見つかりません"


class AttendanceService:
    """Use case: clock-in/out, self-correction and the review workflow."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        notifications: NotificationService,
        *,
        calculator: Optional[WorkTimeCalculator] = None,
    ):
        self._attendance = attendance
        self._notifications = notifications
        self._calculator = calculator or StandardWorkTimeCalculator()

    def _require(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get(attendance_id)
        if not record:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return record

    def _actual_hours(self, r: AttendanceRecord) -> Optional[float]:
        return self._calculator.actual_hours(
            work_minutes=r.work_minutes, clock_in=r.clock_in, clock_out=r.clock_out, break_minutes=r.break_minutes
        )

    def to_row(self, r: AttendanceRecord) -> dict:
        return {
            "id": r.attendance_id,
            "date": r.work_date.isoformat(),
            "clockIn": format_hhmm(r.clock_in),
            "clockOut": format_hhmm(r.clock_out),
            "breakMinutes": r.break_minutes,
            "actualHours": self._actual_hours(r),
            "status": display_status(r).value,
            "confirmStatus": r.confirm_status.value,
            "todoToday": r.todo_today,
            "doneToday": r.done_today,
            "todoTomorrow": r.todo_tomorrow,
            "isModified": r.is_modified,
        }

    # --- self-service -----------------------------------------------------

    def clock_in(self, actor: SessionUser, payload: ClockInRequest, *, now: Optional[datetime] = None) -> dict:
        record = self._attendance.upsert_clock_in(
            member_id=actor.member_id,
            work_date=payload.date,
            clock_in=now or now_local(),
            todo_today=payload.todoToday or None,
            location_type=payload.locationType,
        )

        text = f"[出勤] {actor.name} {format_hhmm(record.clock_in)}"
        if payload.todoToday:
            text += f"\n今日の予定:\n{payload.todoToday}"
        self._notifications.slack(NotificationChannel.ATTENDANCE, text)

        return {
            "id": record.attendance_id,
            "date": record.work_date.isoformat(),
            "clockIn": record.clock_in.isoformat(),
            "status": "working",
        }

    def clock_out(self, actor: SessionUser, payload: ClockOutRequest, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        existing = self._attendance.get_for_member_and_date(actor.member_id, payload.date)
        if not existing or not existing.clock_in:
            raise NotFoundError("出勤記録が見つかりません")

        work_minutes = self._calculator.worked_minutes(existing.clock_in, now, payload.breakMinutes)
        record = self._attendance.record_clock_out(
            attendance_id=existing.attendance_id,
            clock_out=now,
            break_minutes=payload.breakMinutes,
            work_minutes=work_minutes,
            done_today=payload.doneToday or None,
            todo_tomorrow=payload.todoTomorrow or None,
        )

        text = f"[退勤] {actor.name} {format_hhmm(now)}（実働 {work_minutes // 60}時間{work_minutes % 60}分）"
        if payload.doneToday:
            text += f"\n今日やったこと:\n{payload.doneToday}"
        if payload.todoTomorrow:
            text += f"\n明日の予定:\n{payload.todoTomorrow}"
        self._notifications.slack(NotificationChannel.ATTENDANCE, text)

        return {
            "id": record.attendance_id,
            "date": record.work_date.isoformat(),
            "clockOut": record.clock_out.isoformat(),
            "workMinutes": record.work_minutes,
            "status": "done",
        }

    def today(self, actor: SessionUser, *, now: Optional[datetime] = None) -> Optional[dict]:
        """Today's record, or yesterday's when it is still open past midnight."""
        today = (now or now_local()).date()
        record = self._attendance.get_for_member_and_date(actor.member_id, today)
        if record is None:
            prev = self._attendance.get_for_member_and_date(actor.member_id, today - timedelta(days=1))
            if prev and prev.clock_in and not prev.clock_out:
                record = prev
        if record is None:
            return None

        return {
            "id": record.attendance_id,
            "date": record.work_date.isoformat(),
            "clockIn": format_hhmm(record.clock_in),
            "clockOut": format_hhmm(record.clock_out),
            "breakMinutes": record.break_minutes,
            "todoToday": record.todo_today,
            "doneToday": record.done_today,
            "todoTomorrow": record.todo_tomorrow,
            "locationType": record.location_type.value,
            "status": display_status(record).value,
        }

    def list_month(
        self,
        actor: SessionUser,
        *,
        member_id: Optional[int] = None,
        month: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[dict]:
        member_id = actor.member_id if member_id is None else member_id
        authorizer.require(actor, "attendance", "read", owner_member_id=member_id)

        start, end = month_bounds(month or month_of(today or now_local().date()))
        return [self.to_row(r) for r in self._attendance.list_for_member(member_id, start=start, end=end)]

    # --- corrections and review ------------------------------------------

    def correct(self, actor: SessionUser, attendance_id: int, payload: CorrectionRequest) -> dict:
        record = self._require(attendance_id)
        authorizer.require(actor, "attendance", "correct", owner_member_id=record.member_id)

        clock_in = combine_hhmm(record.work_date, payload.clockIn) if payload.clockIn else record.clock_in
        clock_out = combine_hhmm(record.work_date, payload.clockOut) if payload.clockOut else record.clock_out
        break_minutes = payload.breakMinutes if payload.breakMinutes is not None else record.break_minutes

        work_minutes = record.work_minutes
        if clock_in and clock_out:
            work_minutes = self._calculator.worked_minutes(clock_in, clock_out, break_minutes)

        updated = self._attendance.apply_correction(
            attendance_id=attendance_id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            work_minutes=work_minutes,
        )
        logger.info("attendance %s corrected by member %s", attendance_id, actor.member_id)
        return self.to_row(updated)

    def confirm(self, actor: SessionUser, attendance_id: int, payload: ConfirmRequest) -> dict:
        authorizer.require(actor, "attendance", "confirm")
        self._require(attendance_id)
        updated = self._attendance.set_confirm_status(attendance_id, payload.confirmStatus)
        return {"id": updated.attendance_id, "confirmStatus": updated.confirm_status.value}

    def corrections(self, actor: SessionUser) -> list[dict]:
        authorizer.require(actor, "attendance", "corrections")
        return [
            {
                "id": r.attendance_id,
                "memberId": r.member_id,
                "memberName": r.member_name,
                "date": r.work_date.isoformat(),
                "clockIn": format_hhmm(r.clock_in),
                "clockOut": format_hhmm(r.clock_out),
                "breakMinutes": r.break_minutes,
                "actualHours": self._actual_hours(r),
                "confirmStatus": r.confirm_status.value,
            }
            for r in self._attendance.list_pending_corrections()
        ]
