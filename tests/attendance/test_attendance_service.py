from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.teamops.teamops.attendance.calculator.standard_calculator import StandardWorkTimeCalculator
from src.teamops.teamops.attendance.model import AttendanceRecord
from src.teamops.teamops.attendance.schemas import ClockInRequest, ClockOutRequest, ConfirmRequest, CorrectionRequest
from src.teamops.teamops.attendance.service import AttendanceService
from src.teamops.teamops.core.enums import AttendanceStatus, ConfirmStatus, LocationType, NotificationChannel
from src.teamops.teamops.core.exceptions import AuthorizationError, NotFoundError


class InMemoryAttendance:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def get_for_member_and_date(self, member_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self.rows.values():
            if r.member_id == member_id and r.work_date == work_date:
                return r
        return None

    def upsert_clock_in(self, *, member_id, work_date, clock_in, todo_today, location_type):
        existing = self.get_for_member_and_date(member_id, work_date)
        if existing:
            if existing.clock_in is not None and existing.clock_in <= clock_in:
                clock_in = existing.clock_in
            updated = replace(existing, clock_in=clock_in, todo_today=todo_today or existing.todo_today)
        else:
            updated = AttendanceRecord(
                attendance_id=self._next_id,
                member_id=member_id,
                work_date=work_date,
                clock_in=clock_in,
                clock_out=None,
                todo_today=todo_today,
                location_type=location_type,
            )
            self._next_id += 1
        self.rows[updated.attendance_id] = updated
        return updated

    def record_clock_out(self, *, attendance_id, clock_out, break_minutes, work_minutes, done_today, todo_tomorrow):
        updated = replace(
            self.rows[attendance_id],
            clock_out=clock_out,
            break_minutes=break_minutes,
            work_minutes=work_minutes,
            done_today=done_today,
            todo_tomorrow=todo_tomorrow,
        )
        self.rows[attendance_id] = updated
        return updated

    def apply_correction(self, *, attendance_id, clock_in, clock_out, break_minutes, work_minutes):
        updated = replace(
            self.rows[attendance_id],
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            work_minutes=work_minutes,
            status=AttendanceStatus.MODIFIED,
            confirm_status=ConfirmStatus.UNCONFIRMED,
        )
        self.rows[attendance_id] = updated
        return updated

    def set_confirm_status(self, attendance_id, confirm_status):
        updated = replace(self.rows[attendance_id], confirm_status=confirm_status)
        self.rows[attendance_id] = updated
        return updated

    def list_for_member(self, member_id, *, start, end):
        return [r for r in self.rows.values() if r.member_id == member_id and start <= r.work_date <= end]

    def list_pending_corrections(self):
        return [
            r
            for r in self.rows.values()
            if r.status is AttendanceStatus.MODIFIED and r.confirm_status is ConfirmStatus.UNCONFIRMED
        ]


@pytest.fixture
def repo():
    return InMemoryAttendance()


@pytest.fixture
def service(repo, notifications):
    return AttendanceService(repo, notifications)


def test_clock_out_subtracts_break_from_elapsed_minutes(service, member, notifications):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day, todoToday="設計"), now=datetime(2026, 4, 1, 9, 0))
    result = service.clock_out(
        member, ClockOutRequest(date=day, breakMinutes=60), now=datetime(2026, 4, 1, 18, 0)
    )

    assert result["workMinutes"] == 480
    assert result["status"] == "done"
    channel, text = notifications.slack_messages[-1]
    assert channel is NotificationChannel.ATTENDANCE
    assert "実働 8時間0分" in text


def test_second_clock_in_keeps_earlier_time(service, repo, member):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 10, 30))

    record = repo.get_for_member_and_date(member.member_id, day)
    assert record.clock_in == datetime(2026, 4, 1, 9, 0)


def test_clock_out_without_clock_in_is_not_found(service, member):
    with pytest.raises(NotFoundError):
        service.clock_out(member, ClockOutRequest(date=date(2026, 4, 1)), now=datetime(2026, 4, 1, 18, 0))


def test_worked_minutes_never_negative():
    calc = StandardWorkTimeCalculator()
    assert calc.worked_minutes(datetime(2026, 4, 1, 9, 0), datetime(2026, 4, 1, 9, 30), 60) == 0


def test_correction_recomputes_minutes_and_resets_review(service, repo, member):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))
    out = service.clock_out(member, ClockOutRequest(date=day, breakMinutes=60), now=datetime(2026, 4, 1, 18, 0))

    row = service.correct(member, out["id"], CorrectionRequest(clockIn="10:00"))

    assert row["actualHours"] == 7.0
    assert row["isModified"] is True
    assert row["confirmStatus"] == "unconfirmed"


def test_member_cannot_correct_someone_elses_record(service, repo, member, manager):
    day = date(2026, 4, 1)
    rec = service.clock_in(manager, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))

    with pytest.raises(AuthorizationError):
        service.correct(member, rec["id"], CorrectionRequest(clockIn="08:00"))


def test_today_falls_back_to_open_record_from_yesterday(service, member):
    service.clock_in(member, ClockInRequest(date=date(2026, 4, 1)), now=datetime(2026, 4, 1, 22, 0))

    today = service.today(member, now=datetime(2026, 4, 2, 1, 0))

    assert today["date"] == "2026-04-01"
    assert today["status"] == "working"


def test_second_clock_in_only_updates_plan_text(service, repo, member):
    day = date(2026, 4, 1)
    service.clock_in(
        member, ClockInRequest(date=day, locationType=LocationType.OFFICE), now=datetime(2026, 4, 1, 9, 0)
    )
    result = service.clock_in(
        member,
        ClockInRequest(date=day, todoToday="レビュー", locationType=LocationType.REMOTE),
        now=datetime(2026, 4, 1, 10, 0),
    )

    record = repo.get_for_member_and_date(member.member_id, day)
    assert record.clock_in == datetime(2026, 4, 1, 9, 0)
    assert record.location_type is LocationType.OFFICE
    assert record.todo_today == "レビュー"
    assert result["clockIn"] == "2026-04-01T09:00:00"


def test_earlier_clock_in_replaces_later_one(service, repo, member):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 10, 0))
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 8, 45))

    assert repo.get_for_member_and_date(member.member_id, day).clock_in == datetime(2026, 4, 1, 8, 45)


def test_repeated_clock_out_gives_same_minutes(service, member):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))
    out = ClockOutRequest(date=day, breakMinutes=45)

    first = service.clock_out(member, out, now=datetime(2026, 4, 1, 17, 30))
    second = service.clock_out(member, out, now=datetime(2026, 4, 1, 17, 30))

    assert first["workMinutes"] == second["workMinutes"] == 465


@pytest.mark.parametrize("reviewer", ["admin", "manager"])
def test_staff_correction_of_another_record_resets_review(request, service, repo, member, reviewer):
    staff = request.getfixturevalue(reviewer)
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))
    out = service.clock_out(member, ClockOutRequest(date=day), now=datetime(2026, 4, 1, 18, 0))
    service.confirm(staff, out["id"], ConfirmRequest(confirmStatus=ConfirmStatus.APPROVED))

    row = service.correct(staff, out["id"], CorrectionRequest(clockOut="17:00"))

    assert row["isModified"] is True
    assert row["confirmStatus"] == "unconfirmed"
    assert repo.get(out["id"]).status is AttendanceStatus.MODIFIED


def test_confirm_sets_review_state_without_touching_times(service, repo, member, manager):
    day = date(2026, 4, 1)
    service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, 1, 9, 0))
    out = service.clock_out(member, ClockOutRequest(date=day, breakMinutes=60), now=datetime(2026, 4, 1, 18, 0))

    result = service.confirm(manager, out["id"], ConfirmRequest(confirmStatus=ConfirmStatus.REJECTED))

    assert result == {"id": out["id"], "confirmStatus": "rejected"}
    record = repo.get(out["id"])
    assert record.clock_in == datetime(2026, 4, 1, 9, 0)
    assert record.work_minutes == 480


def test_member_cannot_confirm(service, member):
    rec = service.clock_in(member, ClockInRequest(date=date(2026, 4, 1)), now=datetime(2026, 4, 1, 9, 0))

    with pytest.raises(AuthorizationError):
        service.confirm(member, rec["id"], ConfirmRequest(confirmStatus=ConfirmStatus.CONFIRMED))


def test_confirm_unknown_record_is_not_found(service, admin):
    with pytest.raises(NotFoundError):
        service.confirm(admin, 999, ConfirmRequest(confirmStatus=ConfirmStatus.CONFIRMED))


def test_member_cannot_list_another_members_month(service, member, manager):
    service.clock_in(manager, ClockInRequest(date=date(2026, 4, 1)), now=datetime(2026, 4, 1, 9, 0))

    with pytest.raises(AuthorizationError):
        service.list_month(member, member_id=manager.member_id, month="2026-04")
    assert len(service.list_month(manager, month="2026-04")) == 1


def test_corrections_lists_only_modified_unconfirmed(service, member, manager):
    for d, corrected, reviewed in ((1, True, False), (2, True, True), (3, False, False)):
        day = date(2026, 4, d)
        rec = service.clock_in(member, ClockInRequest(date=day), now=datetime(2026, 4, d, 9, 0))
        if corrected:
            service.correct(member, rec["id"], CorrectionRequest(clockIn="08:30"))
        if reviewed:
            service.confirm(manager, rec["id"], ConfirmRequest(confirmStatus=ConfirmStatus.CONFIRMED))

    rows = service.corrections(manager)

    assert [r["date"] for r in rows] == ["2026-04-01"]
    with pytest.raises(AuthorizationError):
        service.corrections(member)
