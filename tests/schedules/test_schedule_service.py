from __future__ import annotations

from datetime import date, time

import pytest

from src.teamops.teamops.common.datetime_utils import next_week_range
from src.teamops.teamops.core.enums import Company, MemberStatus, NotificationChannel, SalaryType
from src.teamops.teamops.core.exceptions import AuthorizationError, ValidationError
from src.teamops.teamops.members.model import Member
from src.teamops.teamops.schedules.model import WorkSchedule
from src.teamops.teamops.schedules.schemas import ScheduleBatch
from src.teamops.teamops.schedules.service import ScheduleService


def _member(member_id, name):
    return Member(
        member_id=member_id,
        name=name,
        status=MemberStatus.EMPLOYEE,
        company=Company.BOOST,
        salary_type=SalaryType.MONTHLY,
        salary_amount=200000,
        joined_at=date(2025, 4, 1),
    )


class InMemoryMembers:
    def __init__(self, members):
        self._members = {m.member_id: m for m in members}

    def list_active(self):
        return list(self._members.values())

    def get_member(self, member_id):
        return self._members.get(member_id)


class InMemorySchedules:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.saved = []

    def bulk_upsert(self, member_id, entries):
        self.saved.append((member_id, list(entries)))
        return len(entries)

    def members_with_schedules(self, *, member_ids, start, end):
        return {s.member_id for s in self.rows if s.member_id in member_ids and start <= s.work_date <= end}

    def list_in_range(self, *, member_ids, start, end):
        return [s for s in self.rows if s.member_id in member_ids and start <= s.work_date <= end]


class EmptyAttendance:
    def list_in_range(self, *, member_ids, start, end):
        return []


class EmptyProjects:
    def assignments_overlapping(self, *, start, end, member_ids):
        return []


MEMBERS = [_member(3, "山田"), _member(4, "佐藤"), _member(5, "鈴木")]


def _service(rows, notifications):
    schedules = InMemorySchedules(rows)
    return (
        ScheduleService(schedules, EmptyAttendance(), InMemoryMembers(MEMBERS), EmptyProjects(), notifications),
        schedules,
    )


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2026, 4, 1), (date(2026, 4, 6), date(2026, 4, 12))),
        (date(2026, 4, 5), (date(2026, 4, 6), date(2026, 4, 12))),
        (date(2026, 4, 6), (date(2026, 4, 13), date(2026, 4, 19))),
    ],
)
def test_next_week_range_is_strictly_after_today(today, expected):
    assert next_week_range(today) == expected


def test_single_day_off_row_counts_as_submitted(manager, notifications):
    rows = [
        WorkSchedule(schedule_id=1, member_id=3, work_date=date(2026, 4, 7), start_time=time(9), end_time=time(18)),
        WorkSchedule(schedule_id=2, member_id=4, work_date=date(2026, 4, 12), is_off=True),
        # outside next week
        WorkSchedule(schedule_id=3, member_id=5, work_date=date(2026, 4, 13)),
    ]
    svc, _ = _service(rows, notifications)

    report = svc.unsubmitted(manager, today=date(2026, 4, 1))

    assert report["from"] == "2026-04-06"
    assert report["to"] == "2026-04-12"
    assert report["total"] == 3
    assert report["unsubmitted"] == [{"memberId": 5, "memberName": "鈴木"}]


def test_notify_unsubmitted_posts_names(manager, notifications):
    svc, _ = _service([], notifications)

    result = svc.notify_unsubmitted(manager, today=date(2026, 4, 1))

    assert result["notified"] is True
    channel, text = notifications.slack_messages[0]
    assert channel is NotificationChannel.SCHEDULE
    assert "・山田" in text and "・鈴木" in text


def test_unsubmitted_is_staff_only(member, notifications):
    svc, _ = _service([], notifications)
    with pytest.raises(AuthorizationError):
        svc.unsubmitted(member, today=date(2026, 4, 1))


def test_bulk_upsert_drops_times_on_day_off(member, notifications):
    svc, schedules = _service([], notifications)
    batch = ScheduleBatch.model_validate(
        [
            {"date": "2026-04-06", "startTime": "09:00", "endTime": "18:00", "locationType": "office"},
            {"date": "2026-04-07", "startTime": "09:00", "isOff": True, "locationType": "remote"},
        ]
    )

    assert svc.bulk_upsert(member, member.member_id, batch) == {"saved": 2}

    _, entries = schedules.saved[0]
    assert entries[0].start_time == time(9, 0)
    assert entries[1].start_time is None
    assert entries[1].location_type is None
    assert notifications.slack_messages[0][0] is NotificationChannel.SCHEDULE


def test_member_cannot_write_another_members_schedule(member, notifications):
    svc, _ = _service([], notifications)
    batch = ScheduleBatch.model_validate([{"date": "2026-04-06"}])
    with pytest.raises(AuthorizationError):
        svc.bulk_upsert(member, 4, batch)


def test_calendar_rejects_inverted_range(manager, notifications):
    svc, _ = _service([], notifications)
    with pytest.raises(ValidationError):
        svc.calendar(manager, start=date(2026, 4, 10), end=date(2026, 4, 1))
