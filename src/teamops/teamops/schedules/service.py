from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_hhmm, next_week_range, now_local, parse_hhmm
from ..core.enums import NotificationChannel
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..notifications.service import NotificationService
from ..projects.repository import ProjectRepository
from ..users.model import SessionUser
from .model import ScheduleEntry
from .repository import ScheduleRepository
from .schemas import ScheduleBatch

logger = logging.getLogger(__name__)


class ScheduleService:
    """Use case: work schedules, the team calendar and the unsubmitted report."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        attendance: AttendanceRepository,
        members: MemberRepository,
        projects: ProjectRepository,
        notifications: NotificationService,
    ):
        self._schedules = schedules
        self._attendance = attendance
        self._members = members
        self._projects = projects
        self._notifications = notifications

    def list_for_member(
        self, actor: SessionUser, member_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[dict]:
        authorizer.require(actor, "schedule", "read", owner_member_id=member_id)
        return [s.to_dict() for s in self._schedules.list_for_member(member_id, start=start, end=end)]

    def bulk_upsert(self, actor: SessionUser, member_id: int, batch: ScheduleBatch) -> dict:
        authorizer.require(actor, "schedule", "write", owner_member_id=member_id)
        member = self._members.get_member(member_id)
        if not member:
            raise NotFoundError("メンバーが見つかりません")

        entries = [
            ScheduleEntry(
                work_date=item.date,
                start_time=None if item.isOff or not item.startTime else parse_hhmm(item.startTime),
                end_time=None if item.isOff or not item.endTime else parse_hhmm(item.endTime),
                is_off=item.isOff,
                location_type=None if item.isOff else item.locationType,
            )
            for item in batch.root
        ]
        saved = self._schedules.bulk_upsert(member_id, entries)

        if saved:
            dates = sorted(e.work_date for e in entries)
            self._notifications.slack(
                NotificationChannel.SCHEDULE,
                f"[勤務予定] {member.name} が勤務予定を登録しました（{saved}件: {dates[0]}〜{dates[-1]}）",
            )
        return {"saved": saved}

    def calendar(self, actor: SessionUser, *, start: date, end: date) -> dict:
        authorizer.require(actor, "calendar", "read")
        if end < start:
            raise ValidationError("to は from 以降の日付を指定してください")

        members = self._members.list_active()
        member_ids = [m.member_id for m in members]
        schedules = self._schedules.list_in_range(member_ids=member_ids, start=start, end=end)
        attendances = self._attendance.list_in_range(member_ids=member_ids, start=start, end=end)
        assignments = self._projects.assignments_overlapping(start=start, end=end, member_ids=member_ids)

        projects: dict[int, dict] = {}
        for a in assignments:
            projects.setdefault(a.project_id, {"id": a.project_id, "name": a.project_name})

        return {
            "members": [{"id": m.member_id, "name": m.name, "company": m.company.value} for m in members],
            "schedules": [
                {k: v for k, v in s.to_dict().items() if k != "id"} for s in schedules
            ],
            "attendances": [
                {
                    "memberId": a.member_id,
                    "date": a.work_date.isoformat(),
                    "clockIn": format_hhmm(a.clock_in),
                    "clockOut": format_hhmm(a.clock_out),
                    "confirmStatus": a.confirm_status.value,
                }
                for a in attendances
            ],
            "assignments": [
                {
                    "memberId": a.member_id,
                    "projectId": a.project_id,
                    "positionName": a.position_name,
                    "workloadHours": a.workload_hours,
                    "startDate": a.start_date.isoformat(),
                    "endDate": a.end_date.isoformat() if a.end_date else None,
                }
                for a in assignments
            ],
            "projects": list(projects.values()),
        }

    def unsubmitted(self, actor: SessionUser, *, today: Optional[date] = None) -> dict:
        """Active members with no schedule row at all in next week (Mon..Sun)."""
        authorizer.require(actor, "schedule", "unsubmitted")
        start, end = next_week_range(today or now_local().date())

        members = self._members.list_active()
        submitted = self._schedules.members_with_schedules(
            member_ids=[m.member_id for m in members], start=start, end=end
        )
        missing = [m for m in members if m.member_id not in submitted]

        return {
            "from": start.isoformat(),
            "to": end.isoformat(),
            "total": len(members),
            "unsubmitted": [{"memberId": m.member_id, "memberName": m.name} for m in missing],
        }

    def notify_unsubmitted(self, actor: SessionUser, *, today: Optional[date] = None) -> dict:
        authorizer.require(actor, "schedule", "unsubmitted")
        report = self.unsubmitted(actor, today=today)
        names = [u["memberName"] for u in report["unsubmitted"]]
        if names:
            lines = "\n".join(f"・{n}" for n in names)
            self._notifications.slack(
                NotificationChannel.SCHEDULE,
                f"[勤務予定未提出] {report['from']}〜{report['to']} の勤務予定が未登録です\n{lines}",
            )
        logger.info("unsubmitted schedule reminder: %d member(s)", len(names))
        return {**report, "notified": bool(names)}
