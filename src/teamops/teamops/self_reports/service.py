from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import NotFoundError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..projects.repository import ProjectRepository
from ..users.model import SessionUser
from .model import Allocation
from .repository import SelfReportRepository
from .schemas import SelfReportSubmit

logger = logging.getLogger(__name__)


class SelfReportService:
    def __init__(self, reports: SelfReportRepository, members: MemberRepository, projects: ProjectRepository):
        self._reports = reports
        self._members = members
        self._projects = projects

    def monthly(self, actor: SessionUser, month: str) -> list[dict]:
        if not authorizer.allows(actor, "self_report", "read_all"):
            return [r.to_dict() for r in self._reports.list_for_month(month, member_id=actor.member_id)]

        by_member = defaultdict(list)
        for r in self._reports.list_for_month(month):
            by_member[r.member_id].append(r)

        rows = []
        for m in self._members.list_not_deleted():
            reports = by_member[m.member_id]
            stamps = [r.submitted_at for r in reports if r.submitted_at]
            rows.append(
                {
                    "memberId": m.member_id,
                    "memberName": m.name,
                    "submitted": bool(reports),
                    "totalHours": sum(r.reported_hours for r in reports),
                    "submittedAt": max(stamps).isoformat() if stamps else None,
                    "projects": [
                        {"projectId": r.project_id, "projectName": r.project_name, "reportedHours": r.reported_hours}
                        for r in reports
                    ],
                }
            )
        return rows

    def submit(self, actor: SessionUser, payload: SelfReportSubmit, *, now: Optional[datetime] = None) -> dict:
        project_ids = {a.projectId for a in payload.allocations}
        known = {p.project_id for p in self._projects.get_projects(sorted(project_ids))} if project_ids else set()
        unknown = project_ids - known
        if unknown:
            raise NotFoundError("プロジェクトが見つかりません", details={"projectIds": sorted(unknown)})

        saved = self._reports.upsert_many(
            actor.member_id,
            payload.targetMonth,
            [Allocation(project_id=a.projectId, reported_hours=a.reportedHours) for a in payload.allocations],
            submitted_at=now or now_local(),
        )
        logger.info("self report %s by member %s (%d projects)", payload.targetMonth, actor.member_id, saved)
        return {"ok": True}
