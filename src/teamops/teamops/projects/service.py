from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import month_bounds, month_of, now_local
from ..core.enums import ProjectStatus
from ..core.exceptions import NotFoundError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..users.model import SessionUser
from .model import NewPosition, Project
from .repository import ProjectRepository
from .schemas import AssignmentCreate, PositionCreate, ProjectCreate, ProjectUpdate, WorkloadUpdate

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "プロジェクトが見つかりません"


def _column_values(fields: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in fields.items()}


class ProjectService:
    """Use case: projects, their positions and member assignments."""

    def __init__(self, projects: ProjectRepository, members: MemberRepository):
        self._projects = projects
        self._members = members

    def _require_project(self, project_id: int) -> Project:
        project = self._projects.get_project(project_id)
        if not project:
            raise NotFoundError(PROJECT_NOT_FOUND)
        return project

    def list_projects(self, actor: SessionUser, *, company=None, status=None) -> list[dict]:
        projects = self._projects.list_projects(company=company, status=status)
        by_project: dict[int, list[dict]] = {}
        for a in self._projects.list_assignments([p.project_id for p in projects]):
            by_project.setdefault(a.project_id, []).append(
                {
                    "id": a.assignment_id,
                    "memberId": a.member_id,
                    "memberName": a.member_name,
                    "positionName": a.position_name,
                    "workloadHours": a.workload_hours,
                }
            )
        return [{**p.to_dict(), "assignments": by_project.get(p.project_id, [])} for p in projects]

    def get_project(self, actor: SessionUser, project_id: int) -> dict:
        project = self._require_project(project_id)
        return {
            **project.to_dict(),
            "positions": [p.to_dict() for p in self._projects.list_positions(project_id)],
            "assignments": [a.to_dict() for a in self._projects.list_assignments([project_id])],
        }

    def create_project(self, actor: SessionUser, payload: ProjectCreate) -> dict:
        authorizer.require(actor, "project", "write")
        fields = _column_values(payload.model_dump(exclude={"positions"}))
        positions = [NewPosition(p.positionName.strip(), p.requiredCount) for p in payload.positions]
        project_id = self._projects.create_project(fields, positions, actor_id=actor.id)
        logger.info("project %s created by %s", project_id, actor.member_id)
        project = self._require_project(project_id)
        return {"id": project.project_id, "name": project.name, "status": project.status.value}

    def update_project(self, actor: SessionUser, project_id: int, payload: ProjectUpdate) -> dict:
        authorizer.require(actor, "project", "write")
        self._require_project(project_id)
        changes = payload.model_dump(exclude_unset=True)
        nullable = {"description", "endDate", "clientName", "contractType"}
        fields = _column_values({k: v for k, v in changes.items() if v is not None or k in nullable})
        self._projects.update_project(project_id, fields, actor_id=actor.id)
        project = self._require_project(project_id)
        return {"id": project.project_id, "name": project.name, "status": project.status.value}

    def delete_project(self, actor: SessionUser, project_id: int) -> None:
        authorizer.require(actor, "project", "delete")
        self._require_project(project_id)
        self._projects.soft_delete(project_id, actor_id=actor.id)

    def add_position(self, actor: SessionUser, project_id: int, payload: PositionCreate) -> dict:
        authorizer.require(actor, "project", "write")
        self._require_project(project_id)
        position_id = self._projects.add_position(
            project_id, NewPosition(payload.positionName.strip(), payload.requiredCount)
        )
        return {"id": position_id, "positionName": payload.positionName.strip(), "requiredCount": payload.requiredCount}

    # --- assignments ------------------------------------------------------

    def list_assignments(self, actor: SessionUser, project_id: int) -> list[dict]:
        self._require_project(project_id)
        return [a.to_dict() for a in self._projects.list_assignments([project_id])]

    def create_assignment(self, actor: SessionUser, project_id: int, payload: AssignmentCreate) -> dict:
        authorizer.require(actor, "assignment", "write")
        self._require_project(project_id)
        if not self._projects.get_position(project_id=project_id, position_id=payload.positionId):
            raise NotFoundError("ポジションが見つかりません")
        if not self._members.get_member(payload.memberId):
            raise NotFoundError("メンバーが見つかりません")

        assignment_id = self._projects.create_assignment(
            project_id=project_id,
            position_id=payload.positionId,
            member_id=payload.memberId,
            workload_hours=payload.workloadHours,
            start_date=payload.startDate,
            end_date=payload.endDate,
        )
        return self._projects.get_assignment(assignment_id).to_dict()

    def _require_assignment(self, project_id: int, assignment_id: int):
        assignment = self._projects.get_assignment(assignment_id)
        if not assignment or assignment.project_id != int(project_id):
            raise NotFoundError("アサインが見つかりません")
        return assignment

    def update_workload(self, actor: SessionUser, project_id: int, assignment_id: int, payload: WorkloadUpdate) -> dict:
        authorizer.require(actor, "assignment", "write")
        self._require_assignment(project_id, assignment_id)
        self._projects.update_workload(assignment_id, payload.workloadHours)
        return {"id": assignment_id, "workloadHours": payload.workloadHours}

    def delete_assignment(self, actor: SessionUser, project_id: int, assignment_id: int) -> None:
        authorizer.require(actor, "assignment", "write")
        self._require_assignment(project_id, assignment_id)
        self._projects.delete_assignment(assignment_id)

    # --- workload matrix --------------------------------------------------

    def workload(self, actor: SessionUser, *, month: Optional[str] = None, today: Optional[date] = None) -> dict:
        """Member x project matrix of workload hours for active projects."""
        start, end = month_bounds(month or month_of(today or now_local().date()))
        projects = self._projects.list_projects(status=ProjectStatus.ACTIVE.value)
        assignments = self._projects.assignments_overlapping(
            start=start, end=end, project_ids=[p.project_id for p in projects]
        )

        members: dict[int, dict] = {}
        matrix: dict[str, dict[str, dict]] = {}
        for a in assignments:
            members.setdefault(a.member_id, {"id": a.member_id, "name": a.member_name})
            matrix.setdefault(str(a.member_id), {})[str(a.project_id)] = {
                "assignId": a.assignment_id,
                "hours": a.workload_hours,
            }

        return {
            "members": list(members.values()),
            "projects": [{"id": p.project_id, "name": p.name, "status": p.status.value} for p in projects],
            "matrix": matrix,
        }
