from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Assignment, NewPosition, Position, Project


class ProjectRepository(Protocol):
    def list_projects(self, *, company: Optional[str] = None, status: Optional[str] = None) -> Sequence[Project]:
        raise NotImplementedError

    def get_project(self, project_id: int) -> Optional[Project]:
        """None when missing or soft-deleted."""
        raise NotImplementedError

    def get_projects(self, project_ids: Sequence[int]) -> Sequence[Project]:
        """Non-deleted projects among the given ids."""
        raise NotImplementedError

    def create_project(self, fields: dict, positions: Sequence[NewPosition], *, actor_id: Optional[int]) -> int:
        """Project, positions and audit entry in one transaction."""
        raise NotImplementedError

    def update_project(self, project_id: int, fields: dict, *, actor_id: Optional[int]) -> None:
        raise NotImplementedError

    def soft_delete(self, project_id: int, *, actor_id: Optional[int]) -> None:
        raise NotImplementedError

    def list_positions(self, project_id: int) -> Sequence[Position]:
        raise NotImplementedError

    def get_position(self, *, project_id: int, position_id: int) -> Optional[Position]:
        raise NotImplementedError

    def add_position(self, project_id: int, position: NewPosition) -> int:
        raise NotImplementedError

    def list_assignments(self, project_ids: Sequence[int]) -> Sequence[Assignment]:
        raise NotImplementedError

    def get_assignment(self, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def create_assignment(
        self,
        *,
        project_id: int,
        position_id: int,
        member_id: int,
        workload_hours: float,
        start_date: date,
        end_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def update_workload(self, assignment_id: int, workload_hours: float) -> None:
        raise NotImplementedError

    def delete_assignment(self, assignment_id: int) -> None:
        raise NotImplementedError

    def assignments_overlapping(
        self,
        *,
        start: date,
        end: date,
        project_ids: Optional[Sequence[int]] = None,
        member_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Assignment]:
        """Assignments whose [start_date, end_date] overlaps [start, end] on live projects."""
        raise NotImplementedError
