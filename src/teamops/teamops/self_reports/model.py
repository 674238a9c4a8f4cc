from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SelfReport:
    """Hours a member reports against one project for a month."""

    report_id: int
    member_id: int
    target_month: str
    project_id: int
    reported_hours: float
    project_name: Optional[str] = None
    submitted_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.report_id,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "reportedHours": self.reported_hours,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
        }


@dataclass(frozen=True)
class Allocation:
    project_id: int
    reported_hours: float
