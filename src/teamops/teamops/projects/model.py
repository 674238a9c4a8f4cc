from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import Company, ProjectContractType, ProjectStatus, ProjectType


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    status: ProjectStatus
    company: Company
    project_type: ProjectType
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    client_name: Optional[str] = None
    contract_type: Optional[ProjectContractType] = None
    monthly_contract_amount: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.project_id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "company": self.company.value,
            "projectType": self.project_type.value,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "clientName": self.client_name,
            "contractType": self.contract_type.value if self.contract_type else None,
            "monthlyContractAmount": self.monthly_contract_amount,
        }


@dataclass(frozen=True)
class Position:
    position_id: int
    project_id: int
    position_name: str
    required_count: int = 1
    assignment_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.position_id,
            "positionName": self.position_name,
            "requiredCount": self.required_count,
            "assignmentCount": self.assignment_count,
        }


@dataclass(frozen=True)
class Assignment:
    """Read-model of a project assignment joined with member/position/project names."""

    assignment_id: int
    project_id: int
    position_id: int
    member_id: int
    workload_hours: float
    start_date: date
    end_date: Optional[date] = None
    member_name: Optional[str] = None
    member_company: Optional[str] = None
    position_name: Optional[str] = None
    project_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.assignment_id,
            "projectId": self.project_id,
            "memberId": self.member_id,
            "memberName": self.member_name,
            "memberCompany": self.member_company,
            "positionId": self.position_id,
            "positionName": self.position_name,
            "workloadHours": self.workload_hours,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
        }


@dataclass(frozen=True)
class NewPosition:
    position_name: str
    required_count: int = 1
