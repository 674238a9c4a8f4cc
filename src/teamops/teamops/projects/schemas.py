from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..core.constants import MAX_WORKLOAD_HOURS
from ..core.enums import Company, ProjectContractType, ProjectStatus, ProjectType


class PositionCreate(BaseModel):
    positionName: str = Field(..., min_length=1, max_length=100)
    requiredCount: int = Field(1, ge=1)


class ProjectCreate(BaseModel):
    """POST /api/projects request body"""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    company: Company
    projectType: ProjectType = ProjectType.SALT2_OWN
    startDate: date
    endDate: Optional[date] = None
    clientName: Optional[str] = Field(None, max_length=200)
    contractType: Optional[ProjectContractType] = None
    monthlyContractAmount: int = Field(0, ge=0)
    positions: list[PositionCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_period(self):
        if self.endDate and self.endDate < self.startDate:
            raise ValueError("endDate は startDate 以降の日付を指定してください")
        return self


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    company: Optional[Company] = None
    projectType: Optional[ProjectType] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    clientName: Optional[str] = Field(None, max_length=200)
    contractType: Optional[ProjectContractType] = None
    monthlyContractAmount: Optional[int] = Field(None, ge=0)


class AssignmentCreate(BaseModel):
    positionId: int
    memberId: int
    workloadHours: float = Field(..., ge=0, le=MAX_WORKLOAD_HOURS)
    startDate: date
    endDate: Optional[date] = None


class WorkloadUpdate(BaseModel):
    workloadHours: float = Field(..., ge=0, le=MAX_WORKLOAD_HOURS)
