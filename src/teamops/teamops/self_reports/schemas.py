from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ..common.validators import MONTH_RE


class AllocationIn(BaseModel):
    projectId: int
    reportedHours: float = Field(..., ge=0, le=744)


class SelfReportSubmit(BaseModel):
    """POST /api/self-reports request body"""

    targetMonth: str
    allocations: list[AllocationIn]

    @field_validator("targetMonth")
    @classmethod
    def validate_month(cls, v: str) -> str:
        if not MONTH_RE.match(v):
            raise ValueError("targetMonth は YYYY-MM 形式で指定してください")
        return v
