from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..common.validators import MONTH_RE


class EvaluationUpsert(BaseModel):
    """POST /api/evaluations request body"""

    memberId: int
    targetPeriod: str
    scoreP: int = Field(..., ge=1, le=5)
    scoreA: int = Field(..., ge=1, le=5)
    scoreS: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("targetPeriod")
    @classmethod
    def validate_period(cls, v: str) -> str:
        if not MONTH_RE.match(v):
            raise ValueError("targetPeriod は YYYY-MM 形式で指定してください")
        return v
