from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..common.validators import MONTH_RE


def _check_month(v: str) -> str:
    if not MONTH_RE.match(v):
        raise ValueError("targetMonth は YYYY-MM 形式で指定してください")
    return v


class PLUpsert(BaseModel):
    """PUT /api/pl-records request body"""

    projectId: int
    targetMonth: str
    revenueContract: int = 0
    revenueExtra: int = 0
    costLaborMonthly: int = 0
    costLaborHourly: int = 0
    costOutsourcing: int = 0
    costTools: int = 0
    costOther: int = 0
    markupRate: Optional[float] = Field(None, ge=0)
    memo: Optional[str] = None

    @field_validator("targetMonth")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _check_month(v)


class PLAdjust(BaseModel):
    """PATCH /api/pl-records request body"""

    id: int
    markupRate: Optional[float] = Field(None, ge=0)
    revenueExtra: Optional[int] = None


class PLGenerate(BaseModel):
    targetMonth: str

    @field_validator("targetMonth")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _check_month(v)
