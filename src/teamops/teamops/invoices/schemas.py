from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..common.validators import MONTH_RE


def check_month(value: str) -> str:
    if not MONTH_RE.match(value):
        raise ValueError("targetMonth は YYYY-MM 形式で指定してください")
    return value


class InvoiceCreate(BaseModel):
    """POST /api/invoices request body"""

    targetMonth: str
    workHoursTotal: float = Field(..., ge=0)
    unitPrice: int = Field(..., ge=0)
    note: Optional[str] = Field(None, max_length=500)

    @field_validator("targetMonth")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return check_month(v)


class InvoiceItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: int
    taxable: bool = True
    linkedProjectId: Optional[int] = None


class InvoiceGenerate(BaseModel):
    """POST /api/invoices/generate request body"""

    targetMonth: str
    items: list[InvoiceItemIn] = Field(..., min_length=1)
    workHoursTotal: Optional[float] = Field(None, ge=0)
    unitPrice: Optional[int] = Field(None, ge=0)
    note: Optional[str] = Field(None, max_length=500)

    @field_validator("targetMonth")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return check_month(v)
