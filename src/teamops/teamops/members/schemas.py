from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..core.enums import Company, MemberStatus, Role, SalaryType

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class MemberCreate(BaseModel):
    """POST /api/members request body"""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8)
    phone: Optional[str] = Field(None, max_length=20)
    company: Company
    role: Role
    status: MemberStatus
    salaryType: SalaryType
    salaryAmount: int = Field(..., gt=0)
    joinedAt: date

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class MemberUpdate(BaseModel):
    """PUT /api/members/{id} request body; every field optional."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=8)
    phone: Optional[str] = Field(None, max_length=20)
    company: Optional[Company] = None
    role: Optional[Role] = None
    status: Optional[MemberStatus] = None
    salaryType: Optional[SalaryType] = None
    salaryAmount: Optional[int] = Field(None, gt=0)
    joinedAt: Optional[date] = None
    leftAt: Optional[date] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class ProfileUpdate(BaseModel):
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    bankName: Optional[str] = Field(None, max_length=100)
    bankBranch: Optional[str] = Field(None, max_length=100)
    bankAccountNumber: Optional[str] = Field(None, max_length=20)
    bankAccountHolder: Optional[str] = Field(None, max_length=100)


class ToolUpsert(BaseModel):
    toolName: str = Field(..., min_length=1, max_length=100)
    plan: Optional[str] = Field(None, max_length=50)
    monthlyCost: int = Field(0, ge=0)
    companyLabel: Company = Company.SALT2
    note: Optional[str] = Field(None, max_length=200)


class ToolCreateForMember(ToolUpsert):
    """POST /api/tools request body"""

    memberId: int
