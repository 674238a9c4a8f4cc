from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.enums import MemberStatus
from ..members.schemas import EMAIL_PATTERN


class _ContractFields(BaseModel):
    templateName: str = Field(..., min_length=1, max_length=200)
    docusignTemplateId: Optional[str] = Field(None, max_length=100)
    startDate: Optional[date] = None
    endDate: Optional[date] = None


class ContractDraft(_ContractFields):
    """POST /api/members/{id}/contracts request body"""

    signerEmail: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class ExistingMemberContract(ContractDraft):
    memberType: Literal["existing"]
    memberId: int


class NewMemberContract(_ContractFields):
    """Creates the member, its account and the draft contract together."""

    memberType: Literal["new"]
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    status: MemberStatus
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    bankName: Optional[str] = Field(None, max_length=100)
    bankBranch: Optional[str] = Field(None, max_length=100)
    bankAccountNumber: Optional[str] = Field(None, max_length=20)
    bankAccountHolder: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ContractVoid(BaseModel):
    reason: Optional[str] = Field(None, max_length=200)
