from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Company, MemberStatus, Role, SalaryType

PRIVATE_FIELDS = ("address", "bankName", "bankBranch", "bankAccountNumber", "bankAccountHolder")
DUPLICATE_EMAIL = "そのメールアドレスはすでに登録されています"


@dataclass(frozen=True)
class Member:
    """Domain entity: a person (employee or contractor) with their login account."""

    member_id: int
    name: str
    status: MemberStatus
    company: Company
    salary_type: SalaryType
    salary_amount: int
    joined_at: date
    email: Optional[str] = None
    role: Optional[Role] = None
    phone: Optional[str] = None
    left_at: Optional[date] = None
    deleted_at: Optional[datetime] = None
    address: Optional[str] = None
    bank_name: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_account_holder: Optional[str] = None

    def to_dict(self, *, include_private: bool = False) -> dict:
        data = {
            "id": self.member_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value if self.role else None,
            "phone": self.phone,
            "status": self.status.value,
            "company": self.company.value,
            "salaryType": self.salary_type.value,
            "salaryAmount": self.salary_amount,
            "joinedAt": self.joined_at.isoformat(),
            "leftAt": self.left_at.isoformat() if self.left_at else None,
        }
        if include_private:
            data.update(
                {
                    "address": self.address,
                    "bankName": self.bank_name,
                    "bankBranch": self.bank_branch,
                    "bankAccountNumber": self.bank_account_number,
                    "bankAccountHolder": self.bank_account_holder,
                }
            )
        return data


@dataclass(frozen=True)
class NewMember:
    """Write model for member creation (member row + account row)."""

    name: str
    email: str
    password_hash: str
    role: Role
    status: MemberStatus
    company: Company = Company.BOOST
    salary_type: SalaryType = SalaryType.MONTHLY
    salary_amount: int = 0
    joined_at: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bank_name: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_account_holder: Optional[str] = None


@dataclass(frozen=True)
class MemberTool:
    tool_id: int
    member_id: int
    tool_name: str
    plan: Optional[str]
    monthly_cost: int
    company_label: Company
    note: Optional[str] = None
    member_name: Optional[str] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.tool_id,
            "memberId": self.member_id,
            "memberName": self.member_name,
            "toolName": self.tool_name,
            "plan": self.plan,
            "monthlyCost": self.monthly_cost,
            "companyLabel": self.company_label.value,
            "note": self.note,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
