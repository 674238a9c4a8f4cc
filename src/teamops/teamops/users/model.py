from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Company, Role


@dataclass(frozen=True)
class UserAccount:
    """Login account, 1:1 with a member."""

    account_id: int
    member_id: int
    email: str
    password_hash: str
    role: Role
    member_name: str
    company: Optional[Company] = None
    member_deleted: bool = False


@dataclass(frozen=True)
class SessionUser:
    """What we store into the session cookie after login."""

    id: int
    member_id: int
    email: str
    role: Role
    name: str
    company: Optional[Company] = None

    def to_session(self) -> dict:
        return {
            "id": self.id,
            "memberId": self.member_id,
            "email": self.email,
            "role": self.role.value,
            "name": self.name,
            "company": self.company.value if self.company else None,
        }

    @classmethod
    def from_session(cls, data: Optional[dict]) -> Optional["SessionUser"]:
        if not data or "id" not in data or "memberId" not in data:
            return None
        company = data.get("company")
        return cls(
            id=int(data["id"]),
            member_id=int(data["memberId"]),
            email=str(data.get("email", "")),
            role=Role.normalize(data.get("role", "member")),
            name=str(data.get("name", "")),
            company=Company(company) if company else None,
        )
