from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Member, NewMember


class MemberRepository(Protocol):
    def list_members(
        self,
        *,
        q: Optional[str] = None,
        company: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Sequence[Member]:
        raise NotImplementedError

    def list_not_deleted(self) -> Sequence[Member]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Member]:
        """Members neither soft-deleted nor departed."""
        raise NotImplementedError

    def get_member(self, member_id: int) -> Optional[Member]:
        """Returns None for unknown or soft-deleted members."""
        raise NotImplementedError

    def email_exists(self, email: str, *, exclude_member_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create_member(self, new: NewMember, *, actor_id: Optional[int]) -> int:
        """Member + account + audit entry in one transaction."""
        raise NotImplementedError

    def update_member(
        self,
        member_id: int,
        *,
        member_fields: dict,
        account_fields: dict,
        actor_id: Optional[int],
    ) -> None:
        raise NotImplementedError

    def soft_delete(self, member_id: int, *, actor_id: Optional[int]) -> bool:
        raise NotImplementedError

    def update_profile(self, member_id: int, fields: dict) -> None:
        raise NotImplementedError
