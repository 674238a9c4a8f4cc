from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MemberTool


class ToolRepository(Protocol):
    def list_for_member(self, member_id: int) -> Sequence[MemberTool]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        company: Optional[str] = None,
        member_id: Optional[int] = None,
        tool_name: Optional[str] = None,
    ) -> Sequence[MemberTool]:
        raise NotImplementedError

    def get(self, *, member_id: int, tool_id: int) -> Optional[MemberTool]:
        raise NotImplementedError

    def create(self, *, member_id: int, fields: dict) -> int:
        raise NotImplementedError

    def update(self, *, tool_id: int, fields: dict) -> None:
        raise NotImplementedError

    def delete(self, *, tool_id: int) -> None:
        raise NotImplementedError

    def monthly_totals(self, member_ids: Sequence[int]) -> dict[int, int]:
        """Sum of monthly tool cost per member."""
        raise NotImplementedError
