from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import MemberSkillEntry, Skill, SkillCategory


class SkillRepository(Protocol):
    def list_categories(self, *, category_id: Optional[int] = None) -> Sequence[SkillCategory]:
        raise NotImplementedError

    def get_category(self, category_id: int) -> Optional[SkillCategory]:
        raise NotImplementedError

    def category_name_taken(self, name: str, *, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create_category(self, *, name: str, description: Optional[str], display_order: int) -> int:
        raise NotImplementedError

    def update_category(self, category_id: int, fields: dict) -> None:
        raise NotImplementedError

    def category_has_evaluations(self, category_id: int) -> bool:
        raise NotImplementedError

    def delete_category(self, category_id: int) -> None:
        """Skills of the category and the category itself, in one transaction."""
        raise NotImplementedError

    def get_skill(self, *, category_id: int, skill_id: int) -> Optional[Skill]:
        raise NotImplementedError

    def skill_name_taken(self, *, category_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create_skill(self, *, category_id: int, name: str, description: Optional[str], display_order: int) -> int:
        raise NotImplementedError

    def update_skill(self, skill_id: int, fields: dict) -> None:
        raise NotImplementedError

    def delete_skill(self, skill_id: int) -> None:
        """Member evaluations of the skill and the skill itself, in one transaction."""
        raise NotImplementedError

    def member_history(self, member_id: int) -> Sequence[MemberSkillEntry]:
        """Newest first."""
        raise NotImplementedError

    def latest_for_member(self, member_id: int) -> Sequence[MemberSkillEntry]:
        raise NotImplementedError

    def add_member_skill(
        self,
        *,
        member_id: int,
        skill_id: int,
        level: int,
        evaluated_at: date,
        memo: Optional[str],
        evaluated_by: int,
    ) -> int:
        raise NotImplementedError

    def get_member_skill(self, entry_id: int) -> Optional[MemberSkillEntry]:
        raise NotImplementedError

    def latest_levels(self, *, member_ids: Sequence[int], skill_ids: Sequence[int]) -> dict[int, dict[int, int]]:
        """member_id -> skill_id -> newest level."""
        raise NotImplementedError
