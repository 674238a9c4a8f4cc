from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional


@dataclass(frozen=True)
class Skill:
    skill_id: int
    category_id: int
    name: str
    description: Optional[str] = None
    display_order: int = 99

    def to_dict(self) -> dict:
        return {
            "id": self.skill_id,
            "categoryId": self.category_id,
            "name": self.name,
            "description": self.description,
            "displayOrder": self.display_order,
        }


@dataclass(frozen=True)
class SkillCategory:
    category_id: int
    name: str
    description: Optional[str] = None
    display_order: int = 99
    skills: tuple = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.category_id,
            "name": self.name,
            "description": self.description,
            "displayOrder": self.display_order,
            "skills": [s.to_dict() for s in self.skills],
        }


@dataclass(frozen=True)
class MemberSkillEntry:
    """One append-only skill evaluation of a member."""

    entry_id: int
    member_id: int
    skill_id: int
    skill_name: str
    category_id: int
    category_name: str
    level: int
    evaluated_at: date
    memo: Optional[str] = None
    evaluator_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "skillId": self.skill_id,
            "skillName": self.skill_name,
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "level": self.level,
            "evaluatedAt": self.evaluated_at.isoformat(),
            "memo": self.memo,
            "evaluatorName": self.evaluator_name,
        }


def latest_per_skill(history: Iterable[MemberSkillEntry]) -> list[MemberSkillEntry]:
    """Keep the newest entry per skill; ``history`` must be newest first."""
    seen: dict[int, MemberSkillEntry] = {}
    for entry in history:
        seen.setdefault(entry.skill_id, entry)
    return list(seen.values())
