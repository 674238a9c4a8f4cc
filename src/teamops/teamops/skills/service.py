from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..users.model import SessionUser
from .model import SkillCategory
from .repository import SkillRepository
from .schemas import CategoryCreate, CategoryUpdate, SkillCreate, SkillEvaluationCreate, SkillUpdate

logger = logging.getLogger(__name__)

CATEGORY_NAME_TAKEN = "同名のカテゴリが既に存在します"
SKILL_NAME_TAKEN = "同名のスキルがこのカテゴリに既に存在します"


class SkillService:
    """Use case: skill master data, member skill history and the skill matrix."""

    def __init__(self, skills: SkillRepository, members: MemberRepository):
        self._skills = skills
        self._members = members

    def _require_category(self, category_id: int) -> SkillCategory:
        category = self._skills.get_category(category_id)
        if not category:
            raise NotFoundError("カテゴリが見つかりません")
        return category

    # --- categories -------------------------------------------------------

    def list_categories(self, actor: SessionUser) -> list[dict]:
        return [c.to_dict() for c in self._skills.list_categories()]

    def create_category(self, actor: SessionUser, payload: CategoryCreate) -> dict:
        authorizer.require(actor, "skill", "write")
        if self._skills.category_name_taken(payload.name):
            raise ConflictError(CATEGORY_NAME_TAKEN)
        category_id = self._skills.create_category(
            name=payload.name, description=payload.description, display_order=payload.displayOrder
        )
        return self._require_category(category_id).to_dict()

    def update_category(self, actor: SessionUser, category_id: int, payload: CategoryUpdate) -> dict:
        authorizer.require(actor, "skill", "write")
        self._require_category(category_id)
        fields = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        if fields.get("name") and self._skills.category_name_taken(fields["name"], exclude_id=category_id):
            raise ConflictError(CATEGORY_NAME_TAKEN)
        self._skills.update_category(category_id, fields)
        return self._require_category(category_id).to_dict()

    def delete_category(self, actor: SessionUser, category_id: int) -> None:
        authorizer.require(actor, "skill", "write")
        self._require_category(category_id)
        if self._skills.category_has_evaluations(category_id):
            raise ConflictError("評価データが存在するカテゴリは削除できません")
        self._skills.delete_category(category_id)
        logger.info("skill category %s deleted by %s", category_id, actor.member_id)

    # --- skills -----------------------------------------------------------

    def create_skill(self, actor: SessionUser, category_id: int, payload: SkillCreate) -> dict:
        authorizer.require(actor, "skill", "write")
        self._require_category(category_id)
        if self._skills.skill_name_taken(category_id=category_id, name=payload.name):
            raise ConflictError(SKILL_NAME_TAKEN)
        skill_id = self._skills.create_skill(
            category_id=category_id,
            name=payload.name,
            description=payload.description,
            display_order=payload.displayOrder,
        )
        return self._skills.get_skill(category_id=category_id, skill_id=skill_id).to_dict()

    def update_skill(self, actor: SessionUser, category_id: int, skill_id: int, payload: SkillUpdate) -> dict:
        authorizer.require(actor, "skill", "write")
        if not self._skills.get_skill(category_id=category_id, skill_id=skill_id):
            raise NotFoundError("スキルが見つかりません")
        fields = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        if fields.get("name") and self._skills.skill_name_taken(
            category_id=category_id, name=fields["name"], exclude_id=skill_id
        ):
            raise ConflictError(SKILL_NAME_TAKEN)
        self._skills.update_skill(skill_id, fields)
        return self._skills.get_skill(category_id=category_id, skill_id=skill_id).to_dict()

    def delete_skill(self, actor: SessionUser, category_id: int, skill_id: int) -> None:
        authorizer.require(actor, "skill", "write")
        if not self._skills.get_skill(category_id=category_id, skill_id=skill_id):
            raise NotFoundError("スキルが見つかりません")
        self._skills.delete_skill(skill_id)

    # --- member skills ----------------------------------------------------

    def member_history(self, actor: SessionUser, member_id: int) -> list[dict]:
        if not self._members.get_member(member_id):
            raise NotFoundError("メンバーが見つかりません")
        return [e.to_dict() for e in self._skills.member_history(member_id)]

    def add_member_skill(self, actor: SessionUser, member_id: int, payload: SkillEvaluationCreate) -> dict:
        authorizer.require(actor, "member_skill", "write")
        if not self._members.get_member(member_id):
            raise NotFoundError("メンバーが見つかりません")
        known = {s.skill_id for c in self._skills.list_categories() for s in c.skills}
        if payload.skillId not in known:
            raise NotFoundError("スキルが見つかりません")

        entry_id = self._skills.add_member_skill(
            member_id=member_id,
            skill_id=payload.skillId,
            level=payload.level,
            evaluated_at=payload.evaluatedAt,
            memo=payload.memo,
            evaluated_by=actor.id,
        )
        return self._skills.get_member_skill(entry_id).to_dict()

    # --- matrix -----------------------------------------------------------

    def matrix(
        self,
        actor: SessionUser,
        *,
        company: Optional[str] = None,
        category_id: Optional[int] = None,
        min_level: Optional[int] = None,
    ) -> dict:
        if min_level is not None and not 1 <= min_level <= 5:
            raise ValidationError("minLevel は 1〜5 で指定してください")

        categories = self._skills.list_categories(category_id=category_id)
        members = self._members.list_members(company=company)
        skill_ids = [s.skill_id for c in categories for s in c.skills]
        levels = self._skills.latest_levels(member_ids=[m.member_id for m in members], skill_ids=skill_ids)

        if min_level is not None:
            members = [m for m in members if any(lv >= min_level for lv in levels.get(m.member_id, {}).values())]

        return {
            "categories": [
                {"id": c.category_id, "name": c.name, "skills": [{"id": s.skill_id, "name": s.name} for s in c.skills]}
                for c in categories
            ],
            "members": [
                {"id": m.member_id, "name": m.name, "company": m.company.value, "role": m.role.value if m.role else None}
                for m in members
            ],
            "levelMap": {
                str(m.member_id): {str(sid): lv for sid, lv in levels.get(m.member_id, {}).items()} for m in members
            },
        }
