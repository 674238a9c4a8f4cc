from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import generate_password_hash

from ..core.exceptions import ConflictError, NotFoundError
from ..core.policy import authorizer
from ..skills.repository import SkillRepository
from ..users.model import SessionUser
from .model import DUPLICATE_EMAIL, Member, NewMember
from .repository import MemberRepository
from .schemas import MemberCreate, MemberUpdate, ProfileUpdate, ToolCreateForMember, ToolUpsert
from .tool_repository import ToolRepository

logger = logging.getLogger(__name__)

_ACCOUNT_KEYS = {"email", "role"}
_NULLABLE_KEYS = {"phone", "leftAt"}


class MemberService:
    """Use case: manage members and their login accounts."""

    def __init__(self, members: MemberRepository, skills: SkillRepository):
        self._members = members
        self._skills = skills

    def _require_member(self, member_id: int) -> Member:
        member = self._members.get_member(member_id)
        if not member:
            raise NotFoundError("メンバーが見つかりません")
        return member

    def list_members(self, actor: SessionUser, *, q=None, company=None, role=None) -> list[dict]:
        return [m.to_dict() for m in self._members.list_members(q=q, company=company, role=role)]

    def get_member(self, actor: SessionUser, member_id: int) -> dict:
        authorizer.require(actor, "member", "read", owner_member_id=member_id)
        member = self._require_member(member_id)
        data = member.to_dict(
            include_private=authorizer.allows(actor, "member", "private", owner_member_id=member_id)
        )
        data["skills"] = [s.to_dict() for s in self._skills.latest_for_member(member_id)]
        return data

    def create_member(self, actor: SessionUser, payload: MemberCreate) -> dict:
        authorizer.require(actor, "member", "create")

        if self._members.email_exists(payload.email):
            raise ConflictError(DUPLICATE_EMAIL)

        member_id = self._members.create_member(
            NewMember(
                name=payload.name,
                email=payload.email,
                password_hash=generate_password_hash(payload.password),
                role=payload.role,
                status=payload.status,
                company=payload.company,
                salary_type=payload.salaryType,
                salary_amount=payload.salaryAmount,
                joined_at=payload.joinedAt,
                phone=payload.phone,
            ),
            actor_id=actor.id,
        )
        logger.info("member %s created by %s", member_id, actor.member_id)
        return self._require_member(member_id).to_dict()

    def update_member(self, actor: SessionUser, member_id: int, payload: MemberUpdate) -> dict:
        authorizer.require(actor, "member", "update")
        self._require_member(member_id)

        changes = payload.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        if changes.get("email") and self._members.email_exists(changes["email"], exclude_member_id=member_id):
            raise ConflictError(DUPLICATE_EMAIL)

        values = {k: getattr(v, "value", v) for k, v in changes.items()}
        account_fields = {k: v for k, v in values.items() if k in _ACCOUNT_KEYS and v is not None}
        member_fields = {
            k: v for k, v in values.items() if k not in _ACCOUNT_KEYS and (v is not None or k in _NULLABLE_KEYS)
        }
        if password:
            account_fields["passwordHash"] = generate_password_hash(password)

        self._members.update_member(
            member_id, member_fields=member_fields, account_fields=account_fields, actor_id=actor.id
        )
        return self._require_member(member_id).to_dict(include_private=True)

    def delete_member(self, actor: SessionUser, member_id: int) -> None:
        authorizer.require(actor, "member", "delete")
        if not self._members.soft_delete(member_id, actor_id=actor.id):
            raise NotFoundError("メンバーが見つかりません")

    def update_profile(self, actor: SessionUser, member_id: int, payload: ProfileUpdate) -> dict:
        authorizer.require(actor, "member", "profile", owner_member_id=member_id)
        self._require_member(member_id)
        self._members.update_profile(member_id, payload.model_dump(exclude_unset=True))
        return self._require_member(member_id).to_dict(include_private=True)


class ToolService:
    """Use case: subscription/tool inventory per member."""

    def __init__(self, tools: ToolRepository, members: MemberRepository):
        self._tools = tools
        self._members = members

    def list_for_member(self, actor: SessionUser, member_id: int) -> list[dict]:
        return [t.to_dict() for t in self._tools.list_for_member(member_id)]

    def list_all(
        self,
        actor: SessionUser,
        *,
        company: Optional[str] = None,
        member_id: Optional[int] = None,
        tool_name: Optional[str] = None,
    ) -> list[dict]:
        authorizer.require(actor, "tool", "read")
        return [t.to_dict() for t in self._tools.list_all(company=company, member_id=member_id, tool_name=tool_name)]

    def create(self, actor: SessionUser, member_id: int, payload: ToolUpsert) -> dict:
        authorizer.require(actor, "tool", "write")
        if not self._members.get_member(member_id):
            raise NotFoundError("メンバーが見つかりません")
        fields = payload.model_dump(exclude={"memberId"})
        fields["companyLabel"] = payload.companyLabel.value
        tool_id = self._tools.create(member_id=member_id, fields=fields)
        return self._tools.get(member_id=member_id, tool_id=tool_id).to_dict()

    def create_from_body(self, actor: SessionUser, payload: ToolCreateForMember) -> dict:
        return self.create(actor, payload.memberId, payload)

    def update(self, actor: SessionUser, member_id: int, tool_id: int, payload: ToolUpsert) -> dict:
        authorizer.require(actor, "tool", "write")
        if not self._tools.get(member_id=member_id, tool_id=tool_id):
            raise NotFoundError("ツールが見つかりません")
        fields = payload.model_dump(exclude_unset=True)
        if "companyLabel" in fields:
            fields["companyLabel"] = payload.companyLabel.value
        self._tools.update(tool_id=tool_id, fields=fields)
        return self._tools.get(member_id=member_id, tool_id=tool_id).to_dict()

    def delete(self, actor: SessionUser, member_id: int, tool_id: int) -> None:
        authorizer.require(actor, "tool", "write")
        if not self._tools.get(member_id=member_id, tool_id=tool_id):
            raise NotFoundError("ツールが見つかりません")
        self._tools.delete(tool_id=tool_id)
