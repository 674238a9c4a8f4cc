from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import month_of, now_local
from ..core.constants import EVALUATION_HISTORY_DEFAULT, EVALUATION_HISTORY_MAX
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import authorizer
from ..members.repository import MemberRepository
from ..users.model import SessionUser
from .model import EvaluationScores
from .repository import EvaluationRepository
from .schemas import EvaluationUpsert

logger = logging.getLogger(__name__)


class EvaluationService:
    def __init__(self, evaluations: EvaluationRepository, members: MemberRepository):
        self._evaluations = evaluations
        self._members = members

    def monthly(self, actor: SessionUser, month: str):
        """Staff get every member, unevaluated ones flagged; others only their own (or None)."""
        if not authorizer.allows(actor, "evaluation", "read_all"):
            own = self._evaluations.list_for_period(month, member_id=actor.member_id)
            return own[0].to_dict() if own else None

        by_member = {e.member_id: e for e in self._evaluations.list_for_period(month)}
        rows = []
        for m in self._members.list_not_deleted():
            ev = by_member.get(m.member_id)
            if ev is None:
                rows.append({"memberId": m.member_id, "memberName": m.name, "evaluated": False})
                continue
            data = ev.to_dict()
            data.update({"memberName": m.name, "evaluated": True})
            rows.append(data)
        return rows

    def upsert(self, actor: SessionUser, payload: EvaluationUpsert, *, today: Optional[date] = None) -> tuple[dict, bool]:
        authorizer.require(actor, "evaluation", "write")
        if payload.targetPeriod > month_of(today or now_local().date()):
            raise ValidationError("未来の月は評価できません")
        if not self._members.get_member(payload.memberId):
            raise NotFoundError("メンバーが見つかりません")

        ev, created = self._evaluations.upsert(
            payload.memberId,
            payload.targetPeriod,
            EvaluationScores(
                score_p=payload.scoreP,
                score_a=payload.scoreA,
                score_s=payload.scoreS,
                comment=payload.comment,
            ),
            evaluator_id=actor.id,
        )
        logger.info("evaluation %s %s saved by %s", payload.memberId, payload.targetPeriod, actor.member_id)
        return ev.to_dict(labels=False), created

    def history(self, actor: SessionUser, member_id: int, *, limit: Optional[int] = None) -> list[dict]:
        authorizer.require(actor, "evaluation", "read", owner_member_id=member_id)
        if limit is None or limit < 1:
            limit = EVALUATION_HISTORY_DEFAULT
        limit = min(limit, EVALUATION_HISTORY_MAX)
        return [e.to_dict() for e in self._evaluations.history(member_id, limit=limit)]
