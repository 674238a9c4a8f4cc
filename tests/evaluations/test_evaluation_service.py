from __future__ import annotations

from datetime import date, datetime

import pytest

from src.teamops.teamops.core.enums import Company, MemberStatus, SalaryType
from src.teamops.teamops.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.teamops.teamops.evaluations.model import Evaluation, score_label
from src.teamops.teamops.evaluations.schemas import EvaluationUpsert
from src.teamops.teamops.evaluations.service import EvaluationService
from src.teamops.teamops.members.model import Member

TODAY = date(2026, 4, 15)


def _member(member_id, name):
    return Member(
        member_id=member_id,
        name=name,
        status=MemberStatus.EMPLOYEE,
        company=Company.BOOST,
        salary_type=SalaryType.MONTHLY,
        salary_amount=200000,
        joined_at=date(2025, 4, 1),
    )


class InMemoryEvaluations:
    def __init__(self):
        self.rows: dict[tuple[int, str], Evaluation] = {}
        self.history_limits = []

    def list_for_period(self, period, member_id=None):
        return [
            e for (mid, p), e in self.rows.items() if p == period and (member_id is None or mid == member_id)
        ]

    def history(self, member_id, *, limit):
        self.history_limits.append(limit)
        rows = sorted((e for (mid, _), e in self.rows.items() if mid == member_id), key=lambda e: e.target_period)
        return list(reversed(rows))[:limit]

    def upsert(self, member_id, period, scores, *, evaluator_id):
        key = (member_id, period)
        created = key not in self.rows
        ev = Evaluation(
            evaluation_id=len(self.rows) + 1 if created else self.rows[key].evaluation_id,
            member_id=member_id,
            evaluator_id=evaluator_id,
            target_period=period,
            score_p=scores.score_p,
            score_a=scores.score_a,
            score_s=scores.score_s,
            comment=scores.comment,
            updated_at=datetime(2026, 4, 15, 12, 0),
        )
        self.rows[key] = ev
        return ev, created


class InMemoryMembers:
    def __init__(self, members):
        self._members = {m.member_id: m for m in members}

    def list_not_deleted(self):
        return list(self._members.values())

    def get_member(self, member_id):
        return self._members.get(member_id)


@pytest.fixture
def repo():
    return InMemoryEvaluations()


@pytest.fixture
def service(repo):
    return EvaluationService(repo, InMemoryMembers([_member(3, "山田"), _member(4, "佐藤")]))


def _payload(**overrides):
    data = {"memberId": 3, "targetPeriod": "2026-04", "scoreP": 4, "scoreA": 5, "scoreS": 5}
    data.update(overrides)
    return EvaluationUpsert.model_validate(data)


def test_upsert_creates_then_updates(service, admin):
    body, created = service.upsert(admin, _payload(), today=TODAY)
    assert created is True
    assert body["totalAvg"] == 4.67
    assert "labelP" not in body

    body, created = service.upsert(admin, _payload(scoreP=5), today=TODAY)
    assert created is False
    assert body["totalAvg"] == 5.0


def test_future_month_is_rejected(service, admin):
    with pytest.raises(ValidationError):
        service.upsert(admin, _payload(targetPeriod="2026-05"), today=TODAY)


def test_unknown_member_is_not_found(service, admin):
    with pytest.raises(NotFoundError):
        service.upsert(admin, _payload(memberId=99), today=TODAY)


def test_only_admin_writes(service, manager):
    with pytest.raises(AuthorizationError):
        service.upsert(manager, _payload(), today=TODAY)


def test_staff_monthly_view_flags_unevaluated_members(service, admin, manager):
    service.upsert(admin, _payload(), today=TODAY)

    rows = {r["memberId"]: r for r in service.monthly(manager, "2026-04")}

    assert rows[3]["evaluated"] is True
    assert rows[3]["labelA"] == "卓越"
    assert rows[4] == {"memberId": 4, "memberName": "佐藤", "evaluated": False}


def test_member_sees_own_evaluation_only(service, admin, member):
    assert service.monthly(member, "2026-04") is None
    service.upsert(admin, _payload(memberId=member.member_id), today=TODAY)

    assert service.monthly(member, "2026-04")["memberId"] == member.member_id


def test_history_limit_defaults_and_is_capped(service, repo, member):
    service.history(member, member.member_id)
    service.history(member, member.member_id, limit=100)

    assert repo.history_limits == [12, 36]


def test_member_cannot_read_someone_elses_history(service, member):
    with pytest.raises(AuthorizationError):
        service.history(member, 4)


def test_score_labels():
    assert score_label(1) == "要改善"
    assert score_label(9) == "—"
