from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Evaluation, EvaluationScores
from .repository import EvaluationRepository

_SELECT = """
    SELECT e.id, e.member_id, e.evaluator_id, e.target_period, e.score_p, e.score_a, e.score_s,
           e.comment, e.updated_at, m.name AS member_name
    FROM personnel_evaluations e
    JOIN members m ON m.id = e.member_id
"""


def _to_evaluation(r: dict) -> Evaluation:
    return Evaluation(
        evaluation_id=int(r["id"]),
        member_id=int(r["member_id"]),
        evaluator_id=int(r["evaluator_id"]),
        target_period=r["target_period"],
        score_p=int(r["score_p"]),
        score_a=int(r["score_a"]),
        score_s=int(r["score_s"]),
        comment=r.get("comment"),
        updated_at=r.get("updated_at"),
        member_name=r.get("member_name"),
    )


class MySQLEvaluationRepository(EvaluationRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_for_period(self, target_period: str, *, member_id: Optional[int] = None) -> Sequence[Evaluation]:
        sql = _SELECT + " WHERE e.target_period=%s"
        params: list = [target_period]
        if member_id is not None:
            sql += " AND e.member_id=%s"
            params.append(member_id)
        with db_cursor(self._db) as (_, cur):
            cur.execute(sql + " ORDER BY m.name ASC", tuple(params))
            rows = fetchall(cur)
        return [_to_evaluation(r) for r in rows]

    def history(self, member_id: int, *, limit: int) -> Sequence[Evaluation]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.member_id=%s ORDER BY e.target_period DESC LIMIT %s",
                (member_id, int(limit)),
            )
            rows = fetchall(cur)
        return [_to_evaluation(r) for r in rows]

    def upsert(
        self, member_id: int, target_period: str, scores: EvaluationScores, *, evaluator_id: int
    ) -> tuple[Evaluation, bool]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "SELECT id FROM personnel_evaluations WHERE member_id=%s AND target_period=%s FOR UPDATE",
                (member_id, target_period),
            )
            existing = fetchone(cur)
            if existing:
                evaluation_id = int(existing["id"])
                cur.execute(
                    """
                    UPDATE personnel_evaluations
                    SET score_p=%s, score_a=%s, score_s=%s, comment=%s, evaluator_id=%s
                    WHERE id=%s
                    """,
                    (scores.score_p, scores.score_a, scores.score_s, scores.comment, evaluator_id, evaluation_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO personnel_evaluations
                        (member_id, evaluator_id, target_period, score_p, score_a, score_s, comment)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        member_id,
                        evaluator_id,
                        target_period,
                        scores.score_p,
                        scores.score_a,
                        scores.score_s,
                        scores.comment,
                    ),
                )
                evaluation_id = int(cur.lastrowid)
            cur.execute(_SELECT + " WHERE e.id=%s", (evaluation_id,))
            row = fetchone(cur)
        return _to_evaluation(row), existing is None
