from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.rounding import round_half_up
from ..core.constants import SCORE_LABELS


def score_label(score: int) -> str:
    if 0 <= score < len(SCORE_LABELS):
        return SCORE_LABELS[score]
    return "—"


@dataclass(frozen=True)
class Evaluation:
    """Monthly personnel evaluation on three axes (P, A, S), each 1..5."""

    evaluation_id: int
    member_id: int
    evaluator_id: int
    target_period: str
    score_p: int
    score_a: int
    score_s: int
    comment: Optional[str] = None
    updated_at: Optional[datetime] = None
    member_name: Optional[str] = None

    @property
    def total_avg(self) -> float:
        return round_half_up((self.score_p + self.score_a + self.score_s) / 3, 2)

    def to_dict(self, *, labels: bool = True) -> dict:
        data = {
            "id": self.evaluation_id,
            "memberId": self.member_id,
            "targetPeriod": self.target_period,
            "scoreP": self.score_p,
            "scoreA": self.score_a,
            "scoreS": self.score_s,
            "totalAvg": self.total_avg,
            "comment": self.comment,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if labels:
            data.update(
                {
                    "labelP": score_label(self.score_p),
                    "labelA": score_label(self.score_a),
                    "labelS": score_label(self.score_s),
                }
            )
        return data


@dataclass(frozen=True)
class EvaluationScores:
    score_p: int
    score_a: int
    score_s: int
    comment: Optional[str] = None
