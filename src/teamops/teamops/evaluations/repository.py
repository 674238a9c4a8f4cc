from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Evaluation, EvaluationScores


class EvaluationRepository(Protocol):
    def list_for_period(self, target_period: str, *, member_id: Optional[int] = None) -> Sequence[Evaluation]:
        raise NotImplementedError

    def history(self, member_id: int, *, limit: int) -> Sequence[Evaluation]:
        """Newest period first."""
        raise NotImplementedError

    def upsert(
        self, member_id: int, target_period: str, scores: EvaluationScores, *, evaluator_id: int
    ) -> tuple[Evaluation, bool]:
        """Returns the stored evaluation and whether it was newly created."""
        raise NotImplementedError
