from __future__ import annotations

from ...members.model import Member
from .base import AmountEstimator


class MonthlyAmountEstimator(AmountEstimator):
    """Flat salary regardless of hours."""

    def estimate(self, member: Member, total_hours: float) -> int:
        return int(member.salary_amount)
