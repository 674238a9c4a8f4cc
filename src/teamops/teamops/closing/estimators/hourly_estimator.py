from __future__ import annotations

from ...common.rounding import round_half_up
from ...members.model import Member
from .base import AmountEstimator


class HourlyAmountEstimator(AmountEstimator):
    """Hours worked times the hourly rate."""

    def estimate(self, member: Member, total_hours: float) -> int:
        return round_half_up(total_hours * member.salary_amount)
