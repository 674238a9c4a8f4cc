from __future__ import annotations

from abc import ABC, abstractmethod

from ...members.model import Member


class AmountEstimator(ABC):
    """Estimates a member's monthly labour cost when no invoice exists yet."""

    @abstractmethod
    def estimate(self, member: Member, total_hours: float) -> int:
        raise NotImplementedError
