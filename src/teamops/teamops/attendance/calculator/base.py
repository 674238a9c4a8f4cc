from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class WorkTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, clock_in: datetime, clock_out: datetime, break_minutes: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def actual_hours(
        self,
        *,
        work_minutes: Optional[int],
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        break_minutes: int,
    ) -> Optional[float]:
        raise NotImplementedError
