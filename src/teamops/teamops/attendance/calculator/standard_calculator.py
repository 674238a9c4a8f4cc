from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.rounding import round_half_up
from .base import WorkTimeCalculator


class StandardWorkTimeCalculator(WorkTimeCalculator):
    """Standard rule: round((out - in) in minutes) - break, not below 0."""

    def worked_minutes(self, clock_in: datetime, clock_out: datetime, break_minutes: int) -> int:
        elapsed = round_half_up((clock_out - clock_in).total_seconds() / 60)
        return max(0, elapsed - int(break_minutes or 0))

    def actual_hours(
        self,
        *,
        work_minutes: Optional[int],
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        break_minutes: int,
    ) -> Optional[float]:
        """Stored minutes win; otherwise computed from the clock times. One decimal."""
        if work_minutes is not None:
            return round_half_up(work_minutes / 60, 1)
        if clock_in and clock_out:
            return round_half_up(self.worked_minutes(clock_in, clock_out, break_minutes) / 60, 1)
        return None
