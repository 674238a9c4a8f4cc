from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ScheduleEntry, WorkSchedule


class ScheduleRepository(Protocol):
    def list_for_member(
        self, member_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[WorkSchedule]:
        raise NotImplementedError

    def bulk_upsert(self, member_id: int, entries: Sequence[ScheduleEntry]) -> int:
        """Create or update one row per (member, date) in a single transaction.

        Returns the number of entries saved.
        """
        raise NotImplementedError

    def list_in_range(self, *, member_ids: Sequence[int], start: date, end: date) -> Sequence[WorkSchedule]:
        raise NotImplementedError

    def members_with_schedules(self, *, member_ids: Sequence[int], start: date, end: date) -> set[int]:
        """Members having at least one row (day off included) in the range."""
        raise NotImplementedError
