from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Allocation, SelfReport


class SelfReportRepository(Protocol):
    def list_for_month(self, target_month: str, *, member_id: Optional[int] = None) -> Sequence[SelfReport]:
        """Ordered by creation."""
        raise NotImplementedError

    def upsert_many(
        self, member_id: int, target_month: str, allocations: Sequence[Allocation], *, submitted_at: datetime
    ) -> int:
        """One row per (member, month, project), all in one transaction."""
        raise NotImplementedError
