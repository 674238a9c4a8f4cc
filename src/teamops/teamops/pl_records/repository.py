from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .generator import ExistingAdjustment
from .model import GeneratedPL, PLRecord, PLValues


class PLRecordRepository(Protocol):
    def list_records(self, months: Sequence[str], *, project_id: Optional[int] = None) -> Sequence[PLRecord]:
        """Ordered by month, then project name."""
        raise NotImplementedError

    def get(self, record_id: int) -> Optional[PLRecord]:
        raise NotImplementedError

    def upsert(
        self,
        project_id: int,
        target_month: str,
        values: PLValues,
        *,
        markup_rate: Optional[float],
        memo: Optional[str],
        actor_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_adjustment(
        self,
        record_id: int,
        *,
        revenue_contract: int,
        revenue_extra: int,
        markup_rate: Optional[float],
        gross_profit: int,
        gross_profit_rate: float,
    ) -> None:
        """``markup_rate`` of None keeps the stored rate."""
        raise NotImplementedError

    def adjustments(self, target_month: str, project_ids: Sequence[int]) -> Mapping[int, ExistingAdjustment]:
        raise NotImplementedError

    def save_generated(self, target_month: str, rows: Sequence[GeneratedPL], *, actor_id: Optional[int]) -> int:
        """Insert new rows; on existing rows keep cost_other, markup_rate and revenue_extra."""
        raise NotImplementedError
