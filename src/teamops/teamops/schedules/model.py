from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm
from ..core.enums import LocationType


@dataclass(frozen=True)
class WorkSchedule:
    """Planned attendance of a member on one date."""

    schedule_id: int
    member_id: int
    work_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_off: bool = False
    location_type: Optional[LocationType] = None

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "memberId": self.member_id,
            "date": self.work_date.isoformat(),
            "startTime": format_hhmm(self.start_time),
            "endTime": format_hhmm(self.end_time),
            "isOff": self.is_off,
            "locationType": self.location_type.value if self.location_type else None,
        }


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of a bulk upsert; a day off never carries times."""

    work_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_off: bool = False
    location_type: Optional[LocationType] = None
