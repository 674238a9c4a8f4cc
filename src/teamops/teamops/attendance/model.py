from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, ConfirmStatus, LocationType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one member's attendance on one calendar date."""

    attendance_id: int
    member_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    break_minutes: int = 0
    work_minutes: Optional[int] = None
    todo_today: Optional[str] = None
    done_today: Optional[str] = None
    todo_tomorrow: Optional[str] = None
    status: AttendanceStatus = AttendanceStatus.NORMAL
    confirm_status: ConfirmStatus = ConfirmStatus.UNCONFIRMED
    slack_notified: bool = False
    location_type: LocationType = LocationType.OFFICE
    member_name: Optional[str] = None

    @property
    def is_modified(self) -> bool:
        return self.status == AttendanceStatus.MODIFIED
