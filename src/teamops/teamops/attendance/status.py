from __future__ import annotations

from ..core.enums import AttendanceStatus, DisplayStatus
from .model import AttendanceRecord


def display_status(record: AttendanceRecord) -> DisplayStatus:
    """Read-side status; never persisted."""
    if record.status == AttendanceStatus.ABSENT:
        return DisplayStatus.ABSENT
    if record.clock_out:
        return DisplayStatus.DONE
    if record.clock_in:
        return DisplayStatus.WORKING
    return DisplayStatus.NOT_STARTED
