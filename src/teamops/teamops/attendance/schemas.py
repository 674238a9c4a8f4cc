from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from ..common.validators import HHMM_RE
from ..core.enums import ConfirmStatus, LocationType

HHMM_PATTERN = HHMM_RE.pattern


class ClockInRequest(BaseModel):
    date: dt.date
    todoToday: Optional[str] = Field(None, max_length=2000)
    locationType: LocationType = LocationType.OFFICE


class ClockOutRequest(BaseModel):
    date: dt.date
    doneToday: Optional[str] = Field(None, max_length=2000)
    todoTomorrow: Optional[str] = Field(None, max_length=2000)
    breakMinutes: int = Field(0, ge=0, le=1440)


class CorrectionRequest(BaseModel):
    """PUT /api/attendances/{id}: times are HH:MM on the record's own date."""

    clockIn: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    clockOut: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    breakMinutes: Optional[int] = Field(None, ge=0, le=1440)


class ConfirmRequest(BaseModel):
    confirmStatus: ConfirmStatus
