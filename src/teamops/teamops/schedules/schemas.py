from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, RootModel

from ..common.validators import HHMM_RE
from ..core.enums import LocationType


class ScheduleItem(BaseModel):
    date: dt.date
    startTime: Optional[str] = Field(None, pattern=HHMM_RE.pattern)
    endTime: Optional[str] = Field(None, pattern=HHMM_RE.pattern)
    isOff: bool = False
    locationType: Optional[LocationType] = None


class ScheduleBatch(RootModel[list[ScheduleItem]]):
    """POST /api/members/{id}/work-schedules body: a JSON array."""
