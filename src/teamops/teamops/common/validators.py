from __future__ import annotations

import re
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def require_month(value: Optional[str], field_name: str = "month") -> str:
    if not value or not MONTH_RE.match(value):
        raise ValidationError(f"{field_name} は YYYY-MM 形式で指定してください")
    return value


def require_date(value: Optional[str], field_name: str = "date") -> date:
    if not value or not DATE_RE.match(value):
        raise ValidationError(f"{field_name} は YYYY-MM-DD 形式で指定してください")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} が不正な日付です")


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} は{min_len}文字以上で入力してください")
    return value

