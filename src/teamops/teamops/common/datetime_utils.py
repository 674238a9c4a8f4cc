from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM string into time."""
    return datetime.strptime(value, "%H:%M").time()


def month_bounds(month: str) -> tuple[date, date]:
    """First and last calendar day of a YYYY-MM month."""
    first = datetime.strptime(month, "%Y-%m").date()
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def month_of(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def combine_hhmm(on: date, value: str) -> datetime:
    return datetime.combine(on, parse_hhmm(value))


def format_hhmm(value: Optional[datetime | time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%H:%M")


def format_jp_date(value: Optional[date]) -> Optional[str]:
    """2026-04-01 -> 2026年4月1日."""
    if value is None:
        return None
    return f"{value.year}年{value.month}月{value.day}日"


def format_jp_month(month: str) -> str:
    """2026-04 -> 2026年04月."""
    year, mon = month.split("-")
    return f"{year}年{mon}月"


def next_week_range(today: date) -> tuple[date, date]:
    """Next Monday..Sunday, always strictly after ``today``.

    On a Sunday the next Monday is tomorrow; on a Monday it is a week away.
    """
    dow = (today.weekday() + 1) % 7  # 0=Sunday
    days_to_monday = 1 if dow == 0 else 8 - dow
    monday = today + timedelta(days=days_to_monday)
    return monday, monday + timedelta(days=6)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
