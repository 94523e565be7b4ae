"""Day reconciliation: which weekdays in a period still need work logged."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

import pandas as pd

from worklog_app.core.config import WEEKDAY_LABELS
from worklog_app.core.models import DayStatus


def day_status(day: date, logged_seconds: int) -> DayStatus:
    return DayStatus(day=day, weekday=WEEKDAY_LABELS[day.weekday()], logged_seconds=int(logged_seconds))


def today_status(today: date, logged_seconds: int) -> DayStatus:
    """Single-day path: ``today`` is the only day, its logged time given directly."""
    return day_status(today, logged_seconds)


def build_period(start: date, end: date, logged_by_day: Mapping[date, int]) -> list[DayStatus]:
    """Chronological status of every Monday-Friday in ``[start, end]``.

    Days missing from ``logged_by_day`` count as nothing logged. A reversed
    range yields no days.
    """
    if end < start:
        return []
    weekdays = pd.bdate_range(start, end)
    return [day_status(ts.date(), logged_by_day.get(ts.date(), 0)) for ts in weekdays]


def unfilled_days(days: Sequence[DayStatus]) -> list[DayStatus]:
    return [d for d in days if not d.filled]
