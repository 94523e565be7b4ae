"""Worklog aggregations: per-day totals and per-issue submission summaries."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import date
from typing import Any

import pandas as pd
import pytz

from worklog_app.core.models import ParsedWorkLog

WORKLOG_COLUMNS = ["issue_key", "author_ids", "started", "day", "seconds"]


def worklogs_to_dataframe(rows: Iterable[dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(list(rows), columns=WORKLOG_COLUMNS)
    if df.empty:
        return df
    df["started"] = pd.to_datetime(df["started"], utc=True, errors="coerce")
    df["seconds"] = pd.to_numeric(df["seconds"], errors="coerce").fillna(0).astype(int)
    return df


def logged_seconds_per_day(
    df: pd.DataFrame,
    user_ids: Collection[str],
    start: date,
    end: date,
    timezone: str | None = None,
) -> dict[date, int]:
    """Sum seconds per calendar day for worklogs authored by ``user_ids``.

    A search for "issues with my worklogs in range" returns every worklog on
    those issues, so rows are fenced by author and by the start date rather
    than summed globally. Without ``timezone`` each worklog counts on the date
    Jira recorded it with; with one, ``started`` is converted first.
    """
    if df.empty or not user_ids:
        return {}
    wanted = set(user_ids)
    mine = df[df["author_ids"].map(lambda ids: bool(set(ids) & wanted))]
    mine = mine.dropna(subset=["started" if timezone else "day"])
    if mine.empty:
        return {}
    if timezone:
        days = mine["started"].dt.tz_convert(pytz.timezone(timezone)).dt.date
    else:
        days = mine["day"]
    in_range = (days >= start) & (days <= end)
    totals = mine[in_range].groupby(days[in_range])["seconds"].sum()
    return {day: int(seconds) for day, seconds in totals.items()}


def summarize_by_issue(work_logs: Iterable[ParsedWorkLog]) -> pd.DataFrame:
    """Group entries by issue preserving first-seen order."""
    df = pd.DataFrame(
        [
            {"issue_key": w.issue_key, "seconds": w.seconds, "description": w.description}
            for w in work_logs
        ],
        columns=["issue_key", "seconds", "description"],
    )
    if df.empty:
        return df
    agg = df.groupby("issue_key", sort=False).agg(
        seconds=("seconds", "sum"),
        entries=("seconds", "count"),
        description=("description", lambda s: "; ".join(d for d in s if d)),
    )
    return agg.reset_index()


def total_seconds(work_logs: Iterable[ParsedWorkLog]) -> int:
    return sum(w.seconds for w in work_logs)
