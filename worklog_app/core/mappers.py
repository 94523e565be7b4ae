"""Mapping raw Jira issue and worklog JSON into domain models and rows."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

import pandas as pd

from .models import TrackedIssue


def parse_dt(val) -> datetime | None:
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def recorded_day(val) -> date | None:
    """Calendar date of a timestamp in the offset it was recorded with."""
    if not val:
        return None
    ts = pd.to_datetime(val, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def map_issue(raw: dict[str, Any]) -> TrackedIssue:
    fields = raw.get("fields") or {}
    status = (fields.get("status") or {}).get("name")
    return TrackedIssue(
        key=raw.get("key", ""),
        summary=fields.get("summary") or "",
        status=status,
    )


def map_issues(raw_issues: Iterable[dict[str, Any]]) -> list[TrackedIssue]:
    return [map_issue(raw) for raw in raw_issues if raw.get("key")]


def author_ids(author: dict[str, Any] | None) -> set[str]:
    author = author or {}
    return {str(author[k]) for k in ("accountId", "name", "key") if author.get(k)}


def map_worklog(raw: dict[str, Any], issue_key: str | None = None) -> dict[str, Any]:
    """Flatten one worklog into a row for aggregation."""
    return {
        "issue_key": issue_key or raw.get("issueId"),
        "author_ids": author_ids(raw.get("author")),
        "started": parse_dt(raw.get("started")),
        "day": recorded_day(raw.get("started")),
        "seconds": int(raw.get("timeSpentSeconds") or 0),
    }
