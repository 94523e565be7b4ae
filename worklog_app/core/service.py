"""WorklogService: issue lookup, per-day logged time, and work submission."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, time

import pytz

from worklog_app.analytics.worklogs import logged_seconds_per_day, worklogs_to_dataframe

from .config import (
    DATE_FORMAT,
    DEFAULT_TIMEZONE,
    ISSUE_FIELDS,
    MY_ISSUES_JQL,
    OPEN_ISSUES_JQL,
    WORKLOG_RANGE_JQL,
    WORKLOG_START_HOUR,
)
from .jira_client import JiraAPI, TrackerError
from .mappers import map_issues, map_worklog
from .models import ParsedWorkLog, TrackedIssue

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


class WorklogService:
    def __init__(self, api: JiraAPI, timezone: str = DEFAULT_TIMEZONE):
        self.api = api
        self.timezone = timezone
        # None: the machine zone
        self._tz = pytz.timezone(timezone) if timezone else None

    def today(self) -> date:
        return datetime.now(self._tz).date()

    # ------------------ Issues ------------------
    def fetch_my_issues(self) -> list[TrackedIssue]:
        return map_issues(self.api.search_enhanced(MY_ISSUES_JQL, fields=ISSUE_FIELDS))

    def fetch_open_issues(self) -> list[TrackedIssue]:
        return map_issues(self.api.search_enhanced(OPEN_ISSUES_JQL, fields=ISSUE_FIELDS))

    # ------------------ Logged time ------------------
    def logged_seconds_by_day(
        self,
        start: date,
        end: date,
        *,
        progress: ProgressCallback | None = None,
    ) -> dict[date, int]:
        """Seconds the current user has logged on each day in ``[start, end]``.

        Days without worklogs are absent from the result.
        """
        user_ids = self.api.current_user_ids()
        jql = WORKLOG_RANGE_JQL.format(
            start=start.strftime(DATE_FORMAT), end=end.strftime(DATE_FORMAT)
        )
        issues = self.api.search_enhanced(jql, fields=["summary"])
        rows = []
        for idx, raw in enumerate(issues, start=1):
            key = raw.get("key")
            if not key:
                continue
            if progress:
                progress(f"Reading worklogs of {key}", idx, len(issues))
            try:
                worklogs = self.api.fetch_worklogs(key)
            except TrackerError as exc:
                logger.warning("Skipping worklogs of %s: %s", key, exc)
                continue
            rows.extend(map_worklog(w, key) for w in worklogs)
        logger.debug("Collected %s worklogs from %s issues", len(rows), len(issues))
        df = worklogs_to_dataframe(rows)
        return logged_seconds_per_day(df, user_ids, start, end, timezone=self.timezone or None)

    def logged_seconds_on(self, day: date) -> int:
        return self.logged_seconds_by_day(day, day).get(day, 0)

    # ------------------ Submission ------------------
    def started_at(self, day: date) -> datetime:
        naive = datetime.combine(day, time(hour=WORKLOG_START_HOUR))
        if self._tz is None:
            return naive.astimezone()
        return self._tz.localize(naive)

    def log_work(self, work_log: ParsedWorkLog, day: date | None = None) -> None:
        started = self.started_at(day) if day is not None else None
        logger.info("Logging %ss on %s", work_log.seconds, work_log.issue_key)
        self.api.add_worklog(work_log.issue_key, work_log.seconds, work_log.description, started)
