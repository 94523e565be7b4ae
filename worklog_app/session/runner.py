"""Runner: wires reconciliation, interview, and submission for each mode."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from worklog_app.assistant.retry import SessionCancelled
from worklog_app.core.models import DayStatus, DialogueState, ParsedWorkLog, TrackedIssue
from worklog_app.core.service import WorklogService
from worklog_app.core.timeparse import format_duration
from worklog_app.terminal import console
from worklog_app.terminal.prompting import confirm_yes_no

from .driver import ConversationDriver
from .scheduler import build_period, day_status, today_status, unfilled_days
from .submission import SubmissionPipeline

logger = logging.getLogger(__name__)


def review_and_confirm(work_logs: Sequence[ParsedWorkLog]) -> bool:
    console.print_summary(work_logs)
    return confirm_yes_no("Submit these work logs to Jira?")


class Runner:
    def __init__(
        self,
        service: WorklogService,
        driver: ConversationDriver,
        pipeline: SubmissionPipeline,
    ):
        self.service = service
        self.driver = driver
        self.pipeline = pipeline

    # ------------------ Modes ------------------
    def run_today(self) -> list[DayStatus]:
        """Interview for today; returns the day's status after submission."""
        console.print_welcome()
        issues = self._load_issues()
        if not issues:
            return []
        console.print_status("Checking today's worklogs...")
        today = self.service.today()
        status = today_status(today, self.service.logged_seconds_on(today))
        if status.logged_seconds:
            console.print_status(f"Already logged today: {format_duration(status.logged_seconds)}")
        if status.filled:
            console.print_status("Today is already filled.")
            return [status]
        try:
            result, _ = self._interview(status, issues, day=None)
        except SessionCancelled:
            console.print_status("Interrupted. See you!")
            return [status]
        console.print_farewell()
        return [result]

    def run_period(self, start: date, end: date) -> list[DayStatus]:
        """Interview every unfilled weekday in the range, oldest first."""
        console.print_welcome()
        issues = self._load_issues()
        if not issues:
            return []
        console.print_status(f"Checking worklogs from {start} to {end}...")
        days = build_period(start, end, self.service.logged_seconds_by_day(start, end))
        if not days:
            console.print_warning("There are no working days in this range.")
            return []
        console.print_period_status(days)
        pending = unfilled_days(days)
        if not pending:
            console.print_status("All days are filled.")
            return days
        console.print_status(f"Days to fill: {len(pending)}")

        updated = {d.day: d for d in days}
        for status in pending:
            console.print_day_header(status)
            try:
                result, keep_going = self._interview(status, issues, day=status.day)
            except SessionCancelled:
                console.print_status("Interrupted. See you!")
                break
            updated[status.day] = result
            if not keep_going:
                break
        else:
            console.print_farewell()
        return [updated[d.day] for d in days]

    # ------------------ Steps ------------------
    def _load_issues(self) -> list[TrackedIssue]:
        console.print_status("Fetching your issues from Jira...")
        mine = self.service.fetch_my_issues()
        if mine:
            console.print_issues_table(mine)
        console.print_status("Loading all open issues...")
        issues = self.service.fetch_open_issues()
        if not issues:
            console.print_no_issues()
        return issues

    def _interview(
        self,
        status: DayStatus,
        issues: Sequence[TrackedIssue],
        day: date | None,
    ) -> tuple[DayStatus, bool]:
        """Run one day; returns its new status and whether to continue."""
        console.print_status("Tell the assistant what you worked on...")
        outcome = self.driver.run(issues, status.logged_seconds, day)
        if outcome.state is DialogueState.CANCELLED:
            console.print_status("Conversation stopped. See you!")
            return status, False
        if outcome.state is DialogueState.ABANDONED:
            console.print_no_data()
            return status, True

        report = self.pipeline.run(outcome.work_logs, day)
        if report.declined:
            console.print_cancelled()
            return status, True
        if report.failed:
            logger.warning("%s of %s entries failed", len(report.failed), len(report.results))
        result = day_status(status.day, status.logged_seconds + report.submitted_seconds)
        note = "filled" if result.filled else f"{format_duration(result.remaining_seconds)} left"
        console.print_status(
            f"Submitted {format_duration(report.submitted_seconds)}; day total "
            f"{format_duration(result.logged_seconds)} ({note})"
        )
        return result, True
