"""SubmissionPipeline: confirm, then commit entries one at a time."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from datetime import date

from worklog_app.core.jira_client import TrackerError
from worklog_app.core.models import ParsedWorkLog, SubmissionReport, SubmissionResult
from worklog_app.core.service import WorklogService

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Best-effort, non-atomic batch submission.

    Jira has no multi-worklog transaction, so every entry is attempted in
    order and a failure is recorded without touching the other entries.
    """

    def __init__(
        self,
        service: WorklogService,
        *,
        confirm: Callable[[Sequence[ParsedWorkLog]], bool],
        on_result: Callable[[SubmissionResult], None] | None = None,
        pause: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.service = service
        self.confirm = confirm
        self.on_result = on_result
        self.pause = pause
        self.sleep = sleep

    def run(self, work_logs: Sequence[ParsedWorkLog], day: date | None = None) -> SubmissionReport:
        if not work_logs:
            return SubmissionReport()
        if not self.confirm(work_logs):
            logger.info("Submission of %s entries declined", len(work_logs))
            return SubmissionReport(declined=True)
        return self.submit(work_logs, day)

    def submit(self, work_logs: Sequence[ParsedWorkLog], day: date | None = None) -> SubmissionReport:
        report = SubmissionReport()
        for idx, work_log in enumerate(work_logs):
            if idx and self.pause:
                self.sleep(self.pause)
            try:
                self.service.log_work(work_log, day)
                result = SubmissionResult(work_log=work_log, ok=True)
            except TrackerError as exc:
                logger.warning("Failed to log %s: %s", work_log.issue_key, exc)
                result = SubmissionResult(work_log=work_log, ok=False, error=str(exc))
            report.results.append(result)
            if self.on_result:
                self.on_result(result)
        return report
