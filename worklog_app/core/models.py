"""Domain data models for issues, work logs, days, and dialogue outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .config import WORKDAY_SECONDS


@dataclass(slots=True)
class TrackedIssue:
    key: str
    summary: str
    status: str | None = None


@dataclass(slots=True)
class WorkLogCandidate:
    """Raw entry as emitted by the assistant, before duration parsing."""

    issue_key: str
    time_spent: str
    description: str


@dataclass(slots=True)
class ParsedWorkLog:
    """Validated entry ready for submission; ``seconds`` is always positive."""

    issue_key: str
    seconds: int
    description: str


@dataclass(frozen=True, slots=True)
class DayStatus:
    day: date
    weekday: str
    logged_seconds: int

    @property
    def filled(self) -> bool:
        return self.logged_seconds >= WORKDAY_SECONDS

    @property
    def remaining_seconds(self) -> int:
        return max(WORKDAY_SECONDS - self.logged_seconds, 0)


@dataclass(slots=True)
class SubmissionResult:
    work_log: ParsedWorkLog
    ok: bool
    error: str | None = None


@dataclass(slots=True)
class SubmissionReport:
    results: list[SubmissionResult] = field(default_factory=list)
    declined: bool = False

    @property
    def submitted_seconds(self) -> int:
        return sum(r.work_log.seconds for r in self.results if r.ok)

    @property
    def failed(self) -> list[SubmissionResult]:
        return [r for r in self.results if not r.ok]


class DialogueState(str, Enum):
    STARTED = "started"
    RESPONDING = "responding"
    AWAITING_USER = "awaiting_user"
    EXTRACTED = "extracted"
    ABANDONED = "abandoned"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class DialogueOutcome:
    state: DialogueState
    work_logs: list[ParsedWorkLog] = field(default_factory=list)
    turns: int = 0
