"""Plain-text terminal output: tables, summaries, assistant replies."""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable, Sequence

import pandas as pd

from worklog_app.analytics.worklogs import summarize_by_issue, total_seconds
from worklog_app.assistant.extractor import clean_reply
from worklog_app.core.config import DATE_FORMAT, SETTINGS, SLASH_COMMANDS
from worklog_app.core.models import DayStatus, ParsedWorkLog, SubmissionResult, TrackedIssue
from worklog_app.core.timeparse import format_duration, format_hours


def _table(df: pd.DataFrame) -> str:
    return df.to_string(index=False)


def print_welcome() -> None:
    print("=" * 40)
    print(" Jira Secretary - AI work log assistant")
    print("=" * 40)
    print()


def print_issues_table(issues: Sequence[TrackedIssue]) -> None:
    print(f"Issues found: {len(issues)}")
    print()
    df = pd.DataFrame(
        {
            "#": range(1, len(issues) + 1),
            "Key": [i.key for i in issues],
            "Summary": [i.summary for i in issues],
        }
    )
    print(_table(df))
    print()


def summary_table(work_logs: Sequence[ParsedWorkLog]) -> pd.DataFrame:
    """Entries grouped by issue plus a TOTAL row."""
    grouped = summarize_by_issue(work_logs)
    rows = [
        {"Issue": r.issue_key, "Time": format_hours(r.seconds), "Description": r.description}
        for r in grouped.itertuples(index=False)
    ]
    rows.append({"Issue": "TOTAL", "Time": format_hours(total_seconds(work_logs)), "Description": ""})
    return pd.DataFrame(rows, columns=["Issue", "Time", "Description"])


def print_summary(work_logs: Sequence[ParsedWorkLog]) -> None:
    print()
    print("Final summary")
    print(_table(summary_table(work_logs)))
    print()


def print_period_status(days: Sequence[DayStatus]) -> None:
    df = pd.DataFrame(
        {
            "Date": [d.day.strftime(DATE_FORMAT) for d in days],
            "Weekday": [d.weekday for d in days],
            "Logged": [format_duration(d.logged_seconds) for d in days],
            "Status": ["OK" if d.filled else "Not filled" for d in days],
        }
    )
    print(_table(df))
    print()


def print_day_header(day: DayStatus) -> None:
    print()
    print(f"=== {day.day.strftime(DATE_FORMAT)} ({day.weekday}) ===")
    print()


def print_reply(text: str, delay: float | None = None) -> None:
    """Print an assistant reply without its payload block or markdown."""
    text = clean_reply(text)
    if not text:
        return
    delay = SETTINGS.typewriter_delay if delay is None else delay
    print()
    sys.stdout.write("AI: ")
    for ch in text:
        sys.stdout.write(ch)
        if delay > 0:
            sys.stdout.flush()
            time.sleep(delay)
    sys.stdout.write("\n\n")
    sys.stdout.flush()


def print_log_result(result: SubmissionResult) -> None:
    mark = "OK  " if result.ok else "FAIL"
    print(f"[{mark}] {result.work_log.issue_key} {format_duration(result.work_log.seconds)}")
    if result.error:
        print_error(f"  {result.error}")


def print_commands(out: Callable[[str], None] = print) -> None:
    out("Available commands:")
    for name, description in SLASH_COMMANDS.items():
        out(f"  {name}  {description}")


def print_status(msg: str) -> None:
    print(msg)


def print_warning(msg: str) -> None:
    print(f"Warning: {msg}")


def print_error(msg: str) -> None:
    print(f"! {msg}", file=sys.stderr)


def print_no_issues() -> None:
    print_warning("No open issues found.")
    print("Check that there are issues in progress in Jira.")


def print_no_data() -> None:
    print_warning("Could not collect the work log data.")
    print("Try starting over.")


def print_cancelled() -> None:
    print_warning("Cancelled.")


def print_farewell() -> None:
    print()
    print("Thanks! See you.")
    print()


def clear_screen() -> None:
    os.system("cls" if os.name == "nt" else "clear")
