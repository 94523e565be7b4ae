"""Line-based user input: free text, yes/no, dates, slash commands."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

from worklog_app.core.config import DATE_FORMAT, EXIT_PHRASES, NO_ANSWERS, YES_ANSWERS


def read_input(prompt: str) -> str:
    return input(prompt).strip()


def is_exit_command(text: str) -> bool:
    return text.strip().lower() in EXIT_PHRASES


def parse_command(text: str) -> tuple[str, str] | None:
    """Split ``"/model gemini-pro"`` into ``("/model", "gemini-pro")``."""
    text = text.strip()
    if not text.startswith("/"):
        return None
    name, _, args = text.partition(" ")
    return name.lower(), args.strip()


def confirm_yes_no(question: str, read_line: Callable[[str], str] = input) -> bool:
    """Ask until a recognised answer; an empty answer means yes, EOF means no."""
    while True:
        try:
            answer = read_line(f"{question} [Y/n]: ").strip().lower()
        except EOFError:
            return False
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False


def parse_date(text: str) -> date:
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def read_date(label: str, read_line: Callable[[str], str] = input) -> date:
    while True:
        try:
            return parse_date(read_line(f"{label} (YYYY-MM-DD): "))
        except ValueError:
            print("Invalid date format, use YYYY-MM-DD")


def read_date_range(read_line: Callable[[str], str] = input) -> tuple[date, date]:
    while True:
        start = read_date("Start date", read_line)
        end = read_date("End date", read_line)
        if end >= start:
            return start, end
        print("End date must not be before the start date")
