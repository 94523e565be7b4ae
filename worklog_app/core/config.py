"""Central configuration, constants, and tuning knobs."""

from __future__ import annotations

from dataclasses import dataclass

# =============================================================================
# Working Day
# =============================================================================
WORKDAY_HOURS = 8
WORKDAY_SECONDS = WORKDAY_HOURS * 3600

# Worklogs for a past day are started at this local hour
WORKLOG_START_HOUR = 9

# Canonical weekday labels, indexed by date.weekday()
WEEKDAY_LABELS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DATE_FORMAT = "%Y-%m-%d"
# Empty means the machine zone; worklog days are then taken as Jira recorded them
DEFAULT_TIMEZONE = ""

# =============================================================================
# Jira Queries
# =============================================================================
JIRA_API_VERSION = "2"
SEARCH_CACHE_TTL = 300.0  # seconds
SEARCH_PAGE_SIZE = 100
ISSUE_FIELDS = ["summary", "status"]

OPEN_ISSUES_JQL = 'status != "Done" AND issuetype not in (Story, Epic) ORDER BY updated DESC'
MY_ISSUES_JQL = f"assignee = currentUser() AND {OPEN_ISSUES_JQL}"
WORKLOG_RANGE_JQL = (
    'worklogDate >= "{start}" AND worklogDate <= "{end}" AND worklogAuthor = currentUser()'
)

# =============================================================================
# AI Backend
# =============================================================================
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_LANGUAGE = "Russian"

# Retry policy for transient backend failures: RETRY_ATTEMPTS retried calls
# waiting attempt * RETRY_UNIT_SECONDS after each, then one final call.
RETRY_ATTEMPTS = 3
RETRY_UNIT_SECONDS = 30.0
CANCEL_POLL_SECONDS = 0.5

# Markers the backend puts into transient error messages
RATE_LIMIT_MARKERS: frozenset[str] = frozenset({"429", "RESOURCE_EXHAUSTED"})
UNAVAILABLE_MARKERS: frozenset[str] = frozenset({"503", "UNAVAILABLE"})

# =============================================================================
# Conversation
# =============================================================================
MAX_TURNS = 20
GREETING_MESSAGE = "Hi! I am ready to start."
FINAL_SUMMARY_REQUEST = "Please wrap up and return all the collected data in JSON format."

# Keys are matched after lowercasing and trimming
EXIT_PHRASES: frozenset[str] = frozenset({"exit", "quit", "stop", "выход", "стоп"})
YES_ANSWERS: frozenset[str] = frozenset({"", "y", "yes", "д", "да"})
NO_ANSWERS: frozenset[str] = frozenset({"n", "no", "н", "нет"})

SLASH_COMMANDS: dict[str, str] = {
    "/help": "Show available commands",
    "/model": "Switch the AI model, e.g. /model gemini-2.5-pro",
    "/config": "Edit the saved settings (credentials apply on the next run)",
    "/clear": "Clear the screen",
    "/exit": "Leave the conversation",
}


@dataclass(slots=True)
class AppSettings:
    typewriter_delay: float = 0.01
    submit_pause: float = 0.3


SETTINGS = AppSettings()
