"""Interactive setup: collect Jira and Gemini credentials and save them."""

from __future__ import annotations

import getpass
from collections.abc import Callable

from worklog_app.core import settings as settings_store
from worklog_app.core.settings import ConfigError, Settings

# (field, label, secret)
SETUP_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("jira_url", "Jira URL", False),
    ("jira_email", "Jira email (empty for a personal access token)", False),
    ("jira_api_token", "Jira API token", True),
    ("gemini_api_key", "Gemini API key", True),
    ("model", "Gemini model", False),
    ("timezone", "Timezone, e.g. Europe/Berlin (empty for the system zone)", False),
)


def prompt_value(
    label: str,
    current: str,
    secret: bool,
    read_line: Callable[[str], str],
) -> str:
    """Ask for one value; an empty answer keeps ``current``."""
    if current:
        shown = settings_store.mask(current) if secret else current
        prompt = f"{label} [{shown}]: "
    else:
        prompt = f"{label}: "
    value = read_line(prompt).strip()
    return value or current


def run_setup(
    read_line: Callable[[str], str] = input,
    read_secret: Callable[[str], str] = getpass.getpass,
) -> Settings:
    try:
        existing = settings_store.load_from_file()
    except (FileNotFoundError, ConfigError):
        existing = Settings()

    print("=== Secretary Configuration ===")
    print()
    values = {}
    for name, label, secret in SETUP_FIELDS:
        reader = read_secret if secret else read_line
        values[name] = prompt_value(label, getattr(existing, name), secret, reader)
    cfg = Settings(**values, language=existing.language)

    path = settings_store.save_settings(cfg)
    print()
    print(f"Config saved to {path}")
    return cfg
