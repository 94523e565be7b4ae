"""Persistent credentials and per-user settings stored under ``~/.secretary``."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from .config import DEFAULT_LANGUAGE, DEFAULT_MODEL, DEFAULT_TIMEZONE

HOME_ENV_VAR = "SECRETARY_HOME"
CONFIG_FILENAME = "config.json"

# Environment variables take precedence over the config file
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "jira_url": ("JIRA_SERVER", "JIRA_URL"),
    "jira_email": ("JIRA_EMAIL",),
    "jira_api_token": ("JIRA_API_TOKEN", "JIRA_TOKEN"),
    "gemini_api_key": ("GEMINI_API_KEY",),
    "model": ("SECRETARY_MODEL",),
    "timezone": ("SECRETARY_TIMEZONE",),
}

REQUIRED_FIELDS: tuple[str, ...] = ("jira_url", "jira_api_token", "gemini_api_key")


class ConfigError(RuntimeError):
    """Raised when the settings file is unreadable or incomplete."""


@dataclass(slots=True)
class Settings:
    jira_url: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    gemini_api_key: str = ""
    model: str = DEFAULT_MODEL
    timezone: str = DEFAULT_TIMEZONE
    language: str = DEFAULT_LANGUAGE

    def missing(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def validate(self) -> None:
        missing = self.missing()
        if missing:
            raise ConfigError(f"Missing settings: {', '.join(missing)}. Run `secretary config`.")


def config_dir() -> Path:
    override = os.getenv(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".secretary"


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def exists() -> bool:
    return config_path().is_file()


def _normalize(settings: Settings) -> Settings:
    settings.jira_url = settings.jira_url.strip().rstrip("/")
    return settings


def _apply_env(settings: Settings) -> Settings:
    for name, env_vars in ENV_OVERRIDES.items():
        for var in env_vars:
            value = os.getenv(var)
            if value:
                setattr(settings, name, value)
                break
    return settings


def load_from_file() -> Settings:
    """Read the settings file without environment overrides."""
    path = config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a JSON object")
    known = {f.name for f in fields(Settings)}
    values = {k: str(v) for k, v in data.items() if k in known and v is not None}
    return _normalize(Settings(**values))


def load_settings() -> Settings:
    """Load the settings file (if any) and apply environment overrides."""
    try:
        settings = load_from_file()
    except FileNotFoundError:
        settings = Settings()
    return _normalize(_apply_env(settings))


def save_settings(settings: Settings) -> Path:
    directory = config_dir()
    try:
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        path = config_path()
        # Owner-only before any secret is written, including a pre-existing file
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            path.chmod(0o600)
            json.dump(asdict(_normalize(settings)), fh, indent=2)
    except OSError as exc:
        raise ConfigError(f"Failed to save config: {exc}") from exc
    return path


def mask(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return "*" * (len(secret) - 4) + secret[-4:]
