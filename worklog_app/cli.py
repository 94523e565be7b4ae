"""Command-line entry point: ``secretary [today|period|config|version]``."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from importlib.metadata import PackageNotFoundError, version

import pytz

from worklog_app.assistant.backend import BackendError, ChatBackend
from worklog_app.assistant.retry import CancelToken, SessionCancelled
from worklog_app.core import settings as settings_store
from worklog_app.core.config import SETTINGS
from worklog_app.core.jira_client import JiraAPI, TrackerError
from worklog_app.core.service import WorklogService
from worklog_app.core.settings import ConfigError, Settings
from worklog_app.session.driver import ConversationDriver
from worklog_app.session.runner import Runner, review_and_confirm
from worklog_app.session.submission import SubmissionPipeline
from worklog_app.terminal import console
from worklog_app.terminal.prompting import parse_date, read_date_range
from worklog_app.terminal.setup import run_setup

logger = logging.getLogger(__name__)

DIST_NAME = "jira-secretary"


def get_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "dev"


def _date_arg(value: str):
    try:
        return parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, use YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="secretary", description="Log your working time to Jira by talking to an AI assistant.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("today", help="log today's work (default)")
    period = sub.add_parser("period", help="fill every unfilled weekday in a date range")
    period.add_argument("--start", type=_date_arg, help="first day, YYYY-MM-DD")
    period.add_argument("--end", type=_date_arg, help="last day, YYYY-MM-DD")
    sub.add_parser("config", help="run the setup wizard")
    sub.add_parser("version", help="print the version")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def load_or_setup() -> Settings:
    cfg = settings_store.load_settings()
    if cfg.missing() and not settings_store.exists():
        print("No configuration found. Let's set it up!")
        print()
        run_setup()
        cfg = settings_store.load_settings()
    cfg.validate()
    return cfg


def build_runner(cfg: Settings, cancel: CancelToken) -> Runner:
    try:
        service = WorklogService(JiraAPI(cfg.jira_url, cfg.jira_email, cfg.jira_api_token), timezone=cfg.timezone)
    except pytz.UnknownTimeZoneError as exc:
        raise ConfigError(f"Unknown timezone: {cfg.timezone}") from exc
    backend = ChatBackend(cfg.gemini_api_key, model=cfg.model)
    driver = ConversationDriver(backend, cancel=cancel, language=cfg.language)
    pipeline = SubmissionPipeline(
        service,
        confirm=review_and_confirm,
        on_result=console.print_log_result,
        pause=SETTINGS.submit_pause,
    )
    return Runner(service, driver, pipeline)


def run(args: argparse.Namespace, cancel: CancelToken) -> None:
    cfg = load_or_setup()
    runner = build_runner(cfg, cancel)
    if args.command == "period":
        start, end = args.start, args.end
        if start is None or end is None:
            start, end = read_date_range()
        if end < start:
            raise ConfigError("End date must not be before the start date")
        runner.run_period(start, end)
    else:
        runner.run_today()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "version":
        print(f"secretary version {get_version()}")
        return 0

    cancel = CancelToken()

    def _on_interrupt(signum, frame):
        cancel.cancel()
        raise KeyboardInterrupt

    previous = signal.signal(signal.SIGINT, _on_interrupt)
    try:
        if args.command == "config":
            run_setup()
        else:
            run(args, cancel)
    except (KeyboardInterrupt, SessionCancelled):
        print()
        console.print_status("Interrupted by user. See you!")
        return 0
    except (ConfigError, TrackerError, BackendError) as exc:
        logger.debug("Fatal error", exc_info=True)
        console.print_error(str(exc))
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)
    return 0


if __name__ == "__main__":
    sys.exit(main())
