"""ConversationDriver: the bounded interview for one day."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date

from worklog_app.assistant.backend import BackendError, ChatBackend, ChatSession
from worklog_app.assistant.extractor import extract_work_logs
from worklog_app.assistant.prompts import build_system_prompt
from worklog_app.assistant.retry import CancelToken, SessionCancelled, call_with_retry
from worklog_app.core.config import (
    DEFAULT_LANGUAGE,
    FINAL_SUMMARY_REQUEST,
    GREETING_MESSAGE,
    MAX_TURNS,
)
from worklog_app.core.models import DialogueOutcome, DialogueState, ParsedWorkLog, TrackedIssue
from worklog_app.core.settings import ConfigError, Settings
from worklog_app.terminal import console
from worklog_app.terminal.prompting import is_exit_command, parse_command, read_input
from worklog_app.terminal.setup import run_setup

logger = logging.getLogger(__name__)

USER_PROMPT = "You: "


class ConversationDriver:
    """Runs one interview: greet, alternate user/backend turns, extract.

    The loop checks the last reply for a ready payload before every user read.
    After ``max_turns`` backend turns without one, a single summary request is
    sent; if that still yields nothing the dialogue is abandoned.
    """

    def __init__(
        self,
        backend: ChatBackend,
        *,
        cancel: CancelToken,
        read_line: Callable[[str], str] = read_input,
        show_reply: Callable[[str], None] = console.print_reply,
        notify: Callable[[str], None] = console.print_status,
        clear_screen: Callable[[], None] = console.clear_screen,
        configure: Callable[[], Settings] = run_setup,
        sleep: Callable[[float], None] | None = None,
        max_turns: int = MAX_TURNS,
        language: str = DEFAULT_LANGUAGE,
    ):
        self.backend = backend
        self.cancel = cancel
        self.read_line = read_line
        self.show_reply = show_reply
        self.notify = notify
        self.clear_screen = clear_screen
        self.configure = configure
        self.sleep = sleep or cancel.sleep
        self.max_turns = max_turns
        self.language = language
        self.state = DialogueState.STARTED

    def run(
        self,
        issues: Sequence[TrackedIssue],
        logged_seconds: int,
        day: date | None = None,
    ) -> DialogueOutcome:
        self.state = DialogueState.STARTED
        session = self.backend.open_session(
            build_system_prompt(issues, logged_seconds, day, language=self.language)
        )
        response = self._send(session, GREETING_MESSAGE)

        turns = 0
        while turns < self.max_turns:
            work_logs = extract_work_logs(response)
            if work_logs:
                return self._finish(DialogueState.EXTRACTED, turns, work_logs)

            user_input = self._read()
            if not user_input:
                continue
            if is_exit_command(user_input):
                return self._finish(DialogueState.CANCELLED, turns)
            command = parse_command(user_input)
            if command is not None:
                if self._handle_command(session, *command):
                    return self._finish(DialogueState.CANCELLED, turns)
                continue

            response = self._send(session, user_input)
            turns += 1

        work_logs = extract_work_logs(response)
        if work_logs is None:
            self.notify("Collecting the data...")
            try:
                response = self._send(session, FINAL_SUMMARY_REQUEST)
            except BackendError as exc:
                logger.warning("Final summary request failed: %s", exc)
                response = ""
            work_logs = extract_work_logs(response)
        if work_logs is None:
            return self._finish(DialogueState.ABANDONED, turns)
        return self._finish(DialogueState.EXTRACTED, turns, work_logs)

    def _finish(
        self,
        state: DialogueState,
        turns: int,
        work_logs: list[ParsedWorkLog] | None = None,
    ) -> DialogueOutcome:
        self.state = state
        logger.debug("Dialogue finished as %s after %s turns", state.value, turns)
        return DialogueOutcome(state=state, work_logs=work_logs or [], turns=turns)

    def _send(self, session: ChatSession, text: str) -> str:
        self.cancel.raise_if_cancelled()
        self.state = DialogueState.RESPONDING
        try:
            reply = call_with_retry(
                lambda: session.send(text),
                sleep=self.sleep,
                on_retry=self._on_retry,
            )
        except KeyboardInterrupt as exc:
            raise SessionCancelled("interrupted") from exc
        self.show_reply(reply)
        return reply

    def _read(self) -> str:
        self.cancel.raise_if_cancelled()
        self.state = DialogueState.AWAITING_USER
        try:
            return self.read_line(USER_PROMPT).strip()
        except (KeyboardInterrupt, EOFError) as exc:
            raise SessionCancelled("interrupted") from exc

    def _on_retry(self, exc: BackendError, wait: float) -> None:
        self.notify(f"! {exc} - retrying in {wait:.0f}s...")

    def _handle_command(self, session: ChatSession, name: str, args: str) -> bool:
        """Run a slash command; True means the dialogue should stop."""
        if name == "/exit":
            return True
        if name == "/help":
            console.print_commands(self.notify)
        elif name == "/model":
            if args:
                session.model = args
                self.backend.model = args
                self.notify(f"Model switched to {args}")
            else:
                self.notify(f"Current model: {session.model}")
        elif name == "/config":
            try:
                cfg = self.configure()
            except ConfigError as exc:
                self.notify(f"! {exc}")
                return False
            if cfg.model and cfg.model != session.model:
                session.model = cfg.model
                self.backend.model = cfg.model
            self.notify("Settings saved. New credentials apply on the next run.")
        elif name == "/clear":
            self.clear_screen()
        else:
            self.notify(f"Unknown command {name}. Type /help for the list.")
        return False
