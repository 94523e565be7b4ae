"""Retry policy for transient backend failures and the cancellation signal."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TypeVar

from worklog_app.core.config import CANCEL_POLL_SECONDS, RETRY_ATTEMPTS, RETRY_UNIT_SECONDS

from .backend import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionCancelled(Exception):
    """The user interrupted the current interview."""


class CancelToken:
    """Process-wide cancellation flag with an interruptible sleep."""

    def __init__(self, poll_interval: float = CANCEL_POLL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._event = threading.Event()
        self.poll_interval = poll_interval
        self._clock = clock

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SessionCancelled("cancelled")

    def sleep(self, seconds: float) -> None:
        """Wait ``seconds``, waking every poll interval to check for cancellation."""
        deadline = self._clock() + seconds
        while True:
            self.raise_if_cancelled()
            remaining = deadline - self._clock()
            if remaining <= 0:
                return
            if self._event.wait(min(self.poll_interval, remaining)):
                raise SessionCancelled("cancelled")


def backoff_delay(attempt: int, unit: float = RETRY_UNIT_SECONDS) -> float:
    """Linear backoff: 1 -> 30s, 2 -> 60s, 3 -> 90s."""
    return attempt * unit


def call_with_retry(
    func: Callable[[], T],
    *,
    sleep: Callable[[float], None],
    attempts: int = RETRY_ATTEMPTS,
    delay: Callable[[int], float] = backoff_delay,
    on_retry: Callable[[BackendError, float], None] | None = None,
) -> T:
    """Call ``func``, retrying transient ``BackendError`` failures.

    Each of the first ``attempts`` calls that fails transiently is followed by
    a ``delay(attempt)`` wait; the call after the last wait is returned or
    raised as-is. Fatal failures propagate immediately.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except BackendError as exc:
            if not exc.transient:
                raise
            wait = delay(attempt)
            logger.warning("Transient backend failure (%s), retry %s in %.0fs", exc.kind.value, attempt, wait)
            if on_retry:
                on_retry(exc, wait)
            sleep(wait)
    return func()
