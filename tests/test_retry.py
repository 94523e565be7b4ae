import threading
import time

import pytest

from worklog_app.assistant.backend import BackendError, FailureKind
from worklog_app.assistant.retry import CancelToken, SessionCancelled, backoff_delay, call_with_retry


class Flaky:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def test_backoff_is_linear():
    assert [backoff_delay(n) for n in (1, 2, 3)] == [30, 60, 90]
    assert backoff_delay(2, unit=0.5) == 1.0


def test_transient_failures_are_retried_with_growing_waits():
    waits = []
    func = Flaky([BackendError("429", FailureKind.RATE_LIMITED), BackendError("503", FailureKind.UNAVAILABLE)])
    assert call_with_retry(func, sleep=waits.append) == "ok"
    assert func.calls == 3
    assert waits == [30, 60]


def test_fatal_failure_is_not_retried():
    waits = []
    func = Flaky([BackendError("bad key", FailureKind.FATAL)])
    with pytest.raises(BackendError):
        call_with_retry(func, sleep=waits.append)
    assert func.calls == 1
    assert waits == []


def test_final_attempt_outcome_returned_as_is():
    waits = []
    errors = [BackendError("429", FailureKind.RATE_LIMITED) for _ in range(4)]
    func = Flaky(errors)
    with pytest.raises(BackendError) as info:
        call_with_retry(func, sleep=waits.append)
    assert info.value.kind is FailureKind.RATE_LIMITED
    assert func.calls == 4
    assert waits == [30, 60, 90]


def test_final_attempt_may_succeed():
    waits = []
    func = Flaky([BackendError("429", FailureKind.RATE_LIMITED) for _ in range(3)], result="late")
    assert call_with_retry(func, sleep=waits.append) == "late"
    assert func.calls == 4


def test_on_retry_callback_sees_error_and_wait():
    seen = []
    func = Flaky([BackendError("busy", FailureKind.UNAVAILABLE)])
    call_with_retry(func, sleep=lambda s: None, on_retry=lambda exc, wait: seen.append((str(exc), wait)))
    assert seen == [("busy", 30)]


def test_cancel_during_retry_wait_propagates_cancellation():
    token = CancelToken(poll_interval=0.01)
    func = Flaky([BackendError("429", FailureKind.RATE_LIMITED)])
    timer = threading.Timer(0.05, token.cancel)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(SessionCancelled):
            call_with_retry(func, sleep=token.sleep)
    finally:
        timer.cancel()
    assert time.monotonic() - started < 5
    assert func.calls == 1


def test_sleep_returns_after_deadline():
    token = CancelToken(poll_interval=0.01)
    token.sleep(0.02)
    assert not token.cancelled


def test_already_cancelled_token_raises_immediately():
    token = CancelToken(poll_interval=10)
    token.cancel()
    with pytest.raises(SessionCancelled):
        token.sleep(30)
