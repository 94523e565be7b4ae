"""Chat backend: Gemini through its OpenAI-compatible endpoint."""

from __future__ import annotations

import logging
from enum import Enum

import openai
from openai import OpenAI

from worklog_app.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    RATE_LIMIT_MARKERS,
    UNAVAILABLE_MARKERS,
)

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    FATAL = "fatal"


class BackendError(RuntimeError):
    """A failed backend call tagged with whether it is worth retrying."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.FATAL):
        super().__init__(message)
        self.kind = kind

    @property
    def transient(self) -> bool:
        return self.kind is not FailureKind.FATAL


def classify_failure(exc: Exception) -> FailureKind:
    if isinstance(exc, openai.RateLimitError):
        return FailureKind.RATE_LIMITED
    status = getattr(exc, "status_code", None)
    if status == 429:
        return FailureKind.RATE_LIMITED
    if status == 503:
        return FailureKind.UNAVAILABLE
    # Gemini reports quota and overload conditions in the message body
    message = str(exc)
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return FailureKind.RATE_LIMITED
    if any(marker in message for marker in UNAVAILABLE_MARKERS):
        return FailureKind.UNAVAILABLE
    return FailureKind.FATAL


class ChatSession:
    """One dialogue with its own message history."""

    def __init__(self, client: OpenAI, model: str, system_prompt: str):
        self._client = client
        self.model = model
        self.messages: list[dict[str, str]] = [{"role": "system", "content": system_prompt}]

    def send(self, text: str) -> str:
        messages = [*self.messages, {"role": "user", "content": text}]
        try:
            response = self._client.chat.completions.create(model=self.model, messages=messages)
        except openai.APIError as exc:
            kind = classify_failure(exc)
            raise BackendError(str(exc), kind) from exc
        reply = ""
        if response.choices:
            reply = response.choices[0].message.content or ""
        self.messages = [*messages, {"role": "assistant", "content": reply}]
        logger.debug("Backend replied with %s chars", len(reply))
        return reply


class ChatBackend:
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, base_url: str = DEFAULT_BASE_URL):
        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url)

    def open_session(self, system_prompt: str) -> ChatSession:
        return ChatSession(self.client, self.model, system_prompt)
