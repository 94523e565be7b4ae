"""Locate and decode the work-log payload embedded in an assistant reply."""

from __future__ import annotations

import json
import re
from typing import Any

from worklog_app.core.models import ParsedWorkLog, WorkLogCandidate
from worklog_app.core.timeparse import parse_duration

JSON_FENCE = "```json"
FENCE = "```"


def locate_payload(text: str) -> str | None:
    """Return the substring that should hold the payload, first strategy wins.

    1. a fence tagged ``json`` up to the next fence;
    2. the first fenced block, when the text also contains ``{``;
    3. the span from the first ``{`` to the last ``}``.
    """
    idx = text.find(JSON_FENCE)
    if idx >= 0:
        rest = text[idx + len(JSON_FENCE):]
        end = rest.find(FENCE)
        if end < 0:
            return None
        return rest[:end].strip() or None
    if FENCE in text and "{" in text:
        parts = text.split(FENCE, 2)
        return parts[1].strip() or None
    if "{" in text and "}" in text:
        start = text.find("{")
        end = text.rfind("}")
        if end > start:
            return text[start:end + 1]
    return None


def _text_field(entry: dict[str, Any], name: str) -> str:
    value = entry.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def decode_payload(payload: str) -> list[WorkLogCandidate] | None:
    """Decode a payload; ``None`` unless it is well formed and marked ready."""
    try:
        data = json.loads(payload)
        if not isinstance(data, dict) or data.get("ready_to_submit") is not True:
            return None
        entries = data.get("work_logs") or []
        if not isinstance(entries, list):
            return None
        candidates = []
        for entry in entries:
            if not isinstance(entry, dict):
                return None
            candidates.append(
                WorkLogCandidate(
                    issue_key=_text_field(entry, "issue_key"),
                    time_spent=_text_field(entry, "time_spent"),
                    description=_text_field(entry, "description"),
                )
            )
    except ValueError:
        return None
    return candidates


def extract_work_logs(text: str | None) -> list[ParsedWorkLog] | None:
    """Return confirmed work logs from a reply, or ``None`` when not ready.

    Entries whose duration parses to zero are dropped; a payload left with no
    entries counts as not ready.
    """
    if not text:
        return None
    payload = locate_payload(text)
    if payload is None:
        return None
    candidates = decode_payload(payload)
    if not candidates:
        return None
    logs = []
    for candidate in candidates:
        seconds = parse_duration(candidate.time_spent)
        if seconds > 0:
            logs.append(
                ParsedWorkLog(
                    issue_key=candidate.issue_key,
                    seconds=seconds,
                    description=candidate.description,
                )
            )
    return logs or None


# ------------------ Display cleanup ------------------
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_HEADING = re.compile(r"^#{1,3}\s+", re.MULTILINE)


def strip_payload(text: str) -> str:
    """Cut the structured block off a reply so users never see raw JSON."""
    idx = text.find(JSON_FENCE)
    if idx >= 0:
        return text[:idx].strip()
    if FENCE in text and "{" in text:
        return text.split(FENCE, 1)[0].strip()
    if "{" in text and '"work_logs"' in text:
        start = text.find("{")
        if start > 0:
            return text[:start].strip()
    return text


def strip_markdown(text: str) -> str:
    text = _BOLD.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    text = _INLINE_CODE.sub(r"\1", text)
    return _HEADING.sub("", text)


def clean_reply(text: str) -> str:
    return strip_markdown(strip_payload(text)).strip()
