"""Informal duration parsing ("2h 30m", "1.5ч") and formatting."""

from __future__ import annotations

import math

# Cyrillic unit letters folded onto the Latin vocabulary
UNIT_ALIASES: dict[str, str] = {
    "ч": "h",
    "м": "m",
}


def _parse_amount(text: str) -> float | None:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def parse_duration(value: str | None) -> int:
    """Convert a human-readable duration into whole seconds.

    Hours must precede minutes when both are present. Anything that cannot be
    parsed contributes nothing, so garbage input yields 0 rather than raising.

    >>> parse_duration("2h 30m")
    9000
    >>> parse_duration("1.5ч")
    5400
    >>> parse_duration("soon")
    0
    """
    if not value:
        return 0
    text = value.strip().lower()
    for alias, unit in UNIT_ALIASES.items():
        text = text.replace(alias, unit)

    total = 0
    if "h" in text:
        head, _, text = text.partition("h")
        hours = _parse_amount(head)
        if hours is not None:
            total += round(hours * 3600)
    if "m" in text:
        head, _, _ = text.partition("m")
        minutes = _parse_amount(head)
        if minutes is not None:
            total += round(minutes * 60)
    return total


def format_duration(seconds: int) -> str:
    """Render seconds as ``"2h 30m"``, ``"2h"`` or ``"30m"``."""
    hours, minutes = divmod(max(int(seconds), 0) // 60, 60)
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"


def format_hours(seconds: int) -> str:
    return f"{seconds / 3600:.1f}h"
