"""Wall-clock helpers. Times of day are handled as minutes since midnight."""

from __future__ import annotations

import re

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert 'HH:MM' to minutes since midnight."""

    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM.")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    """Convert minutes since midnight to 'HH:MM', wrapping around midnight."""

    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def align_up(minute: int, anchor: int, step: int) -> int:
    """Smallest grid point ``anchor + k * step`` (k >= 0) that is >= ``minute``."""

    if minute <= anchor:
        return anchor
    offset = minute - anchor
    return anchor + -(-offset // step) * step
