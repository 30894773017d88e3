"""Prometheus-style duration strings (``1h30m``, ``2d``, ``500ms``)."""

from __future__ import annotations

import re
from datetime import timedelta

from src.silence.exceptions import InvalidDurationError

# Units must appear largest first, each at most once.
_DURATION_RE = re.compile(
    r"^(?:(?P<y>\d+)y)?(?:(?P<w>\d+)w)?(?:(?P<d>\d+)d)?(?:(?P<h>\d+)h)?"
    r"(?:(?P<m>\d+)m)?(?:(?P<s>\d+)s)?(?:(?P<ms>\d+)ms)?$"
)

_UNIT_MS: dict[str, int] = {
    "y": 365 * 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "h": 60 * 60 * 1000,
    "m": 60 * 1000,
    "s": 1000,
    "ms": 1,
}


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h`` or ``1d12h``.

    A bare ``0`` is accepted and yields a zero duration.

    Raises:
        InvalidDurationError: If the string is empty or malformed.
    """
    if text == "0":
        return timedelta(0)
    if not text:
        raise InvalidDurationError("empty duration string")

    match = _DURATION_RE.match(text)
    if match is None:
        raise InvalidDurationError(f"not a valid duration string: {text!r}")

    total_ms = 0
    for unit, amount in match.groupdict().items():
        if amount is not None:
            total_ms += int(amount) * _UNIT_MS[unit]
    return timedelta(milliseconds=total_ms)


def format_duration(delta: timedelta) -> str:
    """Render a timedelta back into the compact ``1h30m`` form."""
    total_ms = int(delta / timedelta(milliseconds=1))
    if total_ms == 0:
        return "0s"

    parts: list[str] = []
    for unit in ("y", "w", "d", "h", "m", "s", "ms"):
        size = _UNIT_MS[unit]
        if total_ms >= size:
            parts.append(f"{total_ms // size}{unit}")
            total_ms %= size
    return "".join(parts)
