"""Silence time-window resolution from start/end/duration inputs."""

from __future__ import annotations

import re
from datetime import datetime, timezone

import structlog

from src.core.types import SilenceWindow
from src.silence.durations import parse_duration
from src.silence.exceptions import (
    CommentRequiredError,
    DurationExceedsMaxError,
    InvalidDurationError,
    InvalidTimestampError,
    InvalidWindowError,
)

logger = structlog.stdlib.get_logger()

_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})"
)


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC3339 timestamp such as ``2024-01-02T15:04:05-07:00``.

    Raises:
        InvalidTimestampError: Malformed input, out-of-range fields or a
            missing UTC offset.
    """
    if not _RFC3339_RE.fullmatch(text):
        raise InvalidTimestampError(f"invalid RFC3339 timestamp {text!r}")
    try:
        return datetime.fromisoformat(text.upper())
    except ValueError as exc:
        raise InvalidTimestampError(f"invalid RFC3339 timestamp {text!r}") from exc


def resolve_window(
    start: str | None,
    end: str | None,
    duration: str,
    max_duration: str,
    require_comment: bool,
    comment: str,
    now: datetime | None = None,
) -> SilenceWindow:
    """Compute and validate the absolute window of a silence.

    An explicit ``end`` wins over ``duration``; the duration and max-duration
    checks only apply when the end is derived. An unparsable ``max_duration``
    means no limit.

    Args:
        start: RFC3339 start, or empty/None for "now".
        end: RFC3339 end, or empty/None to derive it from ``duration``.
        duration: Prometheus duration string, e.g. ``1h``.
        max_duration: Upper bound for a derived duration, e.g. ``12h``.
        require_comment: Whether an empty comment is rejected.
        comment: The silence comment.
        now: Current instant; captured in UTC when not given.

    Raises:
        InvalidTimestampError, InvalidDurationError, DurationExceedsMaxError,
        InvalidWindowError, CommentRequiredError.
    """
    if start:
        starts_at = parse_timestamp(start)
    else:
        starts_at = now or datetime.now(timezone.utc)

    if end:
        ends_at = parse_timestamp(end)
    else:
        delta = parse_duration(duration)
        if not delta:
            raise InvalidDurationError("silence duration must be greater than 0")
        ends_at = starts_at.astimezone(timezone.utc) + delta

        try:
            limit = parse_duration(max_duration)
        except InvalidDurationError:
            logger.warning("max_duration_unparsable", max_duration=max_duration)
            limit = None
        if limit is not None and delta > limit:
            raise DurationExceedsMaxError(duration, max_duration)

    if starts_at > ends_at:
        raise InvalidWindowError("silence cannot start after it ends")

    if require_comment and not comment:
        raise CommentRequiredError("comment required by config")

    return SilenceWindow(starts_at=starts_at, ends_at=ends_at)
