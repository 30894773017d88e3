"""Exception hierarchy for silence parsing and validation."""

from __future__ import annotations


class SilenceError(Exception):
    """Base exception for silence input errors."""


class MatcherSyntaxError(SilenceError):
    """A matcher expression could not be parsed."""

    def __init__(self, expression: str, reason: str = "") -> None:
        self.expression = expression
        self.reason = reason
        msg = f"bad matcher format: {expression}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class NoMatchersError(SilenceError):
    """No usable matcher was supplied."""


class InvalidDurationError(SilenceError):
    """Duration is unparsable or zero."""


class DurationExceedsMaxError(SilenceError):
    """Requested duration is longer than the configured maximum."""

    def __init__(self, duration: str, max_duration: str) -> None:
        self.duration = duration
        self.max_duration = max_duration
        super().__init__(
            f"silence duration '{duration}' couldn't be greater than '{max_duration}'"
        )


class InvalidWindowError(SilenceError):
    """Silence would start after it ends."""


class CommentRequiredError(SilenceError):
    """A comment is mandatory but was not given."""


class InvalidTimestampError(SilenceError):
    """A start/end value is not an RFC3339 timestamp."""
