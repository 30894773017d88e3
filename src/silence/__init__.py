"""Silence construction — matchers, time window, request assembly."""

from src.silence.builder import build_silence_request, default_author
from src.silence.durations import format_duration, parse_duration
from src.silence.exceptions import (
    CommentRequiredError,
    DurationExceedsMaxError,
    InvalidDurationError,
    InvalidTimestampError,
    InvalidWindowError,
    MatcherSyntaxError,
    NoMatchersError,
    SilenceError,
)
from src.silence.matchers import parse_matcher, parse_matchers
from src.silence.window import parse_timestamp, resolve_window

__all__ = [
    "CommentRequiredError",
    "DurationExceedsMaxError",
    "InvalidDurationError",
    "InvalidTimestampError",
    "InvalidWindowError",
    "MatcherSyntaxError",
    "NoMatchersError",
    "SilenceError",
    "build_silence_request",
    "default_author",
    "format_duration",
    "parse_duration",
    "parse_matcher",
    "parse_matchers",
    "parse_timestamp",
    "resolve_window",
]
