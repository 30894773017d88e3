"""Domain types for silences and their submission."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def format_timestamp(ts: datetime) -> str:
    """Render a datetime as RFC3339 with millisecond precision.

    UTC instants use the ``Z`` suffix, matching what Alertmanager returns.
    """
    text = ts.isoformat(timespec="milliseconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


class MatchType(StrEnum):
    """Textual matcher operators, longest first."""

    REGEX = "=~"
    NOT_REGEX = "!~"
    NOT_EQUAL = "!="
    EQUAL = "="

    @property
    def is_equal(self) -> bool:
        return self in (MatchType.EQUAL, MatchType.REGEX)

    @property
    def is_regex(self) -> bool:
        return self in (MatchType.REGEX, MatchType.NOT_REGEX)


class Matcher(BaseModel):
    """A single label comparison inside a silence."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    value: str
    is_equal: bool = Field(default=True, alias="isEqual")
    is_regex: bool = Field(default=False, alias="isRegex")

    @classmethod
    def from_operator(cls, name: str, op: MatchType, value: str) -> Matcher:
        return cls(name=name, value=value, is_equal=op.is_equal, is_regex=op.is_regex)

    @property
    def operator(self) -> MatchType:
        if self.is_regex:
            return MatchType.REGEX if self.is_equal else MatchType.NOT_REGEX
        return MatchType.EQUAL if self.is_equal else MatchType.NOT_EQUAL

    def __str__(self) -> str:
        return f"{self.name}{self.operator}{self.value!r}"


class SilenceWindow(BaseModel):
    """Absolute start/end instants of a silence."""

    model_config = ConfigDict(frozen=True)

    starts_at: datetime
    ends_at: datetime

    @property
    def duration(self) -> timedelta:
        return self.ends_at - self.starts_at


class SilenceRequest(BaseModel):
    """Outbound silence payload — built once, reused for every tenant."""

    model_config = ConfigDict(frozen=True)

    matchers: tuple[Matcher, ...] = Field(min_length=1)
    starts_at: datetime
    ends_at: datetime
    created_by: str = ""
    comment: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body for ``POST /api/v2/silences``.

        All four matcher fields are always present, even when false.
        """
        return {
            "matchers": [
                {
                    "name": m.name,
                    "value": m.value,
                    "isEqual": m.is_equal,
                    "isRegex": m.is_regex,
                }
                for m in self.matchers
            ],
            "startsAt": format_timestamp(self.starts_at.astimezone(timezone.utc)),
            "endsAt": format_timestamp(self.ends_at.astimezone(timezone.utc)),
            "createdBy": self.created_by,
            "comment": self.comment,
        }


class TenantMode(StrEnum):
    """How the silence is fanned out across tenants."""

    NONE = "NONE"
    SINGLE = "SINGLE"
    FILE = "FILE"


class SubmissionOutcome(BaseModel):
    """Result of one submission attempt."""

    tenant: str | None = None
    success: bool = False
    silence_id: str | None = None
    error: str | None = None
