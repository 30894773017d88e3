"""Assembly of the outbound silence request."""

from __future__ import annotations

import getpass
from collections.abc import Sequence

from src.core.types import Matcher, SilenceRequest, SilenceWindow


def default_author() -> str:
    """Login name of the invoking user, or "" when it cannot be determined."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def build_silence_request(
    matchers: Sequence[Matcher],
    window: SilenceWindow,
    author: str,
    comment: str,
) -> SilenceRequest:
    """Combine validated pieces into one immutable SilenceRequest."""
    return SilenceRequest(
        matchers=tuple(matchers),
        starts_at=window.starts_at,
        ends_at=window.ends_at,
        created_by=author,
        comment=comment,
    )
