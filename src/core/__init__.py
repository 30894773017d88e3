"""Core module — config, types, logging."""

from src.core.config import ConfigError, Settings, load_settings
from src.core.logging import setup_logging
from src.core.types import (
    Matcher,
    MatchType,
    SilenceRequest,
    SilenceWindow,
    SubmissionOutcome,
    TenantMode,
    format_timestamp,
)

__all__ = [
    "ConfigError",
    "MatchType",
    "Matcher",
    "Settings",
    "SilenceRequest",
    "SilenceWindow",
    "SubmissionOutcome",
    "TenantMode",
    "format_timestamp",
    "load_settings",
    "setup_logging",
]
