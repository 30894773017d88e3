"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path(os.path.expandvars("$HOME/.config/atm/config.yml")),
    Path("/etc/atm/config.yml"),
)

# Old flat keys still accepted in config files → current key.
_LEGACY_KEYS: dict[str, str] = {"comment_required": "require_comment"}

# Flat keys in the file mapped to (section, field).
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "alertmanager.url": ("alertmanager", "url"),
    "timeout": ("alertmanager", "timeout"),
    "http.config.file": ("alertmanager", "http_config_file"),
    "tenant.http-header": ("alertmanager", "tenant_http_header"),
    "author": ("silence", "author"),
    "require_comment": ("silence", "require_comment"),
    "require-comment": ("silence", "require_comment"),
    "duration": ("silence", "duration"),
    "max-duration": ("silence", "max_duration"),
    "max_duration": ("silence", "max_duration"),
}


class ConfigError(Exception):
    """Raised when a settings file cannot be read or validated."""


class AlertmanagerConfig(BaseModel):
    """Alertmanager endpoint and HTTP client configuration."""

    url: str = ""
    timeout: str = "30s"
    http_config_file: str = ""
    tenant_http_header: str = "X-Scope-OrgID"


class SilenceConfig(BaseModel):
    """Defaults applied to new silences."""

    author: str = ""
    require_comment: bool = True
    duration: str = "1h"
    max_duration: str = "12h"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "console"


class Settings(BaseModel):
    """Root settings container."""

    alertmanager: AlertmanagerConfig = AlertmanagerConfig()
    silence: SilenceConfig = SilenceConfig()
    logging: LoggingConfig = LoggingConfig()


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    """Fold flat and legacy keys into the nested settings layout.

    Config files written for the flag names (``alertmanager.url: ...``,
    ``comment_required: false``) are accepted alongside the nested form.
    """
    data: dict[str, Any] = {}
    for key, value in raw.items():
        key = _LEGACY_KEYS.get(key, key)
        if key in _FLAT_KEYS:
            section, field = _FLAT_KEYS[key]
            data.setdefault(section, {})[field] = value
        elif isinstance(value, dict):
            data.setdefault(key, {}).update(value)
        else:
            data[key] = value
    silence = data.get("silence")
    if isinstance(silence, dict):
        for old, new in _LEGACY_KEYS.items():
            if old in silence:
                silence.setdefault(new, silence.pop(old))
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Path to a YAML config. When None, the first existing file of
            ``DEFAULT_CONFIG_PATHS`` is used; with none present, defaults apply.

    Returns:
        Parsed Settings instance.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or fails validation.
    """
    candidates = [Path(path)] if path else list(DEFAULT_CONFIG_PATHS)

    data: dict[str, Any] = {}
    for config_path in candidates:
        if not config_path.exists():
            continue
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"could not load config file {config_path}: {exc}") from exc
        if isinstance(raw, dict):
            data = _normalize(raw)
        break

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc
