"""HTTP client configuration file — a subset of Prometheus ``http_config``.

Example::

    basic_auth:
      username: atm
      password_file: /etc/atm/password
    tls_config:
      ca_file: /etc/ssl/am-ca.pem
      insecure_skip_verify: false
    http_headers:
      X-Team:
        values: [sre]
    follow_redirects: true
"""

from __future__ import annotations

import ssl
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import httpx
import yaml
from pydantic import BaseModel, SecretStr, ValidationError

from src.alertmanager.exceptions import HttpConfigError

DEFAULT_SCHEME = "http"


class BasicAuth(BaseModel):
    username: str = ""
    password: SecretStr = SecretStr("")
    password_file: str = ""


class Authorization(BaseModel):
    type: str = "Bearer"
    credentials: SecretStr = SecretStr("")
    credentials_file: str = ""


class TLSConfig(BaseModel):
    ca_file: str = ""
    cert_file: str = ""
    key_file: str = ""
    insecure_skip_verify: bool = False


class HeaderValues(BaseModel):
    values: list[str] = []


class HttpClientConfig(BaseModel):
    """Transport settings applied to every Alertmanager request."""

    basic_auth: BasicAuth | None = None
    authorization: Authorization | None = None
    bearer_token: SecretStr = SecretStr("")
    tls_config: TLSConfig = TLSConfig()
    http_headers: dict[str, HeaderValues] = {}
    follow_redirects: bool = True


def with_scheme(url: str) -> str:
    """Prefix a scheme-less Alertmanager URL with ``http://``."""
    if url and "://" not in url:
        return f"{DEFAULT_SCHEME}://{url}"
    return url


def _read_secret(path: str) -> str:
    try:
        return Path(path).read_text().strip()
    except OSError as exc:
        raise HttpConfigError(f"unable to read secret file '{path}': {exc}") from exc


def load_http_config(path: str | Path) -> HttpClientConfig:
    """Load and validate an HTTP client configuration file.

    Raises:
        HttpConfigError: Unreadable file, bad YAML, or invalid structure.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise HttpConfigError(f"failed to load HTTP config file: {exc}") from exc

    try:
        config = HttpClientConfig(**(raw if isinstance(raw, dict) else {}))
    except ValidationError as exc:
        raise HttpConfigError(f"failed to load HTTP config file: {exc}") from exc

    if config.basic_auth is not None and (
        config.authorization is not None or config.bearer_token.get_secret_value()
    ):
        raise HttpConfigError(
            "at most one of basic_auth, authorization and bearer_token may be configured"
        )
    return config


def _ssl_context(tls: TLSConfig) -> ssl.SSLContext | bool:
    if not (tls.ca_file or tls.cert_file or tls.insecure_skip_verify):
        return True
    try:
        ctx = ssl.create_default_context(cafile=tls.ca_file or None)
        if tls.cert_file:
            ctx.load_cert_chain(tls.cert_file, tls.key_file or None)
    except (OSError, ssl.SSLError) as exc:
        raise HttpConfigError(f"invalid tls_config: {exc}") from exc
    if tls.insecure_skip_verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def client_kwargs(url: str, config: HttpClientConfig | None = None) -> dict[str, Any]:
    """Build ``httpx.AsyncClient`` keyword arguments for an Alertmanager URL.

    Credentials embedded in the URL become basic auth; they cannot be combined
    with an HTTP config file.

    Raises:
        HttpConfigError: URL credentials together with a config file.
    """
    parts = urlsplit(with_scheme(url))
    kwargs: dict[str, Any] = {}

    if parts.username is not None:
        if config is not None:
            raise HttpConfigError(
                "basic authentication and http.config.file are mutually exclusive"
            )
        kwargs["auth"] = httpx.BasicAuth(
            unquote(parts.username), unquote(parts.password or "")
        )
        return kwargs

    if config is None:
        return kwargs

    headers: dict[str, str] = {
        name: ", ".join(h.values) for name, h in config.http_headers.items() if h.values
    }

    if config.basic_auth is not None:
        password = config.basic_auth.password.get_secret_value()
        if config.basic_auth.password_file:
            password = _read_secret(config.basic_auth.password_file)
        kwargs["auth"] = httpx.BasicAuth(config.basic_auth.username, password)
    elif config.authorization is not None:
        credentials = config.authorization.credentials.get_secret_value()
        if config.authorization.credentials_file:
            credentials = _read_secret(config.authorization.credentials_file)
        headers["Authorization"] = f"{config.authorization.type} {credentials}"
    elif config.bearer_token.get_secret_value():
        headers["Authorization"] = f"Bearer {config.bearer_token.get_secret_value()}"

    if headers:
        kwargs["headers"] = headers
    kwargs["verify"] = _ssl_context(config.tls_config)
    kwargs["follow_redirects"] = config.follow_redirects
    return kwargs
