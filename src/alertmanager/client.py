"""Async client for the Alertmanager v2 silences API."""

from __future__ import annotations

from types import TracebackType
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx
import structlog

from src.alertmanager.exceptions import AlertmanagerError, SubmissionError
from src.alertmanager.http_config import (
    DEFAULT_SCHEME,
    HttpClientConfig,
    client_kwargs,
    with_scheme,
)
from src.core.types import SilenceRequest

logger = structlog.stdlib.get_logger()

DEFAULT_HOST = "localhost:9093"
API_V2_PATH = "api/v2"


def api_base_url(url: str) -> str:
    """Resolve the ``/api/v2`` base for an Alertmanager URL.

    Missing scheme and host fall back to ``http`` and ``localhost:9093``;
    any path on the URL is kept as a prefix. Credentials are stripped.
    """
    parts = urlsplit(with_scheme(url))

    host = parts.netloc.rpartition("@")[2]
    path = "/".join(p for p in (parts.path.strip("/"), API_V2_PATH) if p)
    return urlunsplit((parts.scheme or DEFAULT_SCHEME, host or DEFAULT_HOST, f"/{path}", "", ""))


def _parse_silence_id(raw: Any) -> str:
    if isinstance(raw, dict):
        silence_id = raw.get("silenceID")
        if isinstance(silence_id, str) and silence_id:
            return silence_id
    raise SubmissionError(f"unexpected response body: {raw!r}"[:200])


class AlertmanagerClient:
    """Posts silences to Alertmanager.

    Usage::

        async with AlertmanagerClient("http://am:9093", timeout_secs=30) as client:
            silence_id = await client.post_silence(request)
    """

    def __init__(
        self,
        url: str,
        http_config: HttpClientConfig | None = None,
        timeout_secs: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = api_base_url(url)
        self._kwargs = client_kwargs(url, http_config)
        self._timeout_secs = timeout_secs
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Create the httpx async client."""
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_secs),
            transport=self._transport,
            **self._kwargs,
        )
        logger.debug("alertmanager_client_connected", base_url=self._base_url)

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> AlertmanagerClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def post_silence(
        self,
        request: SilenceRequest,
        headers: dict[str, str] | None = None,
    ) -> str:
        """Create a silence and return its ID.

        Args:
            request: The silence to create.
            headers: Extra headers for this request only (e.g. tenant header).

        Raises:
            SubmissionError: Transport failure, non-2xx status, a header value
                httpx cannot encode, or a response without a silence ID.
        """
        if self._http is None:
            raise AlertmanagerError("Client not connected. Call connect() first.")

        url = f"{self._base_url}/silences"
        try:
            resp = await self._http.post(url, json=request.to_payload(), headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text.strip()[:200]
            raise SubmissionError(
                f"[POST /silences][{exc.response.status_code}] {body}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"{type(exc).__name__}: {exc}") from exc
        except (UnicodeEncodeError, httpx.InvalidURL) as exc:
            # httpx only accepts ASCII header values
            raise SubmissionError(f"invalid request: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise SubmissionError("response body is not valid JSON") from exc

        silence_id = _parse_silence_id(data)
        logger.debug("silence_posted", silence_id=silence_id, url=url)
        return silence_id
