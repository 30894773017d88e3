"""Tenant dispatcher — submits one silence per tenant, sequentially.

- NONE: one submission without a tenant header; failure is fatal.
- SINGLE: one submission with the tenant header; failure is fatal.
- FILE: one submission per tenant in file order; failures are recorded and
  the loop moves on to the next tenant.

A single deadline covers the whole dispatch. Once it elapses the in-flight
request is cancelled and no further tenants are attempted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import structlog

from src.alertmanager.exceptions import SubmissionError
from src.alertmanager.tenants import read_tenant_file, resolve_tenant_mode
from src.core.types import SilenceRequest, SubmissionOutcome

logger = structlog.stdlib.get_logger()

DEFAULT_TENANT_HEADER = "X-Scope-OrgID"


class SilenceSubmitter(Protocol):
    """Anything that can post a silence and return its ID."""

    async def post_silence(
        self,
        request: SilenceRequest,
        headers: dict[str, str] | None = None,
    ) -> str: ...


class TenantDispatcher:
    """Fans a single SilenceRequest out to zero, one, or many tenants."""

    def __init__(
        self,
        client: SilenceSubmitter,
        tenant_header: str = DEFAULT_TENANT_HEADER,
        timeout_secs: float | None = 30.0,
        echo: Callable[[str], None] = print,
    ) -> None:
        self._client = client
        self._tenant_header = tenant_header
        self._timeout_secs = timeout_secs
        self._echo = echo
        self._current_tenant: str | None = None

    async def dispatch(
        self,
        request: SilenceRequest,
        tenant: str | None = None,
        tenant_file: str | Path | None = None,
    ) -> list[SubmissionOutcome]:
        """Submit *request* according to the tenant configuration.

        Returns:
            One outcome per attempted submission.

        Raises:
            ConflictingTenantConfigError: Both tenant and tenant_file given.
            TenantFileReadError: The tenant file cannot be read.
            SubmissionError: Fatal submission failure (NONE/SINGLE mode) or
                the command deadline elapsed.
        """
        mode = resolve_tenant_mode(tenant, tenant_file)
        logger.debug("tenant_mode_resolved", mode=mode.value)
        self._current_tenant = None

        try:
            async with asyncio.timeout(self._timeout_secs):
                if tenant_file:
                    tenants = read_tenant_file(tenant_file)
                    logger.info("tenant_file_loaded", path=str(tenant_file), tenants=len(tenants))
                    return await self._dispatch_all(request, tenants)
                if tenant:
                    return [await self._submit_one(request, tenant)]
                return [await self._submit_one(request, None)]
        except TimeoutError as exc:
            logger.error(
                "dispatch_timed_out",
                timeout_secs=self._timeout_secs,
                tenant=self._current_tenant,
            )
            raise SubmissionError(
                f"timed out after {self._timeout_secs}s", tenant=self._current_tenant
            ) from exc

    # ── Internal ────────────────────────────────────────────────

    def _headers(self, tenant: str | None) -> dict[str, str] | None:
        # Fresh dict per submission; never shared between tenants.
        if tenant is None:
            return None
        return {self._tenant_header: tenant}

    async def _post(self, request: SilenceRequest, tenant: str | None) -> str:
        self._current_tenant = tenant
        try:
            return await self._client.post_silence(request, headers=self._headers(tenant))
        except SubmissionError as exc:
            raise SubmissionError(exc.message, tenant=tenant) from exc

    async def _submit_one(self, request: SilenceRequest, tenant: str | None) -> SubmissionOutcome:
        silence_id = await self._post(request, tenant)
        self._report_success(tenant, silence_id)
        return SubmissionOutcome(tenant=tenant, success=True, silence_id=silence_id)

    async def _dispatch_all(
        self,
        request: SilenceRequest,
        tenants: list[str],
    ) -> list[SubmissionOutcome]:
        outcomes: list[SubmissionOutcome] = []
        for tenant in tenants:
            try:
                silence_id = await self._post(request, tenant)
            except SubmissionError as exc:
                logger.warning("tenant_submission_failed", tenant=tenant, error=exc.message)
                self._echo(str(exc))
                outcomes.append(
                    SubmissionOutcome(tenant=tenant, success=False, error=exc.message)
                )
                continue
            self._report_success(tenant, silence_id)
            outcomes.append(SubmissionOutcome(tenant=tenant, success=True, silence_id=silence_id))

        failed = sum(1 for o in outcomes if not o.success)
        logger.info("tenant_dispatch_complete", tenants=len(outcomes), failed=failed)
        return outcomes

    def _report_success(self, tenant: str | None, silence_id: str) -> None:
        logger.info("silence_submitted", tenant=tenant, silence_id=silence_id)
        if tenant is None:
            self._echo(f"Silence added: {silence_id}")
        else:
            self._echo(f"Silence added for '{tenant}' tenant: {silence_id}")
