"""Tenant set resolution — none, a single tenant, or a tenant file."""

from __future__ import annotations

from pathlib import Path

import structlog

from src.alertmanager.exceptions import ConflictingTenantConfigError, TenantFileReadError
from src.core.types import TenantMode

logger = structlog.stdlib.get_logger()


def resolve_tenant_mode(tenant: str | None, tenant_file: str | Path | None) -> TenantMode:
    """Decide the fan-out mode; both sources at once is a configuration error."""
    if tenant and tenant_file:
        raise ConflictingTenantConfigError("tenant and tenant.file are mutually exclusive")
    if tenant_file:
        return TenantMode.FILE
    if tenant:
        return TenantMode.SINGLE
    return TenantMode.NONE


def read_tenant_file(path: str | Path) -> list[str]:
    """Read tenants from a file, one per line, in file order.

    Lines are not trimmed; empty lines are skipped with a warning.

    Raises:
        TenantFileReadError: The file cannot be opened or decoded.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TenantFileReadError(str(path), str(exc)) from exc

    tenants: list[str] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line:
            logger.warning("tenant_file_blank_line_skipped", path=str(path), line=lineno)
            continue
        tenants.append(line)
    return tenants
