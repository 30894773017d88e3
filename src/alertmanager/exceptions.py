"""Exception hierarchy for the Alertmanager client and tenant fan-out."""

from __future__ import annotations


class AlertmanagerError(Exception):
    """Base exception for all Alertmanager client errors."""


class HttpConfigError(AlertmanagerError):
    """HTTP client configuration is unreadable or contradictory."""


class ConflictingTenantConfigError(AlertmanagerError):
    """Both a single tenant and a tenant file were supplied."""


class TenantFileReadError(AlertmanagerError):
    """The tenant file could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Unable to read tenant file '{path}': {reason}")


class SubmissionError(AlertmanagerError):
    """Posting a silence failed."""

    def __init__(self, message: str, tenant: str | None = None) -> None:
        self.tenant = tenant
        self.message = message
        if tenant is None:
            super().__init__(f"Unable to add silence: {message}")
        else:
            super().__init__(f"Unable to add silence for '{tenant}' tenant: {message}")
