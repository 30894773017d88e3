"""Alertmanager silences client and tenant fan-out."""

from src.alertmanager.client import AlertmanagerClient, api_base_url
from src.alertmanager.dispatcher import TenantDispatcher
from src.alertmanager.exceptions import (
    AlertmanagerError,
    ConflictingTenantConfigError,
    HttpConfigError,
    SubmissionError,
    TenantFileReadError,
)
from src.alertmanager.http_config import HttpClientConfig, load_http_config
from src.alertmanager.tenants import read_tenant_file, resolve_tenant_mode

__all__ = [
    "AlertmanagerClient",
    "AlertmanagerError",
    "ConflictingTenantConfigError",
    "HttpClientConfig",
    "HttpConfigError",
    "SubmissionError",
    "TenantDispatcher",
    "TenantFileReadError",
    "api_base_url",
    "load_http_config",
    "read_tenant_file",
    "resolve_tenant_mode",
]
