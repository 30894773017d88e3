#!/usr/bin/env python3
"""atm — Alertmanager silences distributor.

Usage::

    # Silence alertname=foo on node bar for the default hour
    python scripts/atm.py --alertmanager.url http://am:9093 \\
        silence add alertname=foo node=bar -c "maintenance"

    # Bare first argument is taken as the alert name
    python scripts/atm.py silence add foo node=bar -c "deploy"

    # Regex matchers, explicit window
    python scripts/atm.py silence add 'alertname=~foo.*' -c x \\
        --start 2024-01-02T15:00:00Z --end 2024-01-02T18:00:00Z

    # Same silence for every tenant listed in a file
    python scripts/atm.py silence add foo -c x --tenant.file tenants.txt

Config file:
    Flags default from a YAML file: --config, else $HOME/.config/atm/config.yml,
    else /etc/atm/config.yml. Suited for static values such as
    ``alertmanager.url``, ``author``, ``require-comment`` and
    ``http.config.file``.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from importlib.metadata import PackageNotFoundError, version

import structlog

from src.alertmanager.client import AlertmanagerClient
from src.alertmanager.dispatcher import TenantDispatcher
from src.alertmanager.exceptions import AlertmanagerError
from src.alertmanager.http_config import load_http_config
from src.core.config import ConfigError, Settings, load_settings
from src.core.logging import setup_logging
from src.silence.builder import build_silence_request, default_author
from src.silence.durations import format_duration, parse_duration
from src.silence.exceptions import SilenceError
from src.silence.matchers import parse_matchers
from src.silence.window import resolve_window

logger = structlog.get_logger(__name__)


def _version() -> str:
    try:
        return version("atm")
    except PackageNotFoundError:
        return "unknown"


def _parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {text!r}")


async def silence_add(args: argparse.Namespace, settings: Settings) -> int:
    """Build the silence from *args* and submit it to every tenant."""
    am = settings.alertmanager
    defaults = settings.silence

    url = args.alertmanager_url or am.url
    if not url:
        raise ConfigError("required flag --alertmanager.url not provided")
    timeout_secs = parse_duration(args.timeout or am.timeout).total_seconds()

    matchers = parse_matchers(args.matchers)
    comment = args.comment or ""
    window = resolve_window(
        start=args.start,
        end=args.end,
        duration=args.duration or defaults.duration,
        max_duration=args.max_duration or defaults.max_duration,
        require_comment=(
            defaults.require_comment if args.require_comment is None else args.require_comment
        ),
        comment=comment,
    )
    author = args.author or defaults.author or default_author()
    request = build_silence_request(matchers, window, author, comment)

    logger.info(
        "silence_built",
        matchers=[str(m) for m in request.matchers],
        duration=format_duration(window.duration),
        created_by=author,
    )

    http_config_file = args.http_config_file or am.http_config_file
    http_config = load_http_config(http_config_file) if http_config_file else None

    async with AlertmanagerClient(url, http_config, timeout_secs=timeout_secs) as client:
        dispatcher = TenantDispatcher(
            client,
            tenant_header=args.tenant_http_header or am.tenant_http_header,
            timeout_secs=timeout_secs,
        )
        outcomes = await dispatcher.dispatch(
            request,
            tenant=args.tenant,
            tenant_file=args.tenant_file,
        )

    failed = [o.tenant for o in outcomes if not o.success]
    if failed:
        logger.warning("silence_partially_added", failed_tenants=failed)
        return 1
    return 0


async def run(args: argparse.Namespace) -> int:
    """Load settings, configure logging and run the selected command."""
    try:
        settings = load_settings(args.config)
        setup_logging(settings.logging, level=args.log_level, fmt=args.log_format)
        return await silence_add(args, settings)
    except (ConfigError, SilenceError, AlertmanagerError) as exc:
        print(f"atm: error: {exc}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atm",
        description="Alertmanager silences distributor.",
    )
    parser.add_argument("--version", action="version", version=f"atm, version {_version()}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML (default: ~/.config/atm/config.yml, /etc/atm/config.yml)",
    )
    parser.add_argument(
        "--alertmanager.url", dest="alertmanager_url", default=None,
        help="Alertmanager to talk to",
    )
    parser.add_argument(
        "--timeout", default=None, help="Timeout for the executed command (default: 30s)",
    )
    parser.add_argument(
        "--http.config.file", dest="http_config_file", default=None, metavar="<filename>",
        help="HTTP client configuration file for atm to connect to Alertmanager",
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--log-format", default=None, choices=["json", "console"], help="Log renderer",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    silence = commands.add_parser("silence", help="Add silences")
    silence_cmds = silence.add_subparsers(dest="silence_command", required=True)

    add = silence_cmds.add_parser(
        "add",
        help="Add a new alertmanager silence",
        description=(
            "Add a new alertmanager silence. If the first matcher has no operator "
            "it is taken as the value of alertname."
        ),
    )
    add.add_argument("-t", "--tenant", default=None, help="tenant")
    add.add_argument(
        "--tenant.file", dest="tenant_file", default=None, metavar="<filename>",
        help="tenant file location",
    )
    add.add_argument(
        "--tenant.http-header", dest="tenant_http_header", default=None,
        help="tenant HTTP Header (default: X-Scope-OrgID)",
    )
    add.add_argument("-a", "--author", default=None, help="Username for CreatedBy field")
    add.add_argument(
        "--require-comment", type=_parse_bool, nargs="?", const=True, default=None,
        help=argparse.SUPPRESS,
    )
    add.add_argument("-d", "--duration", default=None, help="Duration of silence (default: 1h)")
    add.add_argument(
        "--max-duration", default=None, help="Max Duration of silence (default: 12h)",
    )
    add.add_argument(
        "--start", default=None,
        help="Set when the silence should start. RFC3339 format 2006-01-02T15:04:05-07:00",
    )
    add.add_argument(
        "--end", default=None,
        help=(
            "Set when the silence should end (overwrites duration). "
            "RFC3339 format 2006-01-02T15:04:05-07:00"
        ),
    )
    add.add_argument("-c", "--comment", default=None, help="A comment to help describe the silence")
    add.add_argument("matchers", nargs="*", metavar="matcher-groups", help="Query filter")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
