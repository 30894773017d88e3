"""Matcher parsing — ``name=value``, ``name=~regex``, ``name!=value``, ``name!~regex``.

A list of expressions forms the matcher group of one silence. The first
expression may be a bare alert name (``atm silence add foo``), which is
rewritten to ``alertname="foo"`` before parsing.
"""

from __future__ import annotations

import re

import structlog

from src.core.types import Matcher, MatchType
from src.silence.exceptions import MatcherSyntaxError, NoMatchersError

logger = structlog.stdlib.get_logger()

_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Tried in order: two-character operators must win over "=".
_OPERATORS: tuple[MatchType, ...] = (
    MatchType.REGEX,
    MatchType.NOT_REGEX,
    MatchType.NOT_EQUAL,
    MatchType.EQUAL,
)

_ESCAPES: dict[str, str] = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


def quote(value: str) -> str:
    """Double-quote a value, escaping backslashes, quotes and control chars."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _unquote(raw: str, expression: str) -> str:
    out: list[str] = []
    body = raw[1:-1]
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            if i + 1 >= len(body) or body[i + 1] not in _ESCAPES:
                raise MatcherSyntaxError(expression, "invalid escape sequence")
            out.append(_ESCAPES[body[i + 1]])
            i += 2
            continue
        if ch == '"':
            raise MatcherSyntaxError(expression, "unescaped quote in value")
        out.append(ch)
        i += 1
    return "".join(out)


def _split(expression: str) -> tuple[str, MatchType, str] | None:
    """Find the first operator occurrence, preferring longer operators on ties."""
    best: tuple[int, MatchType] | None = None
    for op in _OPERATORS:
        idx = expression.find(op.value)
        if idx == -1:
            continue
        if best is None or idx < best[0]:
            best = (idx, op)
    if best is None:
        return None
    idx, op = best
    return expression[:idx], op, expression[idx + len(op.value):]


def parse_matcher(expression: str) -> Matcher:
    """Parse a single matcher expression.

    Regex values are passed through unchecked; Alertmanager compiles them
    with its own (RE2) engine and rejects invalid ones.

    Raises:
        MatcherSyntaxError: No operator, invalid label name or malformed quoting.
    """
    parts = _split(expression)
    if parts is None:
        raise MatcherSyntaxError(expression, "no operator found")

    name, op, value = parts
    name = name.strip()
    value = value.strip()

    if not _LABEL_NAME_RE.match(name):
        raise MatcherSyntaxError(expression, f"invalid label name {name!r}")

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = _unquote(value, expression)
    elif value.startswith('"') or value.endswith('"'):
        raise MatcherSyntaxError(expression, "unbalanced quotes")

    return Matcher.from_operator(name, op, value)


def parse_matchers(expressions: list[str]) -> list[Matcher]:
    """Parse the matcher group of a silence, preserving order.

    Raises:
        NoMatchersError: The list is empty, or the first element has no
            operator and is not usable as a bare alert name.
        MatcherSyntaxError: Any element fails to parse despite containing an
            operator.
    """
    if not expressions:
        raise NoMatchersError("no matchers specified")

    first = expressions[0]
    if _split(first) is not None:
        matchers = [parse_matcher(first)]
    else:
        rewritten = f"alertname={quote(first)}"
        logger.debug("matcher_alertname_fallback", original=first, rewritten=rewritten)
        try:
            matchers = [parse_matcher(rewritten)]
        except MatcherSyntaxError as exc:
            raise NoMatchersError(f"no matchers specified: {exc}") from exc

    for expression in expressions[1:]:
        matchers.append(parse_matcher(expression))
    return matchers
