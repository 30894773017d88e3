"""Tests for the atm CLI — argument wiring, config defaults, exit codes."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import httpx
import pytest

from scripts import atm
from src.alertmanager.client import AlertmanagerClient

Handler = Callable[[httpx.Request], httpx.Response]


# ── Helpers ─────────────────────────────────────────────────────


class Recorder:
    """MockTransport handler that records requests and fails chosen tenants."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._fail_for = fail_for or set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        tenant = request.headers.get("X-Scope-OrgID", "")
        if tenant in self._fail_for:
            return httpx.Response(500, text="internal error")
        return httpx.Response(200, json={"silenceID": f"sid-{tenant or 'none'}"})

    def bodies(self) -> list[dict[str, object]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture()
def recorder(monkeypatch: pytest.MonkeyPatch) -> Recorder:
    rec = Recorder()

    def factory(url: str, http_config: object = None, timeout_secs: float = 30.0) -> AlertmanagerClient:
        return AlertmanagerClient(
            url,
            http_config,  # type: ignore[arg-type]
            timeout_secs=timeout_secs,
            transport=httpx.MockTransport(rec),
        )

    monkeypatch.setattr(atm, "AlertmanagerClient", factory)
    return rec


async def _run(tmp_path: Path, *argv: str, config: str | None = None) -> int:
    config_path = tmp_path / "atm.yml"
    if config is not None:
        config_path.write_text(config)
    args = atm.build_parser().parse_args(["--config", str(config_path), *argv])
    return await atm.run(args)


# ── Success paths ───────────────────────────────────────────────


class TestSilenceAdd:
    async def test_end_to_end(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(
            tmp_path,
            "--alertmanager.url", "http://am:9093",
            "silence", "add", "alertname=foo", "node=bar",
            "-d", "1h", "-c", "x", "-a", "alice",
        )
        assert code == 0
        [body] = recorder.bodies()
        assert body["matchers"] == [
            {"name": "alertname", "value": "foo", "isEqual": True, "isRegex": False},
            {"name": "node", "value": "bar", "isEqual": True, "isRegex": False},
        ]
        starts = datetime.fromisoformat(str(body["startsAt"]))
        ends = datetime.fromisoformat(str(body["endsAt"]))
        assert (ends - starts).total_seconds() == 3600
        assert body["createdBy"] == "alice"
        assert body["comment"] == "x"
        assert str(recorder.requests[0].url) == "http://am:9093/api/v2/silences"
        assert "Silence added: sid-none" in capsys.readouterr().out

    async def test_bare_alertname(self, tmp_path: Path, recorder: Recorder) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x",
        )
        assert code == 0
        matchers = recorder.bodies()[0]["matchers"]
        assert matchers == [{"name": "alertname", "value": "foo", "isEqual": True, "isRegex": False}]

    async def test_explicit_window(self, tmp_path: Path, recorder: Recorder) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x",
            "--start", "2030-01-02T10:00:00Z", "--end", "2030-01-03T10:00:00Z",
        )
        assert code == 0
        body = recorder.bodies()[0]
        assert body["startsAt"] == "2030-01-02T10:00:00.000Z"
        assert body["endsAt"] == "2030-01-03T10:00:00.000Z"

    async def test_single_tenant(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "-t", "team-a",
        )
        assert code == 0
        assert recorder.requests[0].headers["X-Scope-OrgID"] == "team-a"
        assert "Silence added for 'team-a' tenant: sid-team-a" in capsys.readouterr().out

    async def test_config_file_defaults(self, tmp_path: Path, recorder: Recorder) -> None:
        code = await _run(
            tmp_path, "silence", "add", "foo",
            config="alertmanager.url: http://cfg:9093\nauthor: cfg-user\ncomment_required: false\n",
        )
        assert code == 0
        assert recorder.requests[0].url.host == "cfg"
        assert recorder.bodies()[0]["createdBy"] == "cfg-user"

    async def test_require_comment_flag_off(self, tmp_path: Path, recorder: Recorder) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "--require-comment", "false",
        )
        assert code == 0
        assert recorder.bodies()[0]["comment"] == ""


# ── Tenant files ────────────────────────────────────────────────


class TestTenantFile:
    async def test_partial_failure_exit_code(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        recorder: Recorder,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(recorder, "_fail_for", {"a"})
        tenants = tmp_path / "tenants.txt"
        tenants.write_text("a\nb\n")

        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "--tenant.file", str(tenants),
        )
        assert code == 1
        assert [r.headers["X-Scope-OrgID"] for r in recorder.requests] == ["a", "b"]
        out = capsys.readouterr().out
        assert "Unable to add silence for 'a' tenant" in out
        assert "Silence added for 'b' tenant: sid-b" in out

    async def test_all_succeed(self, tmp_path: Path, recorder: Recorder) -> None:
        tenants = tmp_path / "tenants.txt"
        tenants.write_text("a\nb\n")
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "--tenant.file", str(tenants),
        )
        assert code == 0
        assert len(recorder.requests) == 2


# ── Failures ────────────────────────────────────────────────────


class TestFailures:
    async def test_missing_url(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(tmp_path, "silence", "add", "foo", "-c", "x")
        assert code == 1
        assert "--alertmanager.url" in capsys.readouterr().err
        assert recorder.requests == []

    async def test_comment_required(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(tmp_path, "--alertmanager.url", "http://am:9093", "silence", "add", "foo")
        assert code == 1
        assert "comment required" in capsys.readouterr().err
        assert recorder.requests == []

    async def test_no_matchers(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(tmp_path, "--alertmanager.url", "http://am:9093", "silence", "add", "-c", "x")
        assert code == 1
        assert "no matchers" in capsys.readouterr().err

    async def test_duration_over_max(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "-d", "13h",
        )
        assert code == 1
        assert "couldn't be greater than '12h'" in capsys.readouterr().err
        assert recorder.requests == []

    async def test_conflicting_tenants(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        tenants = tmp_path / "tenants.txt"
        tenants.write_text("a\n")
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "-t", "z", "--tenant.file", str(tenants),
        )
        assert code == 1
        assert "mutually exclusive" in capsys.readouterr().err
        assert recorder.requests == []

    async def test_single_tenant_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, recorder: Recorder,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(recorder, "_fail_for", {"a"})
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "-t", "a",
        )
        assert code == 1
        assert "Unable to add silence for 'a' tenant" in capsys.readouterr().err


    async def test_non_ascii_tenant_reported(
        self, tmp_path: Path, recorder: Recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await _run(
            tmp_path, "--alertmanager.url", "http://am:9093",
            "silence", "add", "foo", "-c", "x", "-t", "équipe",
        )
        assert code == 1
        assert "Unable to add silence for 'équipe' tenant" in capsys.readouterr().err
        assert recorder.requests == []


class TestParser:
    def test_bool_flag_forms(self) -> None:
        parser = atm.build_parser()
        assert parser.parse_args(["silence", "add", "--require-comment"]).require_comment is True
        args = parser.parse_args(["silence", "add", "--require-comment", "false"])
        assert args.require_comment is False
        assert parser.parse_args(["silence", "add"]).require_comment is None

    def test_dotted_flags(self) -> None:
        args = atm.build_parser().parse_args(
            ["--alertmanager.url", "http://x", "--http.config.file", "h.yml",
             "silence", "add", "--tenant.file", "t.txt", "--tenant.http-header", "X-T"]
        )
        assert args.alertmanager_url == "http://x"
        assert args.http_config_file == "h.yml"
        assert args.tenant_file == "t.txt"
        assert args.tenant_http_header == "X-T"
