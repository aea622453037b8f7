from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from semship.cli import self_update as self_update_mod
from semship.core.errors import ErrorCode
from semship.core.result import Err, Ok
from semship.output.console import MockConsole
from semship.platform.process import ProcessError


def test_runs_uv_tool_upgrade(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_interactive(cmd: list[str], cwd: Path, env=None):
        del cwd, env
        calls.append(cmd)
        return Ok(None)

    monkeypatch.setattr(self_update_mod, "run_interactive", fake_interactive)
    monkeypatch.setattr(self_update_mod, "tool_name", lambda: "semship")
    console = MockConsole()

    assert self_update_mod.self_update(console) == ErrorCode.OK
    assert calls == [["uv", "tool", "upgrade", "semship"]]
    assert console.find("up to date")


def test_failure_reports_hint(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_interactive(cmd: list[str], cwd: Path, env=None):
        del cwd, env
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr="uv: not found"))

    monkeypatch.setattr(self_update_mod, "run_interactive", fake_interactive)
    console = MockConsole()

    assert self_update_mod.self_update(console) == ErrorCode.FATAL
    assert console.has_error()
    assert console.find("uv tool install semship")


def test_tool_name_follows_distribution() -> None:
    dists = {"semship": ["semship-cli"]}
    with patch.object(self_update_mod.metadata, "packages_distributions", return_value=dists):
        assert self_update_mod.tool_name() == "semship-cli"
    with patch.object(self_update_mod.metadata, "packages_distributions", return_value={}):
        assert self_update_mod.tool_name() == "semship"
