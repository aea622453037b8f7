"""Tests for semship.git.repository module."""

from __future__ import annotations

from pathlib import Path

import pytest

from semship.core.result import Err, Ok
from semship.git import repository as repo_mod
from semship.git.repository import GitClient, find_repo_root, parse_log
from semship.platform.process import ProcessError


class FakeRun:
    def __init__(self, responses: dict[str, object] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[list[str], float | None]] = []

    def __call__(self, cmd: list[str], cwd: Path, env=None, *, timeout=None):
        del cwd, env
        self.calls.append((cmd, timeout))
        sub = cmd[3] if cmd[:2] == ["git", "-C"] else cmd[1]
        response = self.responses.get(sub, "")
        if isinstance(response, ProcessError):
            return Err(response)
        return Ok(response)


def test_parse_log_splits_fields() -> None:
    out = "abc123\x1ffeat: add | pipes\x1fAda\n\nbroken line\ndef456\x1ffix: b\x1fBo\n"
    records = list(parse_log(out))
    assert [(r.hash, r.subject, r.author) for r in records] == [
        ("abc123", "feat: add | pipes", "Ada"),
        ("def456", "fix: b", "Bo"),
    ]


class TestGitClient:
    def test_log_range_and_format(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = FakeRun({"log": "a" * 40 + "\x1ffix: x\x1fDev\n"})
        monkeypatch.setattr(repo_mod, "run_process", fake)

        result = GitClient(tmp_path).log("1.2.3..HEAD")

        assert isinstance(result, Ok)
        assert [c.subject for c in result.value] == ["fix: x"]
        cmd, _ = fake.calls[0]
        assert cmd == [
            "git", "-C", str(tmp_path), "log", "--no-merges", "--format=%H%x1f%s%x1f%an", "1.2.3..HEAD",
        ]

    def test_log_full_history(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = FakeRun()
        monkeypatch.setattr(repo_mod, "run_process", fake)

        GitClient(tmp_path).log(None)

        cmd, _ = fake.calls[0]
        assert cmd[-1] == "--format=%H%x1f%s%x1f%an"

    def test_network_commands_get_longer_timeout(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        fake = FakeRun()
        monkeypatch.setattr(repo_mod, "run_process", fake)
        git = GitClient(tmp_path)

        git.push("origin", "main")
        git.commit("chore(version): 1.0.0 [skip ci]")

        (push_cmd, push_timeout), (commit_cmd, commit_timeout) = fake.calls
        assert push_cmd[3:] == ["push", "origin", "main"]
        assert commit_cmd[3:] == ["commit", "-m", "chore(version): 1.0.0 [skip ci]"]
        assert push_timeout is not None and commit_timeout is not None
        assert push_timeout > commit_timeout

    def test_failure_carries_stderr(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        error = ProcessError(
            command=("git", "pull"), returncode=1, stdout="", stderr="CONFLICT (content)\n"
        )
        monkeypatch.setattr(repo_mod, "run_process", FakeRun({"pull": error}))

        result = GitClient(tmp_path).pull_rebase("origin", "main")

        assert isinstance(result, Err)
        assert result.error.command == "pull --rebase"
        assert result.error.message == "CONFLICT (content)"

    def test_remote_url_stripped(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(repo_mod, "run_process", FakeRun({"remote": "git@github.com:a/b.git\n"}))
        assert GitClient(tmp_path).remote_url("origin") == Ok("git@github.com:a/b.git")

    def test_add_separates_paths(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        fake = FakeRun()
        monkeypatch.setattr(repo_mod, "run_process", fake)
        GitClient(tmp_path).add(["CHANGELOG.md"])
        assert fake.calls[0][0][3:] == ["add", "--", "CHANGELOG.md"]


def test_find_repo_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], cwd: Path, env=None, *, timeout=None):
        del env, timeout
        assert cmd == ["git", "rev-parse", "--show-toplevel"]
        return Ok(f"{cwd}\n")

    monkeypatch.setattr(repo_mod, "run_process", fake_run)
    assert find_repo_root(tmp_path) == Ok(tmp_path)


def test_find_repo_root_outside_repo(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    error = ProcessError(
        command=("git", "rev-parse"), returncode=128, stdout="", stderr="fatal: not a git repository\n"
    )
    monkeypatch.setattr(repo_mod, "run_process", lambda cmd, cwd, env=None, *, timeout=None: Err(error))

    result = find_repo_root(tmp_path)

    assert isinstance(result, Err)
    assert result.error.message == "fatal: not a git repository"
    assert result.error.returncode == 128
