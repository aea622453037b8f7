"""Re-running a release against a real git repository whose files already hold the version."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from semship.core.config import RunConfig, Settings
from semship.core.result import Ok
from semship.git.repository import GitClient
from semship.release.artifacts import update_version_file
from semship.release.manifest import read_manifest
from semship.release.publisher import bump_manifest
from semship.release.semver import SemVer

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

MANIFEST = '{\n  "name": "widget",\n  "version": "1.3.0"\n}\n'


def _git(root: Path, *args: str) -> str:
    done = subprocess.run(["git", "-C", str(root), *args], capture_output=True, text=True, check=True)
    return done.stdout.strip()


@pytest.fixture
def released_repo(tmp_path: Path) -> Path:
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.invalid")
    _git(tmp_path, "config", "user.name", "Dev")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    (tmp_path / "VERSION").write_text("1.3.0\n", encoding="utf-8")
    (tmp_path / "package.json").write_text(MANIFEST, encoding="utf-8")
    _git(tmp_path, "add", "VERSION", "package.json")
    _git(tmp_path, "commit", "-q", "-m", "chore: 1.3.0")
    return tmp_path


def test_version_file_already_at_version(released_repo: Path) -> None:
    head = _git(released_repo, "rev-parse", "HEAD")

    result = update_version_file(GitClient(released_repo), Settings(), RunConfig(), SemVer(1, 3, 0))

    assert result == Ok(False)
    assert _git(released_repo, "rev-parse", "HEAD") == head
    assert _git(released_repo, "status", "--porcelain") == ""


def test_manifest_already_at_version(released_repo: Path) -> None:
    head = _git(released_repo, "rev-parse", "HEAD")
    manifest = read_manifest(released_repo / "package.json")
    assert isinstance(manifest, Ok)

    result = bump_manifest(GitClient(released_repo), Settings(), manifest.value, SemVer(1, 3, 0))

    assert result == Ok(False)
    assert _git(released_repo, "rev-parse", "HEAD") == head
    assert (released_repo / "package.json").read_text(encoding="utf-8") == MANIFEST


def test_new_version_is_committed(released_repo: Path) -> None:
    git = GitClient(released_repo)

    result = update_version_file(git, Settings(), RunConfig(), SemVer(1, 3, 1))

    assert result == Ok(True)
    assert _git(released_repo, "log", "-1", "--format=%s") == "chore(version): 1.3.1 [skip ci]"
    assert _git(released_repo, "status", "--porcelain") == ""
