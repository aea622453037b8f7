"""Shared fakes for release pipeline tests.

Each fake records the calls it receives and can be told to fail a named
operation through its ``fail_on`` set.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from semship.core.result import Err, Ok, Result
from semship.git.repository import GitError
from semship.output.console import MockConsole
from semship.platform.detection import Arch, HostTarget, Platform
from semship.release.errors import ReleaseError
from semship.release.model import CommitRecord, CreatedRelease, ReleaseDraft
from semship.release.pipeline import Collaborators

FIXED_NOW = datetime(2026, 10, 18, 9, 41, 7, tzinfo=UTC)
LINUX_X64 = HostTarget(platform=Platform.LINUX, arch=Arch.X64)


def commit(subject: str, sha: str = "0123456789abcdef", author: str = "Dev") -> CommitRecord:
    return CommitRecord(hash=sha, subject=subject, author=author)


@dataclass
class FakeVcs:
    root: Path
    url: str | None = "git@github.com:acme/widget.git"
    commits: list[CommitRecord] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def _do(self, name: str, *args: str) -> Result[str, GitError]:
        self.calls.append((name, *args))
        if name in self.fail_on:
            return Err(GitError(command=name, message=f"{name} exploded"))
        return Ok("")

    @property
    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def remote_url(self, remote: str) -> Result[str, GitError]:
        self.calls.append(("remote_url", remote))
        if self.url is None:
            return Err(GitError(command="remote get-url", message="error: No such remote 'origin'"))
        return Ok(self.url)

    def stash(self) -> Result[str, GitError]:
        return self._do("stash")

    def checkout(self, branch: str) -> Result[str, GitError]:
        return self._do("checkout", branch)

    def fetch_tags(self, remote: str) -> Result[str, GitError]:
        return self._do("fetch_tags", remote)

    def pull_rebase(self, remote: str, branch: str) -> Result[str, GitError]:
        return self._do("pull_rebase", remote, branch)

    def log(self, revision_range: str | None) -> Result[Iterator[CommitRecord], GitError]:
        self.calls.append(("log", revision_range or ""))
        if "log" in self.fail_on:
            return Err(GitError(command="log", message="bad revision"))
        return Ok(iter(list(self.commits)))

    def add(self, paths: list[str]) -> Result[str, GitError]:
        return self._do("add", *paths)

    def commit(self, message: str) -> Result[str, GitError]:
        return self._do("commit", message)

    def push(self, remote: str, branch: str) -> Result[str, GitError]:
        return self._do("push", remote, branch)


@dataclass
class FakeForge:
    latest_tag: str | None = None
    release_id: int = 42
    fail_on: set[str] = field(default_factory=set)
    drafts: list[ReleaseDraft] = field(default_factory=list)
    uploads: list[tuple[int, str]] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)

    def latest_release_tag(self, slug: str) -> Result[str | None, ReleaseError]:
        self.calls.append(f"latest:{slug}")
        if "latest" in self.fail_on:
            return Err(ReleaseError(kind="forge_failed", message="list releases: Bad credentials"))
        return Ok(self.latest_tag)

    def create_release(
        self, slug: str, draft: ReleaseDraft, *, target: str
    ) -> Result[CreatedRelease, ReleaseError]:
        self.calls.append(f"create:{slug}:{target}")
        if "create" in self.fail_on:
            return Err(ReleaseError(kind="forge_failed", message="create release: Validation Failed"))
        self.drafts.append(draft)
        return Ok(CreatedRelease(id=self.release_id, tag_name=draft.tag_name))

    def upload_asset(self, slug: str, release_id: int, path: Path) -> Result[str | None, ReleaseError]:
        self.calls.append(f"upload:{slug}")
        if "upload" in self.fail_on:
            return Err(ReleaseError(kind="forge_failed", message="upload asset: too large"))
        self.uploads.append((release_id, path.name))
        return Ok(f"https://example.invalid/{path.name}")


@dataclass
class FakeRegistry:
    authenticated: bool = True
    fail_on: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def is_authenticated(self) -> bool:
        self.calls.append("whoami")
        return self.authenticated

    def login(self) -> Result[None, ReleaseError]:
        self.calls.append("login")
        if "login" in self.fail_on:
            return Err(ReleaseError(kind="package_failed", message="npm login failed"))
        return Ok(None)

    def publish(self, *, public: bool) -> Result[None, ReleaseError]:
        self.calls.append("publish --access public" if public else "publish")
        if "publish" in self.fail_on:
            return Err(ReleaseError(kind="package_failed", message="npm publish failed"))
        return Ok(None)


@dataclass
class FakeBundler:
    fail_on: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def ensure_available(self) -> Result[Path, ReleaseError]:
        self.calls.append("ensure")
        if "ensure" in self.fail_on:
            return Err(ReleaseError(kind="bundle_failed", message="cannot download bun"))
        return Ok(Path("/usr/bin/bun"))

    def compile(self, entry: str, outfile: Path) -> Result[Path, ReleaseError]:
        self.calls.append(f"compile:{entry}")
        if "compile" in self.fail_on:
            return Err(ReleaseError(kind="bundle_failed", message="bun build failed"))
        outfile.parent.mkdir(parents=True, exist_ok=True)
        outfile.write_bytes(b"\x7fELF")
        return Ok(outfile)


@dataclass
class Answers:
    """Scripted answers for the confirmation prompt."""

    reply: bool = True
    questions: list[str] = field(default_factory=list)

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.reply


@pytest.fixture
def fake_git(tmp_path: Path) -> FakeVcs:
    return FakeVcs(root=tmp_path)


@pytest.fixture
def fake_forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def fake_bundler() -> FakeBundler:
    return FakeBundler()


@pytest.fixture
def answers() -> Answers:
    return Answers()


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def collaborators(
    fake_git: FakeVcs,
    fake_forge: FakeForge,
    fake_registry: FakeRegistry,
    fake_bundler: FakeBundler,
    console: MockConsole,
    answers: Answers,
) -> Collaborators:
    return Collaborators(
        git=fake_git,
        forge=fake_forge,
        registry=fake_registry,
        bundler=fake_bundler,
        console=console,
        confirm=answers,
        target=LINUX_X64,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_commit():
    return commit
