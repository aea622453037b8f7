"""Git client for the release pipeline.

``VcsClient`` is the interface the pipeline depends on; ``GitClient`` runs
the real ``git`` binary. All methods return Result types and every call is
recorded in the run log.

Usage:
    git = GitClient(Path("/path/to/repo"))

    match git.remote_url("origin"):
        case Ok(url):
            print(url)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from semship.core.result import Err, Ok, Result
from semship.platform.process import ProcessError
from semship.platform.process import run as run_process
from semship.release.model import CommitRecord

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Unit separator: cannot appear in a one-line subject or an author name.
_FIELD_SEP = "\x1f"
LOG_FORMAT = "%H%x1f%s%x1f%an"

__all__ = [
    "GitError",
    "GitClient",
    "VcsClient",
    "LOG_FORMAT",
    "find_repo_root",
    "parse_log",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class VcsClient(Protocol):
    """Version-control operations used by a release."""

    @property
    def root(self) -> Path: ...

    def remote_url(self, remote: str) -> Result[str, GitError]: ...

    def stash(self) -> Result[str, GitError]: ...

    def checkout(self, branch: str) -> Result[str, GitError]: ...

    def fetch_tags(self, remote: str) -> Result[str, GitError]: ...

    def pull_rebase(self, remote: str, branch: str) -> Result[str, GitError]: ...

    def log(self, revision_range: str | None) -> Result[Iterator[CommitRecord], GitError]: ...

    def add(self, paths: list[str]) -> Result[str, GitError]: ...

    def commit(self, message: str) -> Result[str, GitError]: ...

    def push(self, remote: str, branch: str) -> Result[str, GitError]: ...


def parse_log(output: str) -> Iterator[CommitRecord]:
    """Lazily turn ``git log --format=LOG_FORMAT`` output into records."""
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(_FIELD_SEP)
        if len(parts) != 3:
            continue
        sha, subject, author = parts
        yield CommitRecord(hash=sha.strip(), subject=subject, author=author)


def find_repo_root(cwd: Path) -> Result[Path, GitError]:
    """Top-level directory of the work tree containing ``cwd``."""
    result = run_process(["git", "rev-parse", "--show-toplevel"], cwd=cwd, timeout=_GIT_TIMEOUT_SECONDS)
    match result:
        case Err(e):
            return Err(
                GitError(
                    command="rev-parse",
                    message=e.stderr.strip() or "not a git repository",
                    returncode=e.returncode,
                )
            )
        case Ok(stdout):
            return Ok(Path(stdout.strip()))


class GitClient:
    """``VcsClient`` backed by the git command line.

    Attributes:
        path: Repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def root(self) -> Path:
        return self.path

    def remote_url(self, remote: str) -> Result[str, GitError]:
        result = self._call(["remote", "get-url", remote], what="remote get-url")
        if isinstance(result, Err):
            return result
        url = result.value.strip()
        if not url:
            return Err(GitError(command="remote get-url", message=f"remote '{remote}' has no URL"))
        return Ok(url)

    def stash(self) -> Result[str, GitError]:
        return self._call(["stash"], what="stash")

    def checkout(self, branch: str) -> Result[str, GitError]:
        return self._call(["checkout", branch], what="checkout")

    def fetch_tags(self, remote: str) -> Result[str, GitError]:
        return self._call(["fetch", remote, "--tags"], what="fetch --tags")

    def pull_rebase(self, remote: str, branch: str) -> Result[str, GitError]:
        return self._call(["pull", "--rebase", remote, branch], what="pull --rebase")

    def log(self, revision_range: str | None) -> Result[Iterator[CommitRecord], GitError]:
        """Non-merge commits in ``revision_range`` (whole history when None)."""
        args = ["log", "--no-merges", f"--format={LOG_FORMAT}"]
        if revision_range:
            args.append(revision_range)
        result = self._call(args, what="log")
        if isinstance(result, Err):
            return result
        return Ok(parse_log(result.value))

    def add(self, paths: list[str]) -> Result[str, GitError]:
        return self._call(["add", "--", *paths], what="add")

    def commit(self, message: str) -> Result[str, GitError]:
        return self._call(["commit", "-m", message], what="commit")

    def push(self, remote: str, branch: str) -> Result[str, GitError]:
        return self._call(["push", remote, branch], what="push")

    def _call(self, args: list[str], *, what: str) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=what,
                        message=e.stderr.strip() or e.stdout.strip() or f"git {what} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
