"""Changelog and version-file updates.

Each update that takes effect is committed on its own; the push is left to
the caller so every release commit goes out in a single push.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from semship.core.config import RunConfig, Settings
from semship.core.result import Err, Ok, Result
from semship.git.repository import VcsClient
from semship.output.log import logger
from semship.release import changelog
from semship.release.errors import ReleaseError
from semship.release.model import CommitRecord
from semship.release.semver import SemVer
from semship.release.state import git_failure


@dataclass(frozen=True, slots=True)
class ArtifactChanges:
    changelog_written: bool
    version_file_written: bool

    @property
    def push_pending(self) -> bool:
        return self.changelog_written or self.version_file_written


def write_text(path: Path, content: str) -> Result[None, ReleaseError]:
    """Replace ``path`` with ``content`` through a sibling temp file."""
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(content, encoding="utf-8", newline="")
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        return Err(ReleaseError(kind="io_failed", message=f"cannot write {path.name}: {e}", hint=str(path)))
    return Ok(None)


def read_existing(path: Path) -> Result[str | None, ReleaseError]:
    """Current content of ``path``, or None when the file does not exist."""
    if not path.is_file():
        return Ok(None)
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"cannot read {path.name}: {e}", hint=str(path)))


def commit_files(git: VcsClient, paths: list[str], message: str) -> Result[None, ReleaseError]:
    added = git.add(paths)
    if isinstance(added, Err):
        return Err(git_failure(added.error))
    committed = git.commit(message)
    if isinstance(committed, Err):
        return Err(git_failure(committed.error))
    return Ok(None)


def update_changelog(
    git: VcsClient,
    settings: Settings,
    config: RunConfig,
    version: SemVer,
    commits: tuple[CommitRecord, ...],
    *,
    now: datetime,
) -> Result[bool, ReleaseError]:
    """Prepend an entry for ``version``; Ok(True) when a commit was made.

    Runs when forced or when the changelog exists. An existing heading for
    ``version`` always wins, forced or not.
    """
    path = git.root / settings.changelog
    exists = path.is_file()
    if not exists and not config.force_changelog:
        return Ok(False)

    existing = read_existing(path)
    if isinstance(existing, Err):
        return existing
    previous = existing.value or ""

    tag = str(version)
    if changelog.has_version(previous, tag):
        logger.info("%s already documents %s, leaving it untouched", settings.changelog, tag)
        return Ok(False)

    lines = [c.render(prepend_hash=config.prepend_commit_hash) for c in commits]
    entry = changelog.render_entry(tag, lines, now)
    written = write_text(path, changelog.prepend_entry(entry, previous))
    if isinstance(written, Err):
        return written

    committed = commit_files(git, [settings.changelog], f"docs(changelog): {tag} [skip ci]")
    if isinstance(committed, Err):
        return committed
    return Ok(True)


def update_version_file(
    git: VcsClient,
    settings: Settings,
    config: RunConfig,
    version: SemVer,
) -> Result[bool, ReleaseError]:
    """Overwrite the version file with ``version``; Ok(True) when a commit was made."""
    path = git.root / settings.version_file
    if not path.is_file() and not config.force_version_file:
        return Ok(False)

    tag = str(version)
    content = f"{tag}\n"
    current = read_existing(path)
    if isinstance(current, Err):
        return current
    if current.value == content:
        logger.info("%s already holds %s, nothing to commit", settings.version_file, tag)
        return Ok(False)

    written = write_text(path, content)
    if isinstance(written, Err):
        return written

    committed = commit_files(git, [settings.version_file], f"chore(version): {tag} [skip ci]")
    if isinstance(committed, Err):
        return committed
    return Ok(True)


def write_release_artifacts(
    git: VcsClient,
    settings: Settings,
    config: RunConfig,
    version: SemVer,
    commits: tuple[CommitRecord, ...],
    *,
    now: datetime,
) -> Result[ArtifactChanges, ReleaseError]:
    log = update_changelog(git, settings, config, version, commits, now=now)
    if isinstance(log, Err):
        return log

    version_file = update_version_file(git, settings, config, version)
    if isinstance(version_file, Err):
        return version_file

    return Ok(ArtifactChanges(changelog_written=log.value, version_file_written=version_file.value))
