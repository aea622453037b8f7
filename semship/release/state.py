"""Repository state: where the remote is, what was released, what changed since."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from semship.core.config import Settings
from semship.core.result import Err, Ok, Result
from semship.forge.github import ForgeClient
from semship.git.remote import parse_remote_slug
from semship.git.repository import GitError, VcsClient
from semship.output.log import logger
from semship.release.errors import ReleaseError
from semship.release.model import CommitRecord
from semship.release.semver import INITIAL_VERSION, SemVer, parse_version


@dataclass(frozen=True, slots=True)
class RepoState:
    slug: str
    last_tag: str | None
    current: SemVer
    commits: tuple[CommitRecord, ...]

    @property
    def has_changes(self) -> bool:
        return bool(self.commits)


def git_failure(error: GitError) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=f"git {error.command} failed", hint=error.message)


def filter_commits(
    commits: Iterable[CommitRecord], skip_markers: Iterable[str]
) -> Iterator[CommitRecord]:
    """Drop commits whose subject contains any skip marker (case-sensitive)."""
    markers = tuple(m for m in skip_markers if m)
    for commit in commits:
        if any(marker in commit.subject for marker in markers):
            continue
        yield commit


def resolve_slug(git: VcsClient, remote: str) -> Result[str, ReleaseError]:
    url = git.remote_url(remote)
    if isinstance(url, Err):
        return Err(
            ReleaseError(
                kind="not_a_repository",
                message=f"no '{remote}' remote configured",
                hint=url.error.message,
            )
        )
    slug = parse_remote_slug(url.value)
    if slug is None:
        return Err(
            ReleaseError(
                kind="not_a_repository",
                message=f"cannot read owner/name from remote URL: {url.value}",
            )
        )
    return Ok(slug)


def sync_branch(git: VcsClient, settings: Settings) -> Result[None, ReleaseError]:
    """Discard local changes and bring the release branch up to date."""
    steps = (
        git.stash,
        lambda: git.checkout(settings.branch),
        lambda: git.fetch_tags(settings.remote),
        lambda: git.pull_rebase(settings.remote, settings.branch),
    )
    for step in steps:
        result = step()
        if isinstance(result, Err):
            return Err(git_failure(result.error))
    return Ok(None)


def read_repo_state(
    git: VcsClient,
    forge: ForgeClient,
    settings: Settings,
) -> Result[RepoState, ReleaseError]:
    """Locate the remote, sync the branch, find the last release and collect commits."""
    slug = resolve_slug(git, settings.remote)
    if isinstance(slug, Err):
        return slug

    synced = sync_branch(git, settings)
    if isinstance(synced, Err):
        return synced

    tag = forge.latest_release_tag(slug.value)
    if isinstance(tag, Err):
        return tag

    if tag.value is None:
        current = INITIAL_VERSION
        revision_range = None
        logger.info("no previous release, using %s and full history", current)
    else:
        parsed = parse_version(tag.value)
        if isinstance(parsed, Err):
            return parsed
        current = parsed.value
        revision_range = f"{tag.value}..HEAD"
        logger.info("last release %s, collecting %s", tag.value, revision_range)

    log = git.log(revision_range)
    if isinstance(log, Err):
        return Err(git_failure(log.error))

    commits = tuple(filter_commits(log.value, settings.skip_markers))
    logger.info("%d releasable commit(s)", len(commits))
    return Ok(RepoState(slug=slug.value, last_tag=tag.value, current=current, commits=commits))
