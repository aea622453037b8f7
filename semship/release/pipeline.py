"""The release pipeline.

Stages run strictly in order and the first ``Err`` ends the run:

1. repository state (remote, sync, last release, commits)
2. next version + confirmation
3. changelog / version file commits
4. manifest bump, single push, registry publish
5. forge release, compiled archive asset

Side effects already applied are never rolled back.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from semship.core.config import RunConfig, Settings
from semship.core.result import Err, Ok, Result
from semship.forge.github import ForgeClient
from semship.git.repository import VcsClient
from semship.output.console import ConsoleProtocol, Style
from semship.output.log import logger, step_timer
from semship.platform.detection import HostTarget
from semship.release import publisher
from semship.release.artifacts import write_release_artifacts
from semship.release.errors import ReleaseError
from semship.release.semver import SemVer, resolve_next_version
from semship.release.state import read_repo_state
from semship.tools.bun import Bundler
from semship.tools.npm import PackageRegistry


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Collaborators:
    """Everything the pipeline talks to; tests pass fakes."""

    git: VcsClient
    forge: ForgeClient
    registry: PackageRegistry
    bundler: Bundler
    console: ConsoleProtocol
    confirm: Callable[[str], bool]
    target: HostTarget
    clock: Callable[[], datetime] = _utc_now


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    version: SemVer | None
    released: bool
    release_id: int | None = None
    release_url: str | None = None
    pushed: bool = False
    package_published: bool = False
    asset_name: str | None = None


NOTHING_TO_RELEASE = ReleaseOutcome(version=None, released=False)


def run_release(
    config: RunConfig,
    settings: Settings,
    c: Collaborators,
) -> Result[ReleaseOutcome, ReleaseError]:
    console = c.console

    with step_timer("repository state"):
        state = read_repo_state(c.git, c.forge, settings)
    if isinstance(state, Err):
        return state
    repo = state.value

    if not repo.has_changes:
        since = repo.last_tag or "the first commit"
        console.info(f"nothing to release since {since}")
        return Ok(NOTHING_TO_RELEASE)

    next_version = resolve_next_version(
        repo.current,
        repo.commits,
        bump_major=config.bump_major,
        bump_minor=config.bump_minor,
    )
    logger.info("next version %s (current %s)", next_version, repo.current)

    console.header(f"{repo.slug}: {repo.current} -> {next_version}")
    for commit in repo.commits:
        console.print(f"  {commit.short_hash} {commit.subject}", Style.DIM)

    if not config.assume_yes and not c.confirm(f"Release {repo.current} -> {next_version}?"):
        return Err(ReleaseError(kind="user_declined", message="release cancelled"))

    manifest = publisher.load_manifest(c.git.root, settings)
    if isinstance(manifest, Err):
        return manifest

    with step_timer("release artifacts"):
        changes = write_release_artifacts(
            c.git,
            settings,
            config,
            next_version,
            repo.commits,
            now=c.clock(),
        )
    if isinstance(changes, Err):
        return changes
    if changes.value.changelog_written:
        console.success(f"{settings.changelog} updated")
    if changes.value.version_file_written:
        console.success(f"{settings.version_file} set to {next_version}")
    push_pending = changes.value.push_pending

    if manifest.value is not None:
        bumped = publisher.bump_manifest(c.git, settings, manifest.value, next_version)
        if isinstance(bumped, Err):
            return bumped
        if bumped.value:
            console.success(f"{settings.manifest} version set to {next_version}")
            push_pending = True
        else:
            console.info(f"{settings.manifest} already at {next_version}")

    if push_pending:
        with step_timer("push"):
            pushed = publisher.push_release_commits(c.git, settings)
        if isinstance(pushed, Err):
            return pushed
        console.success(f"pushed {settings.branch} to {settings.remote}")

    package_published = False
    if manifest.value is not None:
        with step_timer("registry publish"):
            published = publisher.publish_package(c.registry, manifest.value, config)
        if isinstance(published, Err):
            return published
        package_published = published.value.published
        if published.value.skipped_private:
            console.info("private package: registry publish skipped")
        else:
            console.success(f"published {manifest.value.name}@{next_version}")

    draft = publisher.build_draft(next_version, repo.commits, config)
    with step_timer("forge release"):
        created = publisher.create_release(c.forge, repo.slug, draft, settings)
    if isinstance(created, Err):
        return created
    console.success(f"release {draft.tag_name} created")

    asset_name: str | None = None
    if manifest.value is not None and publisher.wants_binary(c.git.root, settings):
        with step_timer("binary asset"):
            asset = publisher.publish_binary(
                c.bundler,
                c.forge,
                root=c.git.root,
                settings=settings,
                manifest=manifest.value,
                slug=repo.slug,
                release=created.value,
                version=next_version,
                target=c.target,
            )
        if isinstance(asset, Err):
            return asset
        asset_name = asset.value
        console.success(f"uploaded {asset_name}")

    return Ok(
        ReleaseOutcome(
            version=next_version,
            released=True,
            release_id=created.value.id,
            release_url=created.value.html_url,
            pushed=push_pending,
            package_published=package_published,
            asset_name=asset_name,
        )
    )
