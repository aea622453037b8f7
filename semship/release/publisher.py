"""Publishing: npm package, forge release, compiled archive asset."""

from __future__ import annotations

import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path

from semship.core.config import RunConfig, Settings
from semship.core.result import Err, Ok, Result
from semship.forge.github import ForgeClient
from semship.git.repository import VcsClient
from semship.output.log import logger
from semship.platform.detection import HostTarget
from semship.release.artifacts import commit_files, write_text
from semship.release.errors import ReleaseError
from semship.release.manifest import read_manifest, render_with_version
from semship.release.model import CommitRecord, CreatedRelease, PackageManifest, ReleaseDraft
from semship.release.semver import SemVer
from semship.release.state import git_failure
from semship.tools.bun import Bundler
from semship.tools.npm import PackageRegistry


@dataclass(frozen=True, slots=True)
class PackagePublish:
    published: bool
    skipped_private: bool


def load_manifest(root: Path, settings: Settings) -> Result[PackageManifest | None, ReleaseError]:
    """The project manifest, or None when the project has none."""
    path = root / settings.manifest
    if not path.is_file():
        return Ok(None)
    return read_manifest(path)


def bump_manifest(
    git: VcsClient,
    settings: Settings,
    manifest: PackageManifest,
    version: SemVer,
) -> Result[bool, ReleaseError]:
    """Write ``version`` into the manifest and commit it; Ok(True) when a commit was made.

    A manifest that already declares ``version`` is left as it is.
    """
    tag = str(version)
    if manifest.version == tag:
        logger.info("%s already declares %s, nothing to commit", settings.manifest, tag)
        return Ok(False)

    written = write_text(git.root / settings.manifest, render_with_version(manifest, tag))
    if isinstance(written, Err):
        return written
    committed = commit_files(git, [settings.manifest], f"chore(package): {tag} [skip ci]")
    if isinstance(committed, Err):
        return committed
    return Ok(True)


def push_release_commits(git: VcsClient, settings: Settings) -> Result[None, ReleaseError]:
    pushed = git.push(settings.remote, settings.branch)
    if isinstance(pushed, Err):
        return Err(git_failure(pushed.error))
    return Ok(None)


def publish_package(
    registry: PackageRegistry,
    manifest: PackageManifest,
    config: RunConfig,
) -> Result[PackagePublish, ReleaseError]:
    """Publish to the registry unless the manifest is private.

    A failed ``whoami`` triggers ``npm login``; publish then runs without
    checking the login again.
    """
    if manifest.private:
        logger.info("%s is private, skipping registry publish", manifest.name or "package")
        return Ok(PackagePublish(published=False, skipped_private=True))

    if not registry.is_authenticated():
        logged_in = registry.login()
        if isinstance(logged_in, Err):
            return logged_in

    published = registry.publish(public=config.public_package)
    if isinstance(published, Err):
        return published
    return Ok(PackagePublish(published=True, skipped_private=False))


def build_draft(
    version: SemVer,
    commits: tuple[CommitRecord, ...],
    config: RunConfig,
) -> ReleaseDraft:
    tag = str(version)
    body = "\n".join(c.render(prepend_hash=config.prepend_commit_hash) for c in commits)
    return ReleaseDraft(tag_name=tag, title=tag, body=body)


def create_release(
    forge: ForgeClient,
    slug: str,
    draft: ReleaseDraft,
    settings: Settings,
) -> Result[CreatedRelease, ReleaseError]:
    return forge.create_release(slug, draft, target=settings.branch)


def wants_binary(root: Path, settings: Settings) -> bool:
    return (root / settings.manifest).is_file() and (root / settings.bundler_config).is_file()


def archive_name(command: str, version: SemVer, target: HostTarget) -> str:
    return f"{command}-{version}-{target}.tar.gz"


def _pack(binary: Path, archive: Path) -> Result[Path, ReleaseError]:
    try:
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(binary, arcname=binary.name)
    except (OSError, tarfile.TarError) as e:
        return Err(ReleaseError(kind="bundle_failed", message=f"cannot create archive: {e}", hint=str(archive)))
    return Ok(archive)


def publish_binary(
    bundler: Bundler,
    forge: ForgeClient,
    *,
    root: Path,
    settings: Settings,
    manifest: PackageManifest,
    slug: str,
    release: CreatedRelease,
    version: SemVer,
    target: HostTarget,
) -> Result[str, ReleaseError]:
    """Compile the bin entry, pack it and attach it to ``release``.

    Returns the uploaded asset file name.
    """
    entry = manifest.binary_entry
    if entry is None:
        return Err(
            ReleaseError(
                kind="bundle_failed",
                message=f"no bin entry in {settings.manifest}",
                hint='add "bin": {"<command>": "<entry file>"}',
            )
        )
    command, entry_path = entry

    available = bundler.ensure_available()
    if isinstance(available, Err):
        return available

    coverage = root / settings.coverage_dir
    if coverage.is_dir():
        try:
            shutil.rmtree(coverage)
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"cannot remove {coverage.name}: {e}"))
        logger.info("removed %s", coverage)

    dist = root / settings.dist_dir
    binary = bundler.compile(entry_path, dist / command)
    if isinstance(binary, Err):
        return binary

    packed = _pack(binary.value, dist / archive_name(command, version, target))
    if isinstance(packed, Err):
        return packed

    uploaded = forge.upload_asset(slug, release.id, packed.value)
    if isinstance(uploaded, Err):
        return uploaded
    return Ok(packed.value.name)
