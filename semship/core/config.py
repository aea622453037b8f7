"""Run configuration and project settings.

Two values drive a release:

- ``RunConfig``: what the user asked for on the command line.
- ``Settings``: where things live in the project, read from an optional
  ``.semship.toml`` at the repository root.

Both are frozen and passed explicitly to every stage.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list

__all__ = [
    "RunConfig",
    "Settings",
    "ConfigError",
    "SETTINGS_FILE",
    "API_URL_ENV",
    "DEFAULT_SKIP_MARKERS",
    "load_settings",
]

SETTINGS_FILE = ".semship.toml"
API_URL_ENV = "SEMSHIP_API_URL"

DEFAULT_SKIP_MARKERS: tuple[str, ...] = (
    "[skip ci]",
    "[ci skip]",
    "[no ci]",
    "[skip actions]",
    "[actions skip]",
)

DEFAULT_BUN_VERSION = "1.1.38"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Settings file could not be read or has the wrong shape."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Flags for one invocation.

    ``bump_major`` and ``bump_minor`` come from the single scope token, so at
    most one is set in practice.
    """

    bump_major: bool = False
    bump_minor: bool = False
    force_version_file: bool = False
    force_changelog: bool = False
    prepend_commit_hash: bool = False
    public_package: bool = False
    assume_yes: bool = False


def _default_skip_markers() -> tuple[str, ...]:
    return DEFAULT_SKIP_MARKERS


@dataclass(frozen=True, slots=True)
class Settings:
    """Project layout and forge endpoints.

    Relative paths resolve against the repository root.
    """

    branch: str = "main"
    remote: str = "origin"
    changelog: str = "CHANGELOG.md"
    version_file: str = "VERSION"
    manifest: str = "package.json"
    bundler_config: str = "bunfig.toml"
    coverage_dir: str = "coverage"
    dist_dir: str = "dist"
    skip_markers: tuple[str, ...] = field(default_factory=_default_skip_markers)
    token_env: str = "GITHUB_TOKEN"
    api_url: str = "https://api.github.com"
    uploads_url: str = "https://uploads.github.com"
    bun_version: str = DEFAULT_BUN_VERSION

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Settings:
        """Create Settings from a parsed TOML table, keeping defaults for gaps."""
        d = cls()
        markers = get_str_list(data, "skip_markers")
        return cls(
            branch=get_str(data, "branch") or d.branch,
            remote=get_str(data, "remote") or d.remote,
            changelog=get_str(data, "changelog") or d.changelog,
            version_file=get_str(data, "version_file") or d.version_file,
            manifest=get_str(data, "manifest") or d.manifest,
            bundler_config=get_str(data, "bundler_config") or d.bundler_config,
            coverage_dir=get_str(data, "coverage_dir") or d.coverage_dir,
            dist_dir=get_str(data, "dist_dir") or d.dist_dir,
            skip_markers=tuple(markers) if markers is not None else d.skip_markers,
            token_env=get_str(data, "token_env") or d.token_env,
            api_url=(get_str(data, "api_url") or d.api_url).rstrip("/"),
            uploads_url=(get_str(data, "uploads_url") or d.uploads_url).rstrip("/"),
            bun_version=get_str(data, "bun_version") or d.bun_version,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading settings: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Settings root must be a TOML table", path=path))
    return Ok(data)


def load_settings(
    repo_root: Path,
    env: Mapping[str, str] | None = None,
) -> Result[Settings, ConfigError]:
    """Load ``.semship.toml`` from ``repo_root``; defaults when it is absent.

    ``SEMSHIP_API_URL`` in ``env`` overrides ``api_url``.

    Returns:
        Ok(Settings) on success, Err(ConfigError) for unreadable or malformed files.
    """
    environ = os.environ if env is None else env
    path = repo_root / SETTINGS_FILE

    settings = Settings()
    if path.exists():
        parsed = _parse_toml(path)
        if isinstance(parsed, Err):
            return parsed
        if "skip_markers" in parsed.value and get_str_list(parsed.value, "skip_markers") is None:
            return Err(ConfigError("skip_markers must be a list of strings", path=path))
        settings = Settings.from_dict(parsed.value)

    override = environ.get(API_URL_ENV, "").strip()
    if override:
        settings = replace(settings, api_url=override.rstrip("/"))
    return Ok(settings)
