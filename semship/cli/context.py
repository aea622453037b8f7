from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import click
import typer

from semship.core.config import Settings, load_settings
from semship.core.result import Err, Ok, Result
from semship.forge.github import GitHubForge, resolve_token
from semship.forge.http import RealHttpClient
from semship.git.repository import GitClient, find_repo_root
from semship.output.console import ConsoleProtocol
from semship.platform.detection import detect
from semship.release.errors import ReleaseError
from semship.release.pipeline import Collaborators
from semship.tools.bun import BunBundler
from semship.tools.npm import NpmRegistry


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    settings: Settings
    collaborators: Collaborators


def confirm_release(question: str) -> bool:
    """Ask on the terminal; end of input or Ctrl-C counts as a no."""
    try:
        return typer.confirm(question, default=False)
    except click.Abort:
        return False


def build_context(console: ConsoleProtocol, cwd: Path | None = None) -> Result[CLIContext, ReleaseError]:
    """Locate the repository, load settings and wire the real collaborators."""
    root = find_repo_root(cwd or Path.cwd())
    if isinstance(root, Err):
        return Err(
            ReleaseError(
                kind="not_a_repository",
                message="not inside a git repository",
                hint=root.error.message,
            )
        )

    loaded = load_settings(root.value)
    if isinstance(loaded, Err):
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=loaded.error.message,
                hint=str(loaded.error.path) if loaded.error.path else None,
            )
        )
    settings = loaded.value

    token = resolve_token(os.environ, settings.token_env)
    if isinstance(token, Err):
        return token

    http = RealHttpClient()
    target = detect()
    collaborators = Collaborators(
        git=GitClient(root.value),
        forge=GitHubForge(
            http,
            token=token.value,
            api_url=settings.api_url,
            uploads_url=settings.uploads_url,
        ),
        registry=NpmRegistry(root.value),
        bundler=BunBundler(root.value, http, version=settings.bun_version, target=target),
        console=console,
        confirm=confirm_release,
        target=target,
    )
    return Ok(CLIContext(root=root.value, settings=settings, collaborators=collaborators))
