from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import NoReturn

import click
import typer

from semship import __version__
from semship.cli.context import build_context
from semship.cli.self_update import self_update
from semship.core.config import RunConfig
from semship.core.errors import ErrorCode
from semship.core.result import Err
from semship.output.console import ConsoleProtocol, RichConsole, Style
from semship.output.log import close_run_log, logger, setup_run_log
from semship.release.errors import ReleaseError
from semship.release.pipeline import run_release


class Scope(str, Enum):
    MAJOR = "major"
    MINOR = "minor"


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Release the next semantic version of the current repository.",
)


def build_run_config(
    scope: Scope | None,
    *,
    changelog: bool = False,
    prepend_hash: bool = False,
    public: bool = False,
    version_file: bool = False,
    yes: bool = False,
) -> RunConfig:
    return RunConfig(
        bump_major=scope == Scope.MAJOR,
        bump_minor=scope == Scope.MINOR,
        force_version_file=version_file,
        force_changelog=changelog,
        prepend_commit_hash=prepend_hash,
        public_package=public,
        assume_yes=yes,
    )


def _fail(console: ConsoleProtocol, error: ReleaseError, log_path: Path) -> NoReturn:
    logger.error("%s: %s (%s)", error.kind, error.message, error.hint or "-")
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    console.print(f"log: {log_path}", Style.DIM)
    close_run_log()
    raise typer.Exit(code=int(ErrorCode.FATAL))


@app.command()
def release(
    scope: Scope | None = typer.Argument(
        None,
        help="Force a [bold]major[/bold] or [bold]minor[/bold] bump (default: inferred from commits).",
        show_default=False,
    ),
    changelog: bool = typer.Option(
        False, "--changelog", "-c", help="Write the changelog even if it does not exist yet."
    ),
    prepend_hash: bool = typer.Option(
        False, "--prepend-hash", "-s", help="Prefix each commit line with its short hash."
    ),
    public: bool = typer.Option(False, "--public", "-p", help="Publish the npm package with public access."),
    update: bool = typer.Option(False, "--self-update", "-u", help="Upgrade semship and exit."),
    version_file: bool = typer.Option(
        False, "--version-file", "-f", help="Write the version file even if it does not exist yet."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Release the next semantic version of the current repository."""
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    console = RichConsole()
    if update:
        raise typer.Exit(code=int(self_update(console)))

    config = build_run_config(
        scope,
        changelog=changelog,
        prepend_hash=prepend_hash,
        public=public,
        version_file=version_file,
        yes=yes,
    )

    log_path = setup_run_log()
    logger.info("semship %s, %s", __version__, config)

    ctx = build_context(console)
    if isinstance(ctx, Err):
        _fail(console, ctx.error, log_path)

    outcome = run_release(config, ctx.value.settings, ctx.value.collaborators)
    if isinstance(outcome, Err):
        _fail(console, outcome.error, log_path)

    if outcome.value.released and outcome.value.release_url:
        console.print(outcome.value.release_url, Style.INFO)
    console.print(f"log: {log_path}", Style.DIM)
    close_run_log()


def main() -> None:
    """Console entry point.

    Usage errors (unknown flag, bad scope) exit with 1 like every other
    fatal condition, instead of click's default 2.
    """
    command = typer.main.get_command(app)
    try:
        code = command.main(prog_name="semship", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(int(ErrorCode.FATAL))
    except click.Abort:
        typer.echo("aborted", err=True)
        sys.exit(int(ErrorCode.FATAL))
    sys.exit(code if isinstance(code, int) else int(ErrorCode.OK))
