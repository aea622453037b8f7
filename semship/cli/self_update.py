from __future__ import annotations

from importlib import metadata
from pathlib import Path

from semship.core.errors import ErrorCode
from semship.core.result import Err
from semship.output.console import ConsoleProtocol, Style
from semship.platform.process import run_interactive

DEFAULT_TOOL_NAME = "semship"


def tool_name() -> str:
    """Distribution name of the running ``semship`` package (uv tool name)."""
    try:
        dists = metadata.packages_distributions().get("semship", [])
    except (OSError, ValueError):
        return DEFAULT_TOOL_NAME
    return dists[0] if dists else DEFAULT_TOOL_NAME


def self_update(console: ConsoleProtocol) -> ErrorCode:
    """Upgrade the globally installed tool with ``uv tool upgrade``."""
    cmd = ["uv", "tool", "upgrade", tool_name()]
    console.print(" ".join(cmd), Style.DIM)

    result = run_interactive(cmd, cwd=Path.cwd())
    if isinstance(result, Err):
        console.error(str(result.error))
        console.print("hint: install with `uv tool install semship`", Style.DIM)
        return ErrorCode.FATAL

    console.success("semship is up to date")
    return ErrorCode.OK
