"""Changelog rendering.

Entries are prepended: the newest version is at the top and earlier
content is kept verbatim below it. A version heading is written at most
once.

    ## [1.3.0] 2026-10-18 09:41:07 UTC
    - feat: add upload command
    - fix: handle empty config
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime

__all__ = [
    "TIMESTAMP_FORMAT",
    "heading_for",
    "has_version",
    "render_entry",
    "prepend_entry",
]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def heading_for(version: str, now: datetime) -> str:
    stamp = now.astimezone(UTC).strftime(TIMESTAMP_FORMAT)
    return f"## [{version}] {stamp}"


def has_version(text: str, version: str) -> bool:
    """True if ``text`` already documents ``version``."""
    pattern = re.compile(rf"^##\s+\[{re.escape(version)}\]", re.MULTILINE)
    return pattern.search(text) is not None


def render_entry(version: str, lines: Iterable[str], now: datetime) -> str:
    out = [heading_for(version, now)]
    out.extend(f"- {line}" for line in lines)
    return "\n".join(out) + "\n"


def prepend_entry(entry: str, previous: str) -> str:
    if not previous.strip():
        return entry
    return f"{entry}\n{previous}"
