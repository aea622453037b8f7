"""Remote URL parsing."""

from __future__ import annotations

import re

__all__ = ["parse_remote_slug"]

# git@github.com:owner/name.git
_SCP_RE = re.compile(r"^[\w.-]+@[\w.-]+:(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")
# https://github.com/owner/name.git, ssh://git@github.com:22/owner/name
_URL_RE = re.compile(r"^[a-z+]+://[^/\s]+/(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")


def parse_remote_slug(url: str) -> str | None:
    """Return ``owner/name`` for a forge remote URL, or None if unrecognized."""
    s = url.strip()
    for pattern in (_SCP_RE, _URL_RE):
        m = pattern.match(s)
        if m is not None:
            return m.group("slug")
    return None
