"""Semantic versions and next-version resolution."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from semship.core.result import Err, Ok, Result
from semship.release.errors import ReleaseError
from semship.release.model import CommitRecord

ReleaseBump = Literal["major", "minor", "patch"]

FEATURE_MARKER = "feat"

_VERSION_RE = re.compile(r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseBump) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


INITIAL_VERSION = SemVer(0, 0, 0)


def parse_version(text: str) -> Result[SemVer, ReleaseError]:
    """Parse ``1.2.3`` (or a ``v1.2.3`` tag) into a SemVer.

    Pre-release and build suffixes are rejected.
    """
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"not a major.minor.patch version: {text!r}",
            )
        )
    return Ok(SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def classify_bump(
    commits: Iterable[CommitRecord],
    *,
    bump_major: bool,
    bump_minor: bool,
) -> ReleaseBump:
    """Pick the bump kind; explicit flags win over commit inference."""
    if bump_major:
        return "major"
    if bump_minor:
        return "minor"
    if any(c.subject.startswith(FEATURE_MARKER) for c in commits):
        return "minor"
    return "patch"


def resolve_next_version(
    current: SemVer,
    commits: Iterable[CommitRecord],
    *,
    bump_major: bool = False,
    bump_minor: bool = False,
) -> SemVer:
    return current.bump(classify_bump(commits, bump_major=bump_major, bump_minor=bump_minor))
