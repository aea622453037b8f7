from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "not_a_repository",
    "auth_missing",
    "invalid_input",
    "invalid_version",
    "user_declined",
    "git_failed",
    "forge_failed",
    "package_failed",
    "bundle_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
