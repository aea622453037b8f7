"""npm registry client."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from semship.core.result import Err, Ok, Result
from semship.platform.process import run as run_process
from semship.platform.process import run_interactive
from semship.release.errors import ReleaseError

__all__ = ["PackageRegistry", "NpmRegistry"]

_NPM_TIMEOUT_SECONDS = 5 * 60.0


class PackageRegistry(Protocol):
    def is_authenticated(self) -> bool: ...

    def login(self) -> Result[None, ReleaseError]: ...

    def publish(self, *, public: bool) -> Result[None, ReleaseError]: ...


class NpmRegistry:
    """``PackageRegistry`` using the ``npm`` command in the project root."""

    def __init__(self, root: Path, executable: str = "npm") -> None:
        self.root = root
        self.executable = executable

    def is_authenticated(self) -> bool:
        result = run_process([self.executable, "whoami"], cwd=self.root, timeout=60.0)
        return isinstance(result, Ok)

    def login(self) -> Result[None, ReleaseError]:
        result = run_interactive([self.executable, "login"], cwd=self.root)
        if isinstance(result, Err):
            return Err(ReleaseError(kind="package_failed", message="npm login failed", hint=str(result.error)))
        return Ok(None)

    def publish(self, *, public: bool) -> Result[None, ReleaseError]:
        cmd = [self.executable, "publish"]
        if public:
            cmd += ["--access", "public"]
        result = run_process(cmd, cwd=self.root, timeout=_NPM_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="package_failed",
                    message="npm publish failed",
                    hint=result.error.stderr.strip() or str(result.error),
                )
            )
        return Ok(None)
