"""Host platform detection for release archives.

Compiled archives and the downloaded bundler are both platform specific;
this module names the host the way bun's release assets do
(``linux-x64``, ``darwin-aarch64``, ``windows-x64``).
"""

from __future__ import annotations

import os as _os
import platform as _platform
import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = ["Platform", "Arch", "HostTarget", "detect"]


class Platform(Enum):
    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def asset_os(self) -> str:
        """OS component used in asset names."""
        match self:
            case Platform.MACOS:
                return "darwin"
            case Platform.WINDOWS:
                return "windows"
            case _:
                return "linux"

    @property
    def is_unix(self) -> bool:
        return self in (Platform.LINUX, Platform.MACOS)

    def exe_name(self, name: str) -> str:
        """``exe_name("bun")`` -> ``bun.exe`` on Windows, ``bun`` elsewhere."""
        return f"{name}.exe" if self == Platform.WINDOWS else name


class Arch(Enum):
    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def asset_arch(self) -> str:
        return "aarch64" if self == Arch.ARM64 else "x64"


@dataclass(frozen=True, slots=True)
class HostTarget:
    platform: Platform
    arch: Arch

    def __str__(self) -> str:
        return f"{self.platform.asset_os}-{self.arch.asset_arch}"


def _detect_platform() -> Platform:
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def _detect_arch(platform: Platform) -> Arch:
    # platform.machine() can query WMI on Windows; the env var is enough there.
    if platform == Platform.WINDOWS:
        machine = (
            _os.environ.get("PROCESSOR_ARCHITEW6432")
            or _os.environ.get("PROCESSOR_ARCHITECTURE")
            or ""
        ).lower()
    else:
        machine = _platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN


@lru_cache(maxsize=1)
def detect() -> HostTarget:
    """Detect the host platform and architecture (cached)."""
    platform = _detect_platform()
    return HostTarget(platform=platform, arch=_detect_arch(platform))
