"""Bun as the archive compiler.

``bun build --compile`` turns the package's bin entry into one
self-contained executable. When bun is not on PATH, a pinned release is
downloaded from GitHub into ``.semship/tools/bun-<version>/``.

GitHub: https://github.com/oven-sh/bun
"""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path
from typing import Protocol

from semship.core.result import Err, Ok, Result
from semship.forge.http import HttpClient
from semship.output.log import logger
from semship.platform.detection import HostTarget
from semship.platform.process import run as run_process
from semship.release.errors import ReleaseError

__all__ = ["Bundler", "BunBundler", "bun_download_url", "TOOLS_DIR"]

TOOLS_DIR = ".semship/tools"
BUN_REPO = "oven-sh/bun"

_COMPILE_TIMEOUT_SECONDS = 10 * 60.0


class Bundler(Protocol):
    def ensure_available(self) -> Result[Path, ReleaseError]: ...

    def compile(self, entry: str, outfile: Path) -> Result[Path, ReleaseError]: ...


def bun_download_url(version: str, target: HostTarget) -> str:
    """Release asset URL, e.g. ``.../bun-v1.1.38/bun-linux-x64.zip``."""
    return (
        f"https://github.com/{BUN_REPO}/releases/download/"
        f"bun-v{version}/bun-{target.platform.asset_os}-{target.arch.asset_arch}.zip"
    )


def _bundle_error(message: str, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="bundle_failed", message=message, hint=hint)


class BunBundler:
    """``Bundler`` running bun from PATH or from a pinned local install."""

    def __init__(
        self,
        root: Path,
        http: HttpClient,
        *,
        version: str,
        target: HostTarget,
    ) -> None:
        self.root = root
        self.version = version
        self.target = target
        self._http = http
        self._bin: Path | None = None

    @property
    def install_dir(self) -> Path:
        return self.root / TOOLS_DIR / f"bun-{self.version}"

    @property
    def local_bin(self) -> Path:
        return self.install_dir / self.target.platform.exe_name("bun")

    def ensure_available(self) -> Result[Path, ReleaseError]:
        if self._bin is not None:
            return Ok(self._bin)

        on_path = shutil.which("bun")
        if on_path:
            self._bin = Path(on_path)
            return Ok(self._bin)

        if not self.local_bin.is_file():
            installed = self._install()
            if isinstance(installed, Err):
                return installed

        self._bin = self.local_bin
        return Ok(self._bin)

    def _install(self) -> Result[None, ReleaseError]:
        url = bun_download_url(self.version, self.target)
        archive = self.install_dir.with_name(f"{self.install_dir.name}.zip")
        downloaded = self._http.download(url, archive)
        if isinstance(downloaded, Err):
            return Err(_bundle_error(f"cannot download bun {self.version}", hint=str(downloaded.error)))

        exe = self.target.platform.exe_name("bun")
        try:
            self.install_dir.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive, "r") as zf:
                # Archives hold a single bun-<os>-<arch>/bun member.
                member = next(
                    (i for i in zf.infolist() if not i.is_dir() and i.filename.rsplit("/", 1)[-1] == exe),
                    None,
                )
                if member is None:
                    return Err(_bundle_error(f"{exe} not found in {archive.name}", hint=url))
                with zf.open(member) as src, open(self.local_bin, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            if self.target.platform.is_unix:
                self.local_bin.chmod(0o755)
        except zipfile.BadZipFile as e:
            return Err(_bundle_error(f"invalid bun archive: {e}", hint=url))
        except OSError as e:
            return Err(_bundle_error(f"cannot install bun: {e}", hint=str(self.install_dir)))
        finally:
            archive.unlink(missing_ok=True)

        logger.info("installed bun %s at %s", self.version, self.local_bin)
        return Ok(None)

    def compile(self, entry: str, outfile: Path) -> Result[Path, ReleaseError]:
        available = self.ensure_available()
        if isinstance(available, Err):
            return available

        try:
            outfile.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(_bundle_error(f"cannot create {outfile.parent.name}: {e}", hint=str(outfile.parent)))
        cmd = [str(available.value), "build", entry, "--compile", "--outfile", str(outfile)]
        result = run_process(cmd, cwd=self.root, timeout=_COMPILE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                _bundle_error(
                    f"bun build failed for {entry}",
                    hint=result.error.stderr.strip() or str(result.error),
                )
            )

        # bun appends .exe on Windows
        produced = outfile
        if not produced.exists():
            produced = outfile.with_name(self.target.platform.exe_name(outfile.name))
        if not produced.exists():
            return Err(_bundle_error("bun build produced no output", hint=str(outfile)))
        return Ok(produced)
