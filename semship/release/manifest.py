"""``package.json`` reading and version rewriting."""

from __future__ import annotations

import json
from pathlib import Path

from semship.core.result import Err, Ok, Result
from semship.core.structured import as_str_dict, get_bool, get_str
from semship.release.errors import ReleaseError
from semship.release.model import PackageManifest


def _normalize_bin(name: str, value: object) -> dict[str, str]:
    if isinstance(value, str) and value.strip():
        command = name.rsplit("/", 1)[-1] if name else "bin"
        return {command: value.strip()}
    table = as_str_dict(value)
    if table is None:
        return {}
    return {k: v.strip() for k, v in table.items() if isinstance(v, str) and v.strip()}


def parse_manifest(text: str, *, source: str = "package.json") -> Result[PackageManifest, ReleaseError]:
    try:
        data_obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind="invalid_input", message=f"invalid JSON in {source}: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ReleaseError(kind="invalid_input", message=f"{source} must be a JSON object"))

    name = get_str(data, "name") or ""
    return Ok(
        PackageManifest(
            name=name,
            version=get_str(data, "version"),
            private=get_bool(data, "private") is True,
            bin=_normalize_bin(name, data.get("bin")),
            raw=data,
        )
    )


def read_manifest(path: Path) -> Result[PackageManifest, ReleaseError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"cannot read {path.name}: {e}", hint=str(path)))
    return parse_manifest(text, source=path.name)


def render_with_version(manifest: PackageManifest, version: str) -> str:
    """Serialize the manifest with ``version`` set, keeping key order."""
    data = dict(manifest.raw)
    data["version"] = version
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
