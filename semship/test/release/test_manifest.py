from __future__ import annotations

import json

from semship.core.result import Err, Ok
from semship.release.manifest import parse_manifest, read_manifest, render_with_version


def test_parse_full_manifest() -> None:
    text = json.dumps(
        {"name": "@acme/widget", "version": "1.2.3", "private": False, "bin": {"widget": "src/cli.ts"}}
    )
    result = parse_manifest(text)

    assert isinstance(result, Ok)
    m = result.value
    assert m.name == "@acme/widget"
    assert m.version == "1.2.3"
    assert not m.private
    assert m.binary_entry == ("widget", "src/cli.ts")


def test_string_bin_uses_unscoped_name() -> None:
    result = parse_manifest('{"name": "@acme/widget", "bin": "./cli.ts"}')
    assert isinstance(result, Ok)
    assert result.value.bin == {"widget": "./cli.ts"}


def test_private_only_when_true() -> None:
    private = parse_manifest('{"name": "a", "private": true}')
    stringy = parse_manifest('{"name": "a", "private": "true"}')
    assert isinstance(private, Ok) and private.value.private
    assert isinstance(stringy, Ok) and not stringy.value.private


def test_no_bin_entry() -> None:
    result = parse_manifest('{"name": "a"}')
    assert isinstance(result, Ok)
    assert result.value.binary_entry is None


def test_invalid_json() -> None:
    result = parse_manifest("{name: a}")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_array_root_rejected() -> None:
    result = parse_manifest("[]")
    assert isinstance(result, Err)
    assert "JSON object" in result.error.message


def test_render_with_version_keeps_other_keys(tmp_path) -> None:
    path = tmp_path / "package.json"
    path.write_text('{"name": "a", "version": "0.1.0", "scripts": {"test": "bun test"}}', encoding="utf-8")
    manifest = read_manifest(path)
    assert isinstance(manifest, Ok)

    out = render_with_version(manifest.value, "0.2.0")

    assert out.endswith("}\n")
    data = json.loads(out)
    assert list(data) == ["name", "version", "scripts"]
    assert data["version"] == "0.2.0"
    assert data["scripts"] == {"test": "bun test"}


def test_read_missing_manifest(tmp_path) -> None:
    result = read_manifest(tmp_path / "package.json")
    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"
