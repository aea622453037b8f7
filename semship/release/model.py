from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CommitRecord:
    hash: str
    subject: str
    author: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    def render(self, *, prepend_hash: bool) -> str:
        """One line for the changelog and release body."""
        if prepend_hash:
            return f"{self.short_hash} {self.subject}"
        return self.subject


@dataclass(frozen=True, slots=True)
class ReleaseDraft:
    tag_name: str
    title: str
    body: str


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    id: int
    tag_name: str
    html_url: str | None = None


def _empty_bin() -> dict[str, str]:
    return {}


def _empty_raw() -> dict[str, object]:
    return {}


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """Fields of ``package.json`` the release cares about.

    ``bin`` is normalized to ``{command: path}``; npm's string form maps to
    the package name. ``raw`` keeps the full document for rewriting.
    """

    name: str
    version: str | None
    private: bool
    bin: dict[str, str] = field(default_factory=_empty_bin)
    raw: dict[str, object] = field(default_factory=_empty_raw)

    @property
    def binary_entry(self) -> tuple[str, str] | None:
        """First ``(command, path)`` bin entry, if any."""
        for command, path in self.bin.items():
            return (command, path)
        return None
