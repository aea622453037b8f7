"""GitHub-style forge client.

Three endpoints are used: list releases, create release, upload a release
asset. Authentication is a bearer token taken from the environment.

Any response carrying a non-null ``message`` field is GitHub's error
envelope and is treated as a failure, whatever the HTTP status.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from semship.core.result import Err, Ok, Result
from semship.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_str
from semship.forge.http import HttpClient, HttpError
from semship.release.errors import ReleaseError
from semship.release.model import CreatedRelease, ReleaseDraft

__all__ = ["ForgeClient", "GitHubForge", "resolve_token"]

_API_VERSION = "2022-11-28"
# draft releases are skipped, so the page must reach past them
_RELEASE_PAGE_SIZE = 20


class ForgeClient(Protocol):
    """Release operations on the hosting forge."""

    def latest_release_tag(self, slug: str) -> Result[str | None, ReleaseError]: ...

    def create_release(
        self, slug: str, draft: ReleaseDraft, *, target: str
    ) -> Result[CreatedRelease, ReleaseError]: ...

    def upload_asset(
        self, slug: str, release_id: int, path: Path
    ) -> Result[str | None, ReleaseError]: ...


def resolve_token(env: Mapping[str, str], name: str) -> Result[str, ReleaseError]:
    token = env.get(name, "").strip()
    if not token:
        return Err(
            ReleaseError(
                kind="auth_missing",
                message=f"{name} is not set",
                hint=f"export {name}=<token with repo scope>",
            )
        )
    return Ok(token)


def _error_message(payload: object) -> str | None:
    data = as_str_dict(payload)
    if data is None:
        return None
    message = data.get("message")
    if message is None:
        return None
    return str(message)


def _from_http_error(error: HttpError, *, what: str) -> ReleaseError:
    message = str(error)
    if error.body:
        try:
            body: object = json.loads(error.body)
        except json.JSONDecodeError:
            body = None
        envelope = _error_message(body)
        if envelope:
            message = f"{envelope} (HTTP {error.status})"
    return ReleaseError(kind="forge_failed", message=f"{what}: {message}", hint=error.url)


class GitHubForge:
    """``ForgeClient`` over the GitHub REST API."""

    def __init__(
        self,
        http: HttpClient,
        *,
        token: str,
        api_url: str = "https://api.github.com",
        uploads_url: str = "https://uploads.github.com",
    ) -> None:
        self._http = http
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.uploads_url = uploads_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
        }

    def _check(self, result: Result[object, HttpError], *, what: str) -> Result[object, ReleaseError]:
        if isinstance(result, Err):
            return Err(_from_http_error(result.error, what=what))
        envelope = _error_message(result.value)
        if envelope is not None:
            return Err(ReleaseError(kind="forge_failed", message=f"{what}: {envelope}"))
        return Ok(result.value)

    def latest_release_tag(self, slug: str) -> Result[str | None, ReleaseError]:
        """Tag of the newest non-draft release, or None when there is none.

        Only the first page is read; a repository with more drafts than fit on it
        reports no release.
        """
        url = f"{self.api_url}/repos/{slug}/releases?per_page={_RELEASE_PAGE_SIZE}"
        checked = self._check(
            self._http.request_json("GET", url, headers=self._headers()),
            what="list releases",
        )
        if isinstance(checked, Err):
            return checked

        releases = as_obj_list(checked.value)
        if releases is None:
            return Err(
                ReleaseError(kind="forge_failed", message="unexpected releases payload", hint=url)
            )
        for item in releases:
            entry = as_str_dict(item)
            if entry is not None and get_bool(entry, "draft") is True:
                continue
            tag = get_str(entry, "tag_name") if entry is not None else None
            if tag is None:
                return Err(
                    ReleaseError(kind="forge_failed", message="latest release has no tag_name", hint=url)
                )
            return Ok(tag)
        return Ok(None)

    def create_release(
        self, slug: str, draft: ReleaseDraft, *, target: str
    ) -> Result[CreatedRelease, ReleaseError]:
        url = f"{self.api_url}/repos/{slug}/releases"
        payload = {
            "tag_name": draft.tag_name,
            "target_commitish": target,
            "name": draft.title,
            "body": draft.body,
        }
        checked = self._check(
            self._http.request_json("POST", url, headers=self._headers(), payload=payload),
            what="create release",
        )
        if isinstance(checked, Err):
            return checked

        data = as_str_dict(checked.value)
        release_id = get_int(data, "id") if data is not None else None
        if data is None or release_id is None:
            return Err(
                ReleaseError(
                    kind="forge_failed",
                    message="create release returned no release id",
                    hint=url,
                )
            )
        return Ok(
            CreatedRelease(
                id=release_id,
                tag_name=get_str(data, "tag_name") or draft.tag_name,
                html_url=get_str(data, "html_url"),
            )
        )

    def upload_asset(
        self, slug: str, release_id: int, path: Path
    ) -> Result[str | None, ReleaseError]:
        """Attach ``path`` to the release; returns the asset download URL."""
        try:
            data = path.read_bytes()
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"cannot read asset: {e}", hint=str(path)))

        url = (
            f"{self.uploads_url}/repos/{slug}/releases/{release_id}/assets"
            f"?name={quote(path.name)}"
        )
        checked = self._check(
            self._http.upload(url, data, headers=self._headers()),
            what="upload asset",
        )
        if isinstance(checked, Err):
            return checked

        asset = as_str_dict(checked.value)
        return Ok(get_str(asset, "browser_download_url") if asset is not None else None)
