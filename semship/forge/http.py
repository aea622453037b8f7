"""HTTP client abstraction for the forge API and tool downloads.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from semship import __version__
from semship.core.result import Err, Ok, Result
from semship.output.log import logger

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body when the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Lets tests swap in ``MockHttpClient`` so no real network call happens.
    """

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object | None = None,
    ) -> Result[object, HttpError]:
        """Send an optional JSON payload and decode the JSON response."""
        ...

    def upload(
        self,
        url: str,
        data: bytes,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """POST raw bytes and decode the JSON response."""
        ...

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Stream ``url`` into ``dest``."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 60.0, user_agent: str = f"semship/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _send(
        self,
        method: str,
        url: str,
        data: bytes | None,
        headers: Mapping[str, str] | None,
    ) -> Result[bytes, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        logger.info("%s %s", method, url)
        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            body = _read_error_body(e)
            logger.error("HTTP %s from %s: %s", e.code, url, body)
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {"Accept": "application/json", **(headers or {})}
        data: bytes | None = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            all_headers["Content-Type"] = "application/json"
        result = self._send(method, url, data, all_headers)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value)

    def upload(
        self,
        url: str,
        data: bytes,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {
            "Accept": "application/json",
            "Content-Type": "application/octet-stream",
            "Content-Length": str(len(data)),
            **(headers or {}),
        }
        result = self._send("POST", url, data, all_headers)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        logger.info("GET %s -> %s", url, dest)
        try:
            req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    while True:
                        chunk = response.read(8192)
                        if not chunk:
                            break
                        f.write(chunk)
                return Ok(dest)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _read_error_body(e: urllib.error.HTTPError) -> str:
    try:
        return e.read().decode("utf-8", errors="replace")
    except OSError:
        return ""


def _decode_json(url: str, raw: bytes) -> Result[object, HttpError]:
    if not raw.strip():
        return Ok(None)
    try:
        data: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    return Ok(data)


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """A request recorded by ``MockHttpClient``."""

    method: str
    url: str
    headers: dict[str, str]
    payload: object | None = None
    data: bytes | None = None


def _empty_requests() -> list[HttpRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by ``(method, url)``; unknown keys answer 404.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://api.example.com/x", [{"tag_name": "1.0.0"}])
        result = client.request_json("GET", "https://api.example.com/x")
    """

    responses: dict[tuple[str, str], object] = field(default_factory=dict)
    downloads: dict[str, bytes | HttpError] = field(default_factory=dict)
    requests: list[HttpRequest] = field(default_factory=_empty_requests)

    def set_response(self, method: str, url: str, response: object) -> None:
        """Register a JSON-able response or an ``HttpError`` for a request."""
        self.responses[(method, url)] = response

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self.downloads[url] = response

    def _answer(self, method: str, url: str) -> Result[object, HttpError]:
        key = (method, url)
        if key not in self.responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self.responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object | None = None,
    ) -> Result[object, HttpError]:
        self.requests.append(HttpRequest(method, url, dict(headers or {}), payload=payload))
        return self._answer(method, url)

    def upload(
        self,
        url: str,
        data: bytes,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        self.requests.append(HttpRequest("POST", url, dict(headers or {}), data=data))
        return self._answer("POST", url)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.requests.append(HttpRequest("GET", url, {}))
        if url not in self.downloads:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self.downloads[url]
        if isinstance(response, HttpError):
            return Err(response)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
