"""Forge (GitHub-style hosting) access."""

from .github import ForgeClient, GitHubForge, resolve_token
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "ForgeClient",
    "GitHubForge",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "resolve_token",
]
