"""Git operations used by a release.

Usage:
    from semship.git import GitClient

    git = GitClient(Path("/path/to/repo"))
"""

from .remote import parse_remote_slug
from .repository import GitClient, GitError, VcsClient, find_repo_root

__all__ = [
    "GitClient",
    "GitError",
    "VcsClient",
    "find_repo_root",
    "parse_remote_slug",
]
