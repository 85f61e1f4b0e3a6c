"""Version control access for vnext."""

from __future__ import annotations

from vnext.vcs.git import GitRepository, RepositoryReader
from vnext.vcs.remote import HostingProvider, RepoInfo, parse_remote_url

__all__ = [
    "GitRepository",
    "HostingProvider",
    "RepoInfo",
    "RepositoryReader",
    "parse_remote_url",
]
