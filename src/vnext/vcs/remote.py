"""Repository identity from a remote URL.

Recognises the three common hosted forges so the changelog can link a
comparison between releases.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse


class HostingProvider(Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"


_PROVIDER_HOSTS: dict[str, HostingProvider] = {
    "github.com": HostingProvider.GITHUB,
    "gitlab.com": HostingProvider.GITLAB,
    "bitbucket.org": HostingProvider.BITBUCKET,
}

# git@github.com:owner/repo.git
_SCP_LIKE_URL = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$")


@dataclass(frozen=True)
class RepoInfo:
    """Where a repository is hosted.

    An instance with empty fields means "unknown host"; the changelog
    then simply omits the comparison link.
    """

    host: str = ""
    owner: str = ""
    name: str = ""
    provider: HostingProvider | None = None

    @property
    def is_github(self) -> bool:
        return self.provider is HostingProvider.GITHUB

    def compare_url(self, base: str, head: str) -> str | None:
        """Web URL comparing two refs, or None for unknown hosts."""
        root = f"https://{self.host}/{self.owner}/{self.name}"
        if self.provider is HostingProvider.GITHUB:
            return f"{root}/compare/{base}...{head}"
        if self.provider is HostingProvider.GITLAB:
            return f"{root}/-/compare/{base}...{head}"
        if self.provider is HostingProvider.BITBUCKET:
            return f"{root}/branches/compare/{head}%0D{base}"
        return None


def parse_remote_url(url: str | None) -> RepoInfo:
    """Extract host, owner and name from a git remote URL.

    Handles ``https://host/owner/repo(.git)``, ``ssh://git@host/owner/repo``
    and the scp-like ``git@host:owner/repo.git`` form. Anything else
    yields an empty :class:`RepoInfo`.

    Args:
        url: Remote URL, typically of ``origin``

    Returns:
        Repository identity
    """
    if not url:
        return RepoInfo()
    url = url.strip()

    if "://" in url:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path
    else:
        match = _SCP_LIKE_URL.match(url)
        if not match:
            return RepoInfo()
        host = match.group("host")
        path = match.group("path")

    parts = [part for part in path.strip("/").removesuffix(".git").split("/") if part]
    if not host or len(parts) < 2:
        return RepoInfo()

    host = host.lower()
    return RepoInfo(
        host=host,
        owner=parts[0],
        name=parts[1],
        provider=_PROVIDER_HOSTS.get(host),
    )
