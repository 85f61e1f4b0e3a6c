"""GitHub API client for commit author lookup.

Used only to annotate changelog entries with ``(by @username)``. Any
failure here degrades the changelog, never the version calculation.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import httpx

from vnext.core.commits import CommitAuthor
from vnext.exceptions import GitHubError
from vnext.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from vnext.config.models import GitHubConfig

logger = get_logger(__name__)

USER_AGENT = "vnext-cli"


class GitHubClient:
    """Minimal synchronous GitHub REST client.

    Args:
        api_url: API root, e.g. ``https://api.github.com`` or a GitHub
            Enterprise ``https://github.example.com/api/v3``
        token: Optional token sent as a bearer credential
        timeout: Per-request timeout in seconds
        transport: Custom httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: GitHubConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> GitHubClient:
        token = os.environ.get(config.token_env) or None
        if token:
            logger.debug("using GitHub token", env=config.token_env)
        return cls(config.api_url, token=token, timeout=config.timeout, transport=transport)

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_commit_author(self, owner: str, repo: str, sha: str) -> CommitAuthor | None:
        """Look up who authored one commit.

        Returns:
            The author, or None if GitHub does not know the commit (for
            example because it has not been pushed yet)

        Raises:
            GitHubError: If the API cannot be reached
        """
        try:
            response = self._client.get(f"/repos/{owner}/{repo}/commits/{sha}")
        except httpx.HTTPError as e:
            raise GitHubError(f"Request for commit {sha} failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "commit not available from GitHub",
                sha=sha,
                status=response.status_code,
            )
            return None

        try:
            return parse_commit_author(response.json())
        except (ValueError, KeyError, TypeError) as e:
            logger.debug("unexpected commit payload", sha=sha, error=str(e))
            return None

    def fetch_commit_authors(
        self,
        owner: str,
        repo: str,
        shas: Iterable[str],
    ) -> dict[str, CommitAuthor | None]:
        """Look up authors for many commits.

        A commit GitHub cannot resolve maps to None; it does not fail
        the batch.

        Raises:
            GitHubError: If the API cannot be reached at all
        """
        authors = {sha: self.get_commit_author(owner, repo, sha) for sha in shas}
        found = sum(1 for author in authors.values() if author is not None)
        logger.debug("fetched commit authors", requested=len(authors), found=found)
        return authors


def parse_commit_author(payload: dict[str, Any]) -> CommitAuthor:
    """Build a :class:`CommitAuthor` from a GitHub commit response.

    The git author name/email always exist; ``author.login`` is missing
    when the email is not linked to a GitHub account.
    """
    git_author = payload["commit"]["author"]
    account = payload.get("author") or {}
    return CommitAuthor(
        name=git_author["name"],
        email=git_author.get("email", ""),
        username=account.get("login"),
    )
