"""Read-only git access.

:class:`RepositoryReader` is the narrow interface the version engine
needs: tags, head, merge base, commit messages, parents and revision
ranges. Commits are addressed by hex SHA strings. :class:`GitRepository`
implements it with `GitPython <https://gitpython.readthedocs.io/>`_;
tests use in-memory fakes.

Nothing here writes to the repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import git

from vnext.exceptions import GitError, NotARepositoryError
from vnext.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class RepositoryReader(Protocol):
    """Read operations the version engine performs on a repository."""

    def list_tags(self) -> list[str]:
        """Names of all tags."""
        ...

    def tag_commit(self, tag: str) -> str | None:
        """SHA of the commit a tag points at, or None if it is not a commit."""
        ...

    def head(self) -> str | None:
        """SHA of HEAD, or None when the branch has no commits yet."""
        ...

    def merge_base(self, a: str, b: str) -> str | None:
        """Best common ancestor of two commits, or None if unrelated."""
        ...

    def message(self, sha: str) -> str:
        """Full commit message."""
        ...

    def parents(self, sha: str) -> list[str]:
        """Parent SHAs, first parent first."""
        ...

    def rev_list(self, head: str, hide: str | None = None) -> list[str]:
        """SHAs reachable from ``head`` over all parents, minus the ancestry of ``hide``."""
        ...

    def remote_url(self, name: str = "origin") -> str | None:
        """URL of a remote, or None if it does not exist."""
        ...


class GitRepository:
    """GitPython-backed :class:`RepositoryReader`.

    Args:
        path: Any directory inside the working copy

    Raises:
        NotARepositoryError: If ``path`` is not inside a git repository
    """

    def __init__(self, path: Path | str = ".") -> None:
        self.path = Path(path)
        try:
            self._repo = git.Repo(self.path, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise NotARepositoryError(f"Not a git repository: {self.path}") from e

    @property
    def root(self) -> Path:
        """Top-level directory of the working copy."""
        return Path(self._repo.working_tree_dir or self._repo.git_dir)

    def list_tags(self) -> list[str]:
        return [tag.name for tag in self._repo.tags]

    def tag_commit(self, tag: str) -> str | None:
        try:
            return self._repo.tags[tag].commit.hexsha
        except (IndexError, ValueError) as e:
            # Tags on trees or blobs cannot be peeled to a commit.
            logger.debug("tag does not point at a commit", tag=tag, error=str(e))
            return None

    def head(self) -> str | None:
        if not self._repo.head.is_valid():
            return None
        return self._repo.head.commit.hexsha

    def merge_base(self, a: str, b: str) -> str | None:
        try:
            bases = self._repo.merge_base(a, b)
        except git.GitCommandError as e:
            raise GitError(f"git merge-base {a} {b} failed: {e.stderr.strip()}") from e
        return bases[0].hexsha if bases else None

    def message(self, sha: str) -> str:
        message = self._repo.commit(sha).message
        if isinstance(message, bytes):
            return message.decode("utf-8", errors="replace")
        return message

    def parents(self, sha: str) -> list[str]:
        return [parent.hexsha for parent in self._repo.commit(sha).parents]

    def rev_list(self, head: str, hide: str | None = None) -> list[str]:
        # One `git rev-list`; git prunes the hidden side itself.
        rev = head if hide is None else f"{hide}..{head}"
        try:
            return [commit.hexsha for commit in self._repo.iter_commits(rev)]
        except git.GitCommandError as e:
            raise GitError(f"git rev-list {rev} failed: {e.stderr.strip()}") from e

    def remote_url(self, name: str = "origin") -> str | None:
        try:
            remote = self._repo.remote(name)
        except ValueError:
            return None
        return next(iter(remote.urls), None)
