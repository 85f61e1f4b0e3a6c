"""Shared pytest fixtures for vnext tests."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING

import git
import pytest

from vnext.core.commits import TypePolicy
from vnext.core.parsers import ConventionalCommitParser

if TYPE_CHECKING:
    from collections.abc import Callable


class FakeRepository:
    """In-memory commit graph implementing ``RepositoryReader``.

    Commits get short readable SHAs (``c1``, ``c2``...). ``commit()``
    without explicit parents extends the current head, like ``git
    commit`` does.
    """

    def __init__(self) -> None:
        self.commits: dict[str, tuple[str, list[str]]] = {}
        self.tags: dict[str, str | None] = {}
        self.head_sha: str | None = None
        self.remote: str | None = None
        self.parent_lookups = 0

    def commit(self, message: str, parents: list[str] | None = None) -> str:
        sha = f"c{len(self.commits) + 1}"
        if parents is None:
            parents = [self.head_sha] if self.head_sha else []
        self.commits[sha] = (message, parents)
        self.head_sha = sha
        return sha

    def tag(self, name: str, sha: str | None = None) -> None:
        self.tags[name] = sha or self.head_sha

    # RepositoryReader

    def list_tags(self) -> list[str]:
        return list(self.tags)

    def tag_commit(self, tag: str) -> str | None:
        return self.tags.get(tag)

    def head(self) -> str | None:
        return self.head_sha

    def merge_base(self, a: str, b: str) -> str | None:
        ancestors_a = self._ancestors(a)
        common = [sha for sha in self._bfs(b) if sha in ancestors_a]
        return common[0] if common else None

    def message(self, sha: str) -> str:
        return self.commits[sha][0]

    def parents(self, sha: str) -> list[str]:
        self.parent_lookups += 1
        return list(self.commits[sha][1])

    def rev_list(self, head: str, hide: str | None = None) -> list[str]:
        hidden = self._ancestors(hide) if hide is not None else set()
        return [sha for sha in self._bfs(head) if sha not in hidden]

    def remote_url(self, name: str = "origin") -> str | None:
        return self.remote if name == "origin" else None

    def _bfs(self, start: str) -> list[str]:
        # Reads the graph directly so parent_lookups counts callers only.
        order = [start]
        seen = {start}
        queue = deque([start])
        while queue:
            for parent in self.commits[queue.popleft()][1]:
                if parent not in seen:
                    seen.add(parent)
                    order.append(parent)
                    queue.append(parent)
        return order

    def _ancestors(self, start: str) -> set[str]:
        return set(self._bfs(start))


@pytest.fixture
def fake_repo() -> FakeRepository:
    """Create an empty in-memory repository."""
    return FakeRepository()


@pytest.fixture
def parser() -> ConventionalCommitParser:
    return ConventionalCommitParser()


@pytest.fixture
def policy() -> TypePolicy:
    return TypePolicy()


# =============================================================================
# Real git repositories
# =============================================================================


@pytest.fixture
def git_repo(tmp_path: Path) -> git.Repo:
    """Initialize an empty git repository in tmp_path."""
    repo = git.Repo.init(tmp_path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    return repo


@pytest.fixture
def make_commit(git_repo: git.Repo) -> Callable[[str], str]:
    """Return a helper that commits a new file with the given message."""
    counter = {"n": 0}

    def _commit(message: str) -> str:
        counter["n"] += 1
        path = f"file{counter['n']}.txt"
        (Path(git_repo.working_tree_dir) / path).write_text(f"{counter['n']}\n")
        git_repo.index.add([path])
        return git_repo.index.commit(message).hexsha

    return _commit
