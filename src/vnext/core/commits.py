"""Parsed commit records and bump classification.

A :class:`ParsedCommit` is produced by one of the parsers in
:mod:`vnext.core.parsers`. :func:`classify_commit` maps it to a
:class:`~vnext.core.version.BumpType` using a :class:`TypePolicy`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from vnext.core.version import BumpType, max_bump

if TYPE_CHECKING:
    from collections.abc import Iterable

BREAKING_CHANGE_TOKEN = "BREAKING CHANGE:"

DEFAULT_MAJOR_TYPES: frozenset[str] = frozenset({"major"})
DEFAULT_MINOR_TYPES: frozenset[str] = frozenset({"feat", "minor"})
DEFAULT_NOOP_TYPES: frozenset[str] = frozenset({"chore", "noop"})


@dataclass(frozen=True)
class CommitAuthor:
    """Identity of a commit's author as reported by the hosting provider."""

    name: str
    email: str = ""
    username: str | None = None

    @property
    def display(self) -> str:
        """``@username`` when known, otherwise the plain name."""
        return f"@{self.username}" if self.username else self.name


@dataclass(frozen=True)
class ParsedCommit:
    """A commit message broken into its conventional parts.

    Attributes:
        sha: Commit identifier
        message: Full original message, verbatim
        commit_type: Type token (``feat``, ``fix``...), empty if unparsed
        title: Summary line; the raw first line when unparsed
        scope: Optional scope token
        body: Text after the subject, leading blank lines removed
        breaking_flag: ``!`` marker after the type/scope
        breaking_body: Body starts with ``BREAKING CHANGE:``
        author: Attached later by author enrichment
    """

    sha: str
    message: str
    commit_type: str = ""
    title: str = ""
    scope: str | None = None
    body: str | None = None
    breaking_flag: bool = False
    breaking_body: bool = False
    author: CommitAuthor | None = None

    @property
    def is_conventional(self) -> bool:
        return bool(self.commit_type)

    @property
    def is_breaking(self) -> bool:
        return self.breaking_flag or self.breaking_body

    @property
    def first_line(self) -> str:
        lines = self.message.splitlines()
        return lines[0] if lines else ""

    @property
    def header(self) -> str:
        """Subject line rebuilt from the parsed parts.

        Unparsed commits return their first line unchanged.
        """
        if not self.is_conventional:
            return self.title or self.first_line
        scope = f"({self.scope})" if self.scope else ""
        bang = "!" if self.breaking_flag else ""
        return f"{self.commit_type}{scope}{bang}: {self.title}"

    def with_author(self, author: CommitAuthor | None) -> ParsedCommit:
        """Return a copy with ``author`` attached."""
        return replace(self, author=author)


@dataclass(frozen=True)
class TypePolicy:
    """Mapping of commit types to bump severities.

    Types listed nowhere are treated as PATCH changes. Breaking markers
    always win over the type lists.
    """

    major_types: frozenset[str] = field(default=DEFAULT_MAJOR_TYPES)
    minor_types: frozenset[str] = field(default=DEFAULT_MINOR_TYPES)
    noop_types: frozenset[str] = field(default=DEFAULT_NOOP_TYPES)

    @classmethod
    def from_lists(
        cls,
        major: Iterable[str],
        minor: Iterable[str],
        noop: Iterable[str],
    ) -> TypePolicy:
        """Build a policy from plain lists, dropping blank entries."""

        def clean(types: Iterable[str]) -> frozenset[str]:
            return frozenset(t.strip() for t in types if t.strip())

        return cls(clean(major), clean(minor), clean(noop))


def classify_commit(commit: ParsedCommit, policy: TypePolicy) -> BumpType:
    """Determine the bump a single commit calls for.

    First match wins:

    1. ``!`` flag or ``BREAKING CHANGE:`` body -> MAJOR
    2. type in ``policy.major_types`` -> MAJOR
    3. type in ``policy.minor_types`` -> MINOR
    4. type in ``policy.noop_types`` -> NONE
    5. anything else, including unparsed messages -> PATCH

    Args:
        commit: Parsed commit
        policy: Type classification policy

    Returns:
        Bump severity for this commit
    """
    if commit.is_breaking:
        return BumpType.MAJOR
    if commit.commit_type in policy.major_types:
        return BumpType.MAJOR
    if commit.commit_type in policy.minor_types:
        return BumpType.MINOR
    if commit.commit_type in policy.noop_types:
        return BumpType.NONE
    return BumpType.PATCH


def calculate_bump(commits: Iterable[ParsedCommit], policy: TypePolicy) -> BumpType:
    """Return the highest bump called for by any of ``commits``."""
    return max_bump(*(classify_commit(commit, policy) for commit in commits))
