"""Commit history traversal and release calculation.

This module answers "what changed since the last release?":

1. :func:`resolve_release_boundary` finds the highest version tag and
   the commit where traversal stops.
2. :func:`walk_history` visits every commit between that boundary and
   HEAD, parses and classifies each one, and aggregates the result.
3. :func:`calculate_release` combines both with version arithmetic.

All functions read the repository through
:class:`~vnext.vcs.git.RepositoryReader` and never modify it.
"""

from __future__ import annotations

import heapq
from collections import Counter, deque
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from vnext.core.commits import ParsedCommit, TypePolicy, classify_commit
from vnext.core.version import INITIAL_VERSION, BumpType, Version, parse_tag
from vnext.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from vnext.core.commits import CommitAuthor
    from vnext.core.parsers import CommitParser
    from vnext.vcs.git import RepositoryReader

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChangesetSummary:
    """Aggregate of one history walk.

    Attributes:
        major: Commits classified MAJOR
        minor: Commits classified MINOR
        patch: Commits classified PATCH
        noop: Commits classified NONE
        commits: Parsed commits in visiting order, newest first
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    noop: int = 0
    commits: tuple[ParsedCommit, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.commits

    def __len__(self) -> int:
        return len(self.commits)

    @classmethod
    def from_classified(
        cls, classified: Iterable[tuple[ParsedCommit, BumpType]]
    ) -> ChangesetSummary:
        """Build a summary from ``(commit, bump)`` pairs in visiting order."""
        commits: list[ParsedCommit] = []
        counts: Counter[BumpType] = Counter()
        for commit, bump in classified:
            commits.append(commit)
            counts[bump] += 1
        return cls(
            major=counts[BumpType.MAJOR],
            minor=counts[BumpType.MINOR],
            patch=counts[BumpType.PATCH],
            noop=counts[BumpType.NONE],
            commits=tuple(commits),
        )

    def oldest_first(self) -> tuple[ParsedCommit, ...]:
        return tuple(reversed(self.commits))


@dataclass(frozen=True)
class ReleaseBoundary:
    """The last release and where history traversal stops.

    Attributes:
        version: Version of the last release, 0.0.0 if never released
        base_commit: Merge base of the release tag and HEAD, or the root
            commit when there is no tag
        tag: Name of the release tag, None if there is none
    """

    version: Version
    base_commit: str
    tag: str | None = None

    @property
    def has_release(self) -> bool:
        return self.tag is not None


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of :func:`calculate_release`."""

    current_version: Version
    next_version: Version
    bump: BumpType
    summary: ChangesetSummary = field(default_factory=ChangesetSummary)
    boundary: ReleaseBoundary | None = None


def find_latest_release_tag(repo: RepositoryReader) -> tuple[str, Version, str] | None:
    """Find the tag carrying the highest version.

    Highest means by version precedence, not by tag date. Tags that are
    not versions, that do not point at a commit, or whose version is not
    above 0.0.0 are skipped.

    Returns:
        ``(tag, version, commit_sha)`` or None if no tag qualifies
    """
    latest: tuple[str, Version, str] | None = None

    for tag in repo.list_tags():
        version = parse_tag(tag)
        if version is None or version <= INITIAL_VERSION:
            logger.debug("ignoring non-release tag", tag=tag)
            continue
        if latest is not None and version <= latest[1]:
            continue
        commit = repo.tag_commit(tag)
        if commit is None:
            continue
        latest = (tag, version, commit)

    return latest


def find_root_commit(repo: RepositoryReader, head: str) -> str:
    """Follow first parents from ``head`` until a parentless commit."""
    current = head
    seen = {current}
    while parents := repo.parents(current):
        if parents[0] in seen:
            logger.warning("cycle in first-parent chain", commit=parents[0])
            break
        current = parents[0]
        seen.add(current)
    return current


def resolve_release_boundary(repo: RepositoryReader, head: str) -> ReleaseBoundary:
    """Determine the last release and the commit to stop traversal at.

    With a release tag the base commit is the merge base of the tag and
    HEAD, which keeps divergent branches from missing or double
    counting commits. Without one, the root commit is the base and the
    whole history is in scope.

    Args:
        repo: Repository to read
        head: SHA of the commit being released

    Returns:
        The release boundary
    """
    latest = find_latest_release_tag(repo)

    if latest is None:
        root = find_root_commit(repo, head)
        logger.debug("no release tags found, starting from 0.0.0", root=root)
        return ReleaseBoundary(version=INITIAL_VERSION, base_commit=root)

    tag, version, tag_commit = latest
    base = repo.merge_base(head, tag_commit)
    if base is None:
        logger.warning("release tag shares no history with HEAD", tag=tag)
        base = tag_commit

    logger.debug("last release", tag=tag, version=str(version), base_commit=base)
    return ReleaseBoundary(version=version, base_commit=base, tag=tag)


def commits_between(
    repo: RepositoryReader,
    head: str,
    base: str,
    *,
    include_base: bool = False,
) -> list[str]:
    """List commits reachable from ``head`` but not from ``base``.

    Exclusion is by ancestry over all parents, so commits brought in
    by merges are included exactly once. The result is newest first:
    every commit comes before its parents, ties in discovery order.

    The range itself comes from :meth:`RepositoryReader.rev_list`, so
    the history behind ``base`` is never walked commit by commit here.
    Only the commits in range are ordered.

    Args:
        repo: Repository to read
        head: Newest commit
        base: Commit whose ancestry is excluded
        include_base: Put the whole history of ``head`` in scope

    Returns:
        Commit SHAs, newest first
    """
    in_range = set(repo.rev_list(head, None if include_base else base))
    if head not in in_range:
        return []

    # Discover the in-range subgraph.
    order: list[str] = [head]
    parents_of: dict[str, list[str]] = {}
    seen = {head}
    queue = deque([head])
    while queue:
        sha = queue.popleft()
        visible = [p for p in repo.parents(sha) if p in in_range]
        parents_of[sha] = visible
        for parent in visible:
            if parent not in seen:
                seen.add(parent)
                order.append(parent)
                queue.append(parent)

    # Emit children before parents.
    pending_children = dict.fromkeys(order, 0)
    for parents in parents_of.values():
        for parent in parents:
            pending_children[parent] += 1

    rank = {sha: i for i, sha in enumerate(order)}
    ready = [(0, head)] if pending_children[head] == 0 else []
    emitted: list[str] = []
    done: set[str] = set()
    while ready:
        _, sha = heapq.heappop(ready)
        emitted.append(sha)
        done.add(sha)
        for parent in parents_of[sha]:
            pending_children[parent] -= 1
            if pending_children[parent] == 0:
                heapq.heappush(ready, (rank[parent], parent))

    if len(emitted) < len(order):
        # Only a malformed, cyclic graph gets here.
        logger.warning("cycle in commit graph", unvisited=len(order) - len(emitted))
        emitted.extend(sha for sha in order if sha not in done)

    return emitted


def walk_history(
    repo: RepositoryReader,
    head: str,
    base_commit: str,
    parser: CommitParser,
    policy: TypePolicy,
    *,
    include_base: bool = False,
) -> tuple[BumpType, ChangesetSummary]:
    """Parse and classify every commit since the release boundary.

    Args:
        repo: Repository to read
        head: Newest commit to include
        base_commit: Commit whose ancestry is excluded
        parser: Commit message parser
        policy: Type classification policy
        include_base: Analyse the full history, base included. Used when
            there is no release yet, so a single-commit repository still
            has that commit analysed.

    Returns:
        The highest bump seen and the per-commit summary
    """
    classified: list[tuple[ParsedCommit, BumpType]] = []
    overall = BumpType.NONE

    for sha in commits_between(repo, head, base_commit, include_base=include_base):
        commit = parser.parse(repo.message(sha), sha=sha)
        bump = classify_commit(commit, policy)
        logger.debug("classified commit", sha=sha, subject=commit.first_line, bump=str(bump))
        classified.append((commit, bump))
        overall = max(overall, bump)

    return overall, ChangesetSummary.from_classified(classified)


def calculate_release(
    repo: RepositoryReader,
    parser: CommitParser,
    policy: TypePolicy,
) -> ReleaseResult | None:
    """Compute the next version for the repository's HEAD.

    Args:
        repo: Repository to read
        parser: Commit message parser
        policy: Type classification policy

    Returns:
        The release calculation, or None when HEAD cannot be resolved
        (no commits yet). Callers print the 0.0.0 fallback in that case.
    """
    head = repo.head()
    if head is None:
        logger.debug("HEAD does not resolve to a commit")
        return None

    boundary = resolve_release_boundary(repo, head)
    bump, summary = walk_history(
        repo,
        head,
        boundary.base_commit,
        parser,
        policy,
        include_base=not boundary.has_release,
    )
    next_version = boundary.version.bump(bump)

    logger.debug(
        "version calculated",
        current=str(boundary.version),
        next=str(next_version),
        bump=str(bump),
        major=summary.major,
        minor=summary.minor,
        patch=summary.patch,
        noop=summary.noop,
    )
    return ReleaseResult(
        current_version=boundary.version,
        next_version=next_version,
        bump=bump,
        summary=summary,
        boundary=boundary,
    )


def enrich_with_authors(
    summary: ChangesetSummary,
    authors: Mapping[str, CommitAuthor | None],
) -> ChangesetSummary:
    """Attach authors to the commits they belong to.

    SHAs missing from ``authors``, or mapped to None, keep their commit
    untouched. Counters are not affected.
    """
    commits: Iterable[ParsedCommit] = (
        commit.with_author(authors[commit.sha]) if authors.get(commit.sha) else commit
        for commit in summary.commits
    )
    return replace(summary, commits=tuple(commits))
