"""Changelog rendering.

Turns a :class:`~vnext.core.history.ChangesetSummary` into Markdown
release notes::

    ### What's changed in v1.0.0

    * feat: add new feature (by @octocat)

      BREAKING CHANGE: This removes the old API

    * fix: handle empty config

Rendering is pure: the same input always gives the same text, which
keeps release notes reproducible and easy to test.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vnext.core.commits import ParsedCommit
    from vnext.core.history import ChangesetSummary
    from vnext.core.version import Version
    from vnext.vcs.remote import RepoInfo

FALLBACK_CHANGELOG = "## What's changed in 0.0.0\n\n* No changes\n\n---"

NO_CHANGES_ENTRY = "* No changes"

BODY_INDENT = "  "

# Headings in commit bodies are pushed below the release heading.
HEADER_SCALE = 3
_BODY_HEADING = re.compile(r"^(#{1,3})(?=\s)")


def scale_heading(line: str) -> str:
    """Demote a level 1-3 Markdown heading by three levels.

    ``# Title`` becomes ``#### Title``; ``####`` and deeper, and lines
    that are not headings, are returned unchanged.
    """
    return _BODY_HEADING.sub(lambda m: "#" * HEADER_SCALE + m.group(1), line, count=1)


def format_commit_entry(commit: ParsedCommit, *, header_scaling: bool = True) -> str:
    """Format one commit as a changelog bullet with its indented body.

    Args:
        commit: Parsed commit
        header_scaling: Demote headings found in the body

    Returns:
        Bullet text without a trailing newline
    """
    bullet = f"* {commit.header}"
    if commit.author is not None:
        bullet += f" (by {commit.author.display})"

    if not commit.body:
        return bullet

    lines = [bullet, ""]
    for line in commit.body.split("\n"):
        if not line:
            lines.append("")
            continue
        if header_scaling:
            line = scale_heading(line)
        lines.append(f"{BODY_INDENT}{line}")
    return "\n".join(lines)


def format_compare_link(
    repo_info: RepoInfo,
    current_version: Version,
    next_version: Version,
) -> str | None:
    """Build the "See full diff" line, or None when there is nothing to compare.

    A link needs a recognised hosting provider and a previous release;
    an untagged project (current version 0.0.0) gets no link.
    """
    if repo_info.provider is None or current_version.is_initial:
        return None

    base, head = f"v{current_version}", f"v{next_version}"
    url = repo_info.compare_url(base, head)
    if url is None:
        return None
    return f"See full diff: [{base}...{head}]({url})"


def render_changelog(
    summary: ChangesetSummary,
    next_version: Version,
    current_version: Version,
    repo_info: RepoInfo,
    *,
    header_scaling: bool = True,
) -> str:
    """Render release notes for the commits since the last release.

    Commits are listed oldest first, the reverse of the order the
    history walk produced them in.

    Args:
        summary: Result of the history walk
        next_version: Version being released
        current_version: Version of the previous release
        repo_info: Repository identity, used for the comparison link
        header_scaling: Demote Markdown headings in commit bodies

    Returns:
        Changelog text without a trailing newline
    """
    if summary.is_empty:
        entries = [NO_CHANGES_ENTRY]
    else:
        entries = [
            format_commit_entry(commit, header_scaling=header_scaling)
            for commit in summary.oldest_first()
        ]

    sections = [f"### What's changed in v{next_version}", *entries]

    link = format_compare_link(repo_info, current_version, next_version)
    if link:
        sections.append(link)

    return "\n\n".join(sections)
