"""Core business logic for vnext.

This module contains the fundamental building blocks:
- Semantic version parsing and bumping
- Commit message parsing (conventional or custom patterns)
- Commit classification into bump levels
- History traversal since the last release tag
- Changelog rendering
"""

from __future__ import annotations

from vnext.core.changelog import FALLBACK_CHANGELOG, render_changelog
from vnext.core.commits import (
    CommitAuthor,
    ParsedCommit,
    TypePolicy,
    calculate_bump,
    classify_commit,
)
from vnext.core.history import (
    ChangesetSummary,
    ReleaseBoundary,
    ReleaseResult,
    calculate_release,
    enrich_with_authors,
    resolve_release_boundary,
    walk_history,
)
from vnext.core.parsers import (
    CommitParser,
    CommitPatterns,
    ConventionalCommitParser,
    ParserStrategy,
    PatternSetParser,
    create_parser,
)
from vnext.core.version import BumpType, Version, parse_tag, parse_version

__all__ = [
    # Changelog
    "FALLBACK_CHANGELOG",
    # Version
    "BumpType",
    # History
    "ChangesetSummary",
    # Commits
    "CommitAuthor",
    # Parsers
    "CommitParser",
    "CommitPatterns",
    "ConventionalCommitParser",
    "ParsedCommit",
    "ParserStrategy",
    "PatternSetParser",
    "ReleaseBoundary",
    "ReleaseResult",
    "TypePolicy",
    "Version",
    "calculate_bump",
    "calculate_release",
    "classify_commit",
    "create_parser",
    "enrich_with_authors",
    "parse_tag",
    "parse_version",
    "render_changelog",
    "resolve_release_boundary",
    "walk_history",
]
