"""Implementation of the 'vnext' command.

Computes the next version (or its changelog) and prints it to stdout.
Nothing in the repository is modified.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.markup import escape

from vnext.config import apply_overrides, load_config
from vnext.core.changelog import FALLBACK_CHANGELOG, render_changelog
from vnext.core.history import calculate_release, enrich_with_authors
from vnext.core.parsers import create_parser
from vnext.core.version import INITIAL_VERSION
from vnext.exceptions import ConfigError, GitError, GitHubError, NotARepositoryError
from vnext.github import GitHubClient
from vnext.logging import get_logger
from vnext.vcs import GitRepository, parse_remote_url

if TYPE_CHECKING:
    from rich.console import Console

    from vnext.config import VNextConfig
    from vnext.core.history import ChangesetSummary
    from vnext.vcs import RepoInfo

logger = get_logger(__name__)


def run_vnext(
    path: str | None,
    changelog: bool,
    current: bool,
    console: Console,
    err_console: Console,
    **overrides: Any,
) -> None:
    """Run the vnext command.

    Args:
        path: Optional path inside the repository (defaults to cwd)
        changelog: Print release notes instead of the bare version
        current: Print the version of the last release instead
        console: Console for standard output
        err_console: Console for error output
        **overrides: Configuration overrides from the command line,
            keyed ``<section>__<field>``
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = apply_overrides(load_config(project_path), **overrides)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    # Open the repository; absence is not an error
    try:
        repo = GitRepository(project_path)
    except NotARepositoryError as e:
        logger.debug("not a git repository", path=str(project_path), error=str(e))
        _emit_fallback(console, changelog=changelog and not current)
        return

    parser = create_parser(config.commits.strategy())
    try:
        result = calculate_release(repo, parser, config.commits.policy())
    except GitError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if result is None:
        _emit_fallback(console, changelog=changelog and not current)
        return

    if current:
        _emit(console, str(result.current_version))
        return

    if not changelog:
        _emit(console, str(result.next_version))
        return

    repo_info = parse_remote_url(repo.remote_url())
    summary = _with_authors(result.summary, repo_info, config)
    _emit(
        console,
        render_changelog(
            summary,
            result.next_version,
            result.current_version,
            repo_info,
            header_scaling=config.changelog.header_scaling,
        ),
    )


def _with_authors(
    summary: ChangesetSummary,
    repo_info: RepoInfo,
    config: VNextConfig,
) -> ChangesetSummary:
    """Attach GitHub usernames when the repository is hosted on GitHub."""
    if summary.is_empty or not config.github.enabled or not repo_info.is_github:
        return summary

    try:
        with GitHubClient.from_config(config.github) as client:
            authors = client.fetch_commit_authors(
                repo_info.owner,
                repo_info.name,
                [commit.sha for commit in summary.commits],
            )
    except GitHubError as e:
        logger.warning("could not fetch commit authors", error=str(e))
        return summary

    return enrich_with_authors(summary, authors)


def _emit_fallback(console: Console, *, changelog: bool) -> None:
    _emit(console, FALLBACK_CHANGELOG if changelog else str(INITIAL_VERSION))


def _emit(console: Console, text: str) -> None:
    # Commit text is user content: no markup, emoji codes or wrapping.
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
