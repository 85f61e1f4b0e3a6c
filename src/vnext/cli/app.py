"""Click application for vnext.

Option parsing lives here; the work happens in
:mod:`vnext.cli.commands.vnext`. Every commit classification option can
also be set through a ``VNEXT_*`` environment variable, which is handy
in CI where the command line is fixed by a shared workflow.
"""

from __future__ import annotations

import click
from rich.console import Console

from vnext import __version__
from vnext.cli.commands import run_vnext
from vnext.logging import configure_logging


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--changelog",
    is_flag=True,
    help="Print Markdown release notes instead of the bare version.",
)
@click.option(
    "--no-header-scaling",
    "no_header_scaling",
    is_flag=True,
    envvar="VNEXT_NO_HEADER_SCALING",
    help="Keep Markdown headings in commit bodies at their original level.",
)
@click.option(
    "--current",
    is_flag=True,
    help="Print the version of the last release instead of the next one.",
)
@click.option(
    "--path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory inside the repository (defaults to the current directory).",
)
@click.option(
    "--parser",
    type=click.Choice(["conventional", "custom"]),
    envvar="VNEXT_PARSER",
    default=None,
    help="Commit message parser. 'custom' uses the --*-pattern options.",
)
@click.option("--type-pattern", envvar="VNEXT_TYPE_PATTERN", help="Regex capturing the type.")
@click.option("--scope-pattern", envvar="VNEXT_SCOPE_PATTERN", help="Regex capturing the scope.")
@click.option("--title-pattern", envvar="VNEXT_TITLE_PATTERN", help="Regex capturing the title.")
@click.option("--body-pattern", envvar="VNEXT_BODY_PATTERN", help="Regex capturing the body.")
@click.option(
    "--breaking-pattern",
    envvar="VNEXT_BREAKING_PATTERN",
    help="Regex matching breaking changes.",
)
@click.option(
    "--major-types",
    envvar="VNEXT_MAJOR_TYPES",
    help="Comma-separated commit types that bump the major version.",
)
@click.option(
    "--minor-types",
    envvar="VNEXT_MINOR_TYPES",
    help="Comma-separated commit types that bump the minor version.",
)
@click.option(
    "--noop-types",
    envvar="VNEXT_NOOP_TYPES",
    help="Comma-separated commit types that do not bump the version.",
)
@click.option(
    "--no-github",
    "no_github",
    is_flag=True,
    envvar="VNEXT_NO_GITHUB",
    help="Do not look up commit authors on GitHub.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr.")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors.")
@click.option("--json-log", is_flag=True, help="Log as JSON lines.")
@click.version_option(__version__, prog_name="vnext")
def main(
    changelog: bool,
    no_header_scaling: bool,
    current: bool,
    path: str | None,
    parser: str | None,
    type_pattern: str | None,
    scope_pattern: str | None,
    title_pattern: str | None,
    body_pattern: str | None,
    breaking_pattern: str | None,
    major_types: str | None,
    minor_types: str | None,
    noop_types: str | None,
    no_github: bool,
    verbose: bool,
    quiet: bool,
    json_log: bool,
) -> None:
    """Compute the next semantic version from commit history.

    Prints the next version to stdout, e.g. ``VERSION=$(vnext)``.
    """
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)

    console = Console()
    err_console = Console(stderr=True)

    run_vnext(
        path,
        changelog,
        current,
        console,
        err_console,
        commits__parser=parser,
        commits__type_pattern=type_pattern,
        commits__scope_pattern=scope_pattern,
        commits__title_pattern=title_pattern,
        commits__body_pattern=body_pattern,
        commits__breaking_pattern=breaking_pattern,
        commits__types_major=major_types,
        commits__types_minor=minor_types,
        commits__types_noop=noop_types,
        changelog__header_scaling=False if no_header_scaling else None,
        github__enabled=False if no_github else None,
    )
