r"""Commit message parsers.

Two interchangeable strategies turn a raw commit message into a
:class:`~vnext.core.commits.ParsedCommit`:

- :class:`ConventionalCommitParser` - the ``type(scope)!: title`` grammar
  from `Conventional Commits <https://www.conventionalcommits.org/>`_.
- :class:`PatternSetParser` - every field is pulled out by its own
  configurable regular expression, for teams with a house format.

Both satisfy the :class:`CommitParser` protocol and never raise on odd
input: a message that does not fit the grammar comes back with an empty
``commit_type`` and its first line as the title.

Which parser runs is decided once per run by a :class:`ParserStrategy`
handed to :func:`create_parser`::

    parser = create_parser(ParserStrategy.conventional())
    commit = parser.parse("feat(api)!: drop v1\n\nBREAKING CHANGE: gone", sha="abc123")
    assert commit.commit_type == "feat"
    assert commit.breaking_flag and commit.breaking_body
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Literal, Protocol, runtime_checkable

from vnext.core.commits import BREAKING_CHANGE_TOKEN, ParsedCommit
from vnext.logging import get_logger

logger = get_logger(__name__)

# Subject line: type(scope)!: title
CONVENTIONAL_HEADER_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<type>[\w-]+)"
    r"(?:\((?P<scope>[^)]+)\))?"
    r"(?P<breaking>!)?"
    r":\s*(?P<title>.*)$"
)

DEFAULT_TYPE_PATTERN = r"^([\w-]+)(?:\([^)]*\))?!?:"
DEFAULT_SCOPE_PATTERN = r"^[\w-]+\(([^)]*)\)!?:"
DEFAULT_TITLE_PATTERN = r"^[\w-]+(?:\([^)]*\))?!?:[ \t]*(.*)"
DEFAULT_BODY_PATTERN = r"^[^\n]*\n(?:[ \t]*\n)*([\s\S]*)"
DEFAULT_BREAKING_PATTERN = r"^[^\n]*\n(?:[ \t]*\n)*BREAKING CHANGE:|^[\w-]+(?:\([^)]*\))?!:"


def split_message(message: str) -> tuple[str, str | None]:
    """Split a message into its first line and its body.

    The body drops leading blank lines and trailing whitespace. It is
    ``None`` when nothing but whitespace follows the first line.
    """
    lines = message.splitlines()
    if not lines:
        return "", None
    return lines[0], normalize_body("\n".join(lines[1:]))


def normalize_body(text: str | None) -> str | None:
    """Drop leading blank lines and trailing whitespace from a body.

    Indentation of the first non-blank line is kept, so indented code
    blocks survive. Returns ``None`` for an empty result.
    """
    if not text:
        return None
    rest = text.splitlines()
    while rest and not rest[0].strip():
        rest.pop(0)
    return "\n".join(rest).rstrip() or None


def has_breaking_footer(body: str | None) -> bool:
    """True if the body's very first line opens with ``BREAKING CHANGE:``.

    Only the start of the first body line counts. The token later in the
    body, or after other text on the first line, is ignored.
    """
    return body is not None and body.startswith(BREAKING_CHANGE_TOKEN)


@runtime_checkable
class CommitParser(Protocol):
    """Protocol for commit message parsers."""

    name: str

    def parse(self, message: str, sha: str = "") -> ParsedCommit:
        """Parse a full commit message.

        Args:
            message: Raw commit message (subject, body, footers)
            sha: Commit identifier to carry on the record

        Returns:
            The parsed record; never raises for malformed messages
        """
        ...


class ConventionalCommitParser:
    """Parser for the ``type(scope)!: title`` commit grammar."""

    name = "conventional"

    def parse(self, message: str, sha: str = "") -> ParsedCommit:
        first_line, body = split_message(message)
        match = CONVENTIONAL_HEADER_PATTERN.match(first_line)

        if not match:
            logger.debug("unparsed commit message", sha=sha, subject=first_line)
            return ParsedCommit(sha=sha, message=message, title=first_line, body=body)

        return ParsedCommit(
            sha=sha,
            message=message,
            commit_type=match.group("type"),
            scope=match.group("scope"),
            title=match.group("title").strip(),
            body=body,
            breaking_flag=match.group("breaking") is not None,
            breaking_body=has_breaking_footer(body),
        )


@dataclass(frozen=True)
class CommitPatterns:
    """Regular expressions for :class:`PatternSetParser`.

    ``type``, ``scope``, ``title`` and ``body`` must have a capture
    group; group 1 is the extracted value. ``breaking`` only needs to
    match. Patterns are applied with :func:`re.search` to the whole
    message, so ``^`` anchors at the start of the message unless the
    pattern turns on multiline mode itself.
    """

    type: str = DEFAULT_TYPE_PATTERN
    scope: str = DEFAULT_SCOPE_PATTERN
    title: str = DEFAULT_TITLE_PATTERN
    body: str = DEFAULT_BODY_PATTERN
    breaking: str = DEFAULT_BREAKING_PATTERN


_CAPTURING_FIELDS = ("type", "scope", "title", "body")


@dataclass(frozen=True)
class CompiledPatterns:
    type: re.Pattern[str]
    scope: re.Pattern[str]
    title: re.Pattern[str]
    body: re.Pattern[str]
    breaking: re.Pattern[str]


def compile_patterns(patterns: CommitPatterns) -> CompiledPatterns:
    """Compile and check a pattern set.

    Raises:
        re.error: If a pattern does not compile or lacks a required group
    """
    compiled = {f.name: re.compile(getattr(patterns, f.name)) for f in fields(patterns)}
    for name in _CAPTURING_FIELDS:
        if compiled[name].groups < 1:
            raise re.error(f"{name} pattern needs a capture group: {compiled[name].pattern!r}")
    return CompiledPatterns(**compiled)


class PatternSetParser:
    """Parser that extracts each commit field with its own regex.

    Fields the patterns do not match fall back to the same values an
    unparsed conventional message gets.
    """

    name = "custom"

    def __init__(self, patterns: CommitPatterns | None = None) -> None:
        self.patterns = patterns or CommitPatterns()
        self._compiled = compile_patterns(self.patterns)

    def parse(self, message: str, sha: str = "") -> ParsedCommit:
        first_line, _ = split_message(message)

        commit_type = self._extract(self._compiled.type, message) or ""
        scope = self._extract(self._compiled.scope, message) or None
        title = self._extract(self._compiled.title, message)
        body = normalize_body(self._extract(self._compiled.body, message))

        breaking_body = False
        breaking_flag = False
        if self._compiled.breaking.search(message):
            # Attribute the match to the footer when the body opens with it.
            breaking_body = has_breaking_footer(body)
            breaking_flag = not breaking_body

        commit = ParsedCommit(
            sha=sha,
            message=message,
            commit_type=commit_type,
            scope=scope,
            title=title.strip() if title else first_line,
            body=body,
            breaking_flag=breaking_flag,
            breaking_body=breaking_body,
        )
        logger.debug(
            "pattern parser result",
            sha=sha,
            type=commit.commit_type,
            scope=commit.scope,
            breaking=commit.is_breaking,
        )
        return commit

    @staticmethod
    def _extract(pattern: re.Pattern[str], message: str) -> str | None:
        match = pattern.search(message)
        if match is None:
            return None
        return match.group(1)


@dataclass(frozen=True)
class ParserStrategy:
    """Which parser to use for a run.

    Either ``conventional`` (no patterns) or ``patterns`` carrying a
    :class:`CommitPatterns` set.
    """

    kind: Literal["conventional", "patterns"] = "conventional"
    patterns: CommitPatterns | None = None

    @classmethod
    def conventional(cls) -> ParserStrategy:
        return cls("conventional")

    @classmethod
    def pattern_set(cls, patterns: CommitPatterns | None = None) -> ParserStrategy:
        return cls("patterns", patterns or CommitPatterns())


def create_parser(strategy: ParserStrategy) -> CommitParser:
    """Build the parser for ``strategy``.

    A pattern set that fails to compile is a recoverable configuration
    error: a warning is logged and the built-in default patterns are
    used instead.

    Args:
        strategy: Selected parsing strategy

    Returns:
        A ready-to-use parser
    """
    if strategy.kind == "conventional":
        logger.debug("using conventional commit parser")
        return ConventionalCommitParser()

    patterns = strategy.patterns or CommitPatterns()
    try:
        parser = PatternSetParser(patterns)
    except re.error as e:
        logger.warning(
            "invalid commit patterns, falling back to defaults",
            error=str(e),
        )
        return PatternSetParser()

    logger.debug(
        "using pattern-set commit parser",
        type_pattern=patterns.type,
        scope_pattern=patterns.scope,
        title_pattern=patterns.title,
        body_pattern=patterns.body,
        breaking_pattern=patterns.breaking,
    )
    return parser
