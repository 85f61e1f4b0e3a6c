"""Configuration models for vnext.

Configuration lives in ``pyproject.toml`` under ``[tool.vnext]``::

    [tool.vnext.commits]
    parser = "conventional"
    types_minor = ["feat", "minor"]
    types_noop = ["chore", "noop", "docs"]

    [tool.vnext.changelog]
    header_scaling = false

Every field has a default, so an empty or missing section is valid.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vnext.core.commits import (
    DEFAULT_MAJOR_TYPES,
    DEFAULT_MINOR_TYPES,
    DEFAULT_NOOP_TYPES,
    TypePolicy,
)
from vnext.core.parsers import (
    DEFAULT_BODY_PATTERN,
    DEFAULT_BREAKING_PATTERN,
    DEFAULT_SCOPE_PATTERN,
    DEFAULT_TITLE_PATTERN,
    DEFAULT_TYPE_PATTERN,
    CommitPatterns,
    ParserStrategy,
)
from vnext.logging import get_logger

logger = get_logger(__name__)


def split_types(value: object) -> object:
    """Accept ``"feat, minor"`` as well as ``["feat", "minor"]``."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class CommitsConfig(BaseModel):
    """How commits are parsed and classified."""

    model_config = ConfigDict(extra="forbid")

    parser: str = "conventional"
    types_major: list[str] = Field(default_factory=lambda: sorted(DEFAULT_MAJOR_TYPES))
    types_minor: list[str] = Field(default_factory=lambda: sorted(DEFAULT_MINOR_TYPES))
    types_noop: list[str] = Field(default_factory=lambda: sorted(DEFAULT_NOOP_TYPES))

    # Only used by the "custom" parser. Compiled lazily so a bad pattern
    # degrades to the defaults instead of failing config loading.
    type_pattern: str = DEFAULT_TYPE_PATTERN
    scope_pattern: str = DEFAULT_SCOPE_PATTERN
    title_pattern: str = DEFAULT_TITLE_PATTERN
    body_pattern: str = DEFAULT_BODY_PATTERN
    breaking_pattern: str = DEFAULT_BREAKING_PATTERN

    @field_validator("types_major", "types_minor", "types_noop", mode="before")
    @classmethod
    def _split_types(cls, value: object) -> object:
        return split_types(value)

    def policy(self) -> TypePolicy:
        return TypePolicy.from_lists(self.types_major, self.types_minor, self.types_noop)

    def patterns(self) -> CommitPatterns:
        return CommitPatterns(
            type=self.type_pattern,
            scope=self.scope_pattern,
            title=self.title_pattern,
            body=self.body_pattern,
            breaking=self.breaking_pattern,
        )

    def strategy(self) -> ParserStrategy:
        if self.parser == "custom":
            return ParserStrategy.pattern_set(self.patterns())
        if self.parser != "conventional":
            logger.warning("unknown parser, falling back to conventional", parser=self.parser)
        return ParserStrategy.conventional()


class ChangelogConfig(BaseModel):
    """Changelog rendering options."""

    model_config = ConfigDict(extra="forbid")

    header_scaling: bool = True


class GitHubConfig(BaseModel):
    """GitHub API access for commit author lookup."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    api_url: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    timeout: float = Field(default=10.0, gt=0)


class VNextConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
