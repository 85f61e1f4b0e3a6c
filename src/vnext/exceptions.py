"""Exception hierarchy for vnext.

All errors raised by vnext derive from :class:`VNextError` so callers
can catch them in one place. Absence conditions (no repository head,
no tags, no commits) are *not* exceptions; they are reported as
``None`` results and handled by the caller's fallback output.
"""

from __future__ import annotations


class VNextError(Exception):
    """Base class for all vnext errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(VNextError):
    """Base class for configuration problems."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """The [tool.vnext] section is malformed or has invalid values."""


# =============================================================================
# Version control
# =============================================================================


class GitError(VNextError):
    """A git operation failed."""


class NotARepositoryError(GitError):
    """The given path is not inside a git working copy."""


# =============================================================================
# Versions
# =============================================================================


class VersionParseError(VNextError, ValueError):
    """A string is not a valid semantic version."""


# =============================================================================
# Hosting providers
# =============================================================================


class GitHubError(VNextError):
    """The GitHub API could not be reached or returned garbage.

    Attributes:
        status_code: HTTP status of the failed response, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
