"""Configuration management for vnext."""

from __future__ import annotations

from vnext.config.loader import apply_overrides, load_config
from vnext.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitHubConfig,
    VNextConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "GitHubConfig",
    "VNextConfig",
    "apply_overrides",
    "load_config",
]
