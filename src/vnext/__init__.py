"""vnext - compute the next semantic version from git history.

vnext reads commit messages since the last version tag, classifies them
(conventional commits by default), and prints the next version or the
release notes for it.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
