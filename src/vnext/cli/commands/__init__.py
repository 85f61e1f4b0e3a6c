"""CLI command implementations."""

from __future__ import annotations

from vnext.cli.commands.vnext import run_vnext

__all__ = ["run_vnext"]
