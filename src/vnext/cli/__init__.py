"""Command line interface for vnext."""

from __future__ import annotations

from vnext.cli.app import main

__all__ = ["main"]
