"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vnext.config.models import VNextConfig
from vnext.exceptions import ConfigNotFoundError, ConfigValidationError
from vnext.logging import get_logger

logger = get_logger(__name__)

TOOL_SECTION = "vnext"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Args:
        start: Directory to start from (defaults to cwd)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {start} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_vnext_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.vnext]`` table, or an empty dict."""
    section = pyproject.get("tool", {}).get(TOOL_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigValidationError(f"[tool.{TOOL_SECTION}] must be a table")
    return section


def parse_config(data: dict[str, Any], source: Path | str = "<config>") -> VNextConfig:
    """Validate raw configuration data.

    Raises:
        ConfigValidationError: If the data does not match the schema
    """
    try:
        return VNextConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid vnext configuration in {source}:\n{e}") from e


def load_config(path: Path | None = None) -> VNextConfig:
    """Load vnext configuration for a project.

    A missing pyproject.toml is not an error: vnext runs fine with the
    defaults, including outside any project.

    Args:
        path: Project directory or explicit pyproject.toml path

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If the file or section is malformed
    """
    try:
        if path is not None and path.is_file():
            pyproject_path = path
        else:
            pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        logger.debug("no pyproject.toml found, using default configuration")
        return VNextConfig()

    data = extract_vnext_config(load_pyproject_toml(pyproject_path))
    logger.debug("loaded configuration", path=str(pyproject_path), keys=sorted(data))
    return parse_config(data, pyproject_path)


def apply_overrides(config: VNextConfig, **overrides: Any) -> VNextConfig:
    """Return ``config`` with command-line values applied.

    Keyword names are ``<section>__<field>`` (e.g. ``commits__parser``).
    ``None`` values mean "not given" and are ignored.

    Raises:
        ConfigValidationError: If an override has an invalid value
    """
    data = config.model_dump()
    for key, value in overrides.items():
        if value is None:
            continue
        section, _, field = key.partition("__")
        if section not in data or not field:
            raise ConfigValidationError(f"Unknown configuration override: {key}")
        data[section][field] = value
    return parse_config(data, "command line")
