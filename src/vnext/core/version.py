"""Semantic version parsing and arithmetic.

Versions follow `SemVer 2.0.0 <https://semver.org/>`_. Pre-release and
build metadata are parsed so that tags such as ``v1.2.0-rc.1`` can be
ordered correctly, but a computed next version never carries them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering

from vnext.exceptions import VersionParseError

_SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class BumpType(IntEnum):
    """Severity of a version bump, ordered by impact.

    Combining two severities yields the larger one, so ``max()`` over a
    collection of bumps gives the bump for the whole changeset.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


def max_bump(*bumps: BumpType) -> BumpType:
    """Return the highest-impact bump, or NONE when given nothing.

    >>> max_bump(BumpType.PATCH, BumpType.MINOR)
    <BumpType.MINOR: 2>
    """
    return max(bumps, default=BumpType.NONE)


@total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version.

    Ordering follows SemVer precedence: numeric components first, then a
    release outranks any of its pre-releases, then pre-release
    identifiers field by field. Build metadata only breaks exact ties.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise VersionParseError(f"Version components must be non-negative: {self!r}")

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a strict semantic version string.

        Args:
            text: Version such as ``"1.2.3"`` or ``"2.0.0-rc.1+build.5"``

        Returns:
            Parsed version

        Raises:
            VersionParseError: If the string is not valid SemVer
        """
        match = _SEMVER_PATTERN.match(text.strip())
        if not match:
            raise VersionParseError(f"Invalid semantic version: {text!r}")

        prerelease = match.group("prerelease")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=match.group("build") or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def is_initial(self) -> bool:
        """True for 0.0.0, the implicit version of an untagged project."""
        return (self.major, self.minor, self.patch) == (0, 0, 0)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for a bump.

        Pre-release and build metadata are always dropped, including for
        ``BumpType.NONE``.

        Args:
            bump_type: Severity of the change

        Returns:
            New version

        Raises:
            ValueError: If ``bump_type`` is not a BumpType member
        """
        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type is BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        if bump_type is BumpType.NONE:
            return Version(self.major, self.minor, self.patch)
        raise ValueError(f"Unknown bump type: {bump_type!r}")

    def _precedence(self) -> tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]:
        # A release sorts after all of its pre-releases.
        release_rank = 0 if self.prerelease else 1
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, release_rank, identifiers)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self._precedence() != other._precedence():
            return self._precedence() < other._precedence()
        return self.build < other.build

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


INITIAL_VERSION = Version(0, 0, 0)


def parse_version(text: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text)


def parse_tag(tag: str) -> Version | None:
    """Parse a release tag, tolerating a single leading ``v``.

    ``"v1.2.3"`` and ``"1.2.3"`` give the same version. Tags that are not
    versions at all (``"latest"``, ``"release-2024"``) return ``None``.

    Args:
        tag: Tag name

    Returns:
        Parsed version, or None if the tag is not a version
    """
    try:
        return Version.parse(tag.removeprefix("v"))
    except VersionParseError:
        return None
