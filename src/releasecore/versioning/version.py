"""Release version parsing.

Version string format (semver.org 2.0.0 grammar):
    {major}.{minor}.{patch}[-{prerelease}][+{build}]

Example:
    1.0.0-beta.11+exp.sha.5114f85
"""

from __future__ import annotations

import re
from dataclasses import dataclass


class VersioningError(Exception):
    """Base exception for version operations."""


class VersionParseError(VersioningError, ValueError):
    """Raised when a version string does not match the semver grammar."""


@dataclass(frozen=True)
class Version:
    """Parsed release version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Dot-separated prerelease identifiers (empty if absent).
        build: Dot-separated build metadata identifiers (empty if absent).
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Serialize back to canonical version text."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    @property
    def core(self) -> tuple[int, int, int]:
        """Numeric (major, minor, patch) tuple."""
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        """True if the version carries prerelease identifiers."""
        return bool(self.prerelease)


# Numeric identifiers are ASCII digits and may not carry leading zeros,
# except in build metadata.
_NUMERIC = r"0|[1-9][0-9]*"
_PRERELEASE_IDENT = r"(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
_BUILD_IDENT = r"[0-9a-zA-Z-]+"

VERSION_PATTERN = re.compile(
    r"^"
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_IDENT}(?:\.{_PRERELEASE_IDENT})*))?"
    rf"(?:\+(?P<build>{_BUILD_IDENT}(?:\.{_BUILD_IDENT})*))?"
    r"\Z"
)


def parse_version(version_str: str) -> Version:
    """Parse a version string into components.

    Args:
        version_str: Version string in format MAJOR.MINOR.PATCH[-pre][+build].

    Returns:
        Version with parsed components.

    Raises:
        VersionParseError: If version string doesn't match the grammar.
    """
    if not isinstance(version_str, str):
        msg = f"Invalid version string: {version_str!r} (expected str)"
        raise VersionParseError(msg)

    match = VERSION_PATTERN.match(version_str)
    if not match:
        msg = (
            f"Invalid version string: {version_str!r}. "
            f"Expected format: MAJOR.MINOR.PATCH[-prerelease][+build]"
        )
        raise VersionParseError(msg)

    prerelease = match.group("prerelease")
    build = match.group("build")
    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )


def try_parse_version(version_str: str | None) -> Version | None:
    """Parse a version string, returning None instead of raising."""
    if version_str is None:
        return None
    try:
        return parse_version(version_str)
    except VersionParseError:
        return None
