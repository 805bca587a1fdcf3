"""Total ordering of release versions.

Precedence is resolved by a fixed chain of comparator stages. The first stage
that does not report EQUAL decides:

1. core:       (major, minor, patch) compared as integers
2. prerelease: a version WITHOUT prerelease ranks higher (1.0.0 > 1.0.0-rc.1)
3. build:      a version WITHOUT build metadata ranks lower (1.0.0 < 1.0.0+001)

Prerelease and build identifiers share one sequence comparison: numeric vs
numeric by integer value, numeric below alphanumeric, alphanumeric by ASCII,
and a strict prefix below the longer sequence.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Sequence
from enum import Enum, IntEnum

from releasecore.versioning.version import Version


class Ordering(IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1

    @classmethod
    def of(cls, left: object, right: object) -> Ordering:
        """Order two mutually comparable values."""
        if left < right:  # type: ignore[operator]
            return cls.LESS
        if left > right:  # type: ignore[operator]
            return cls.GREATER
        return cls.EQUAL


class SortDirection(str, Enum):
    """Sort direction for version ordering."""

    ASC = "asc"
    DESC = "desc"


Stage = Callable[[Version, Version], Ordering]


def _is_numeric(identifier: str) -> bool:
    return identifier.isascii() and identifier.isdigit()


def compare_identifier(left: str, right: str) -> Ordering:
    """Compare a single prerelease/build identifier pair."""
    left_numeric = _is_numeric(left)
    right_numeric = _is_numeric(right)

    if left_numeric and right_numeric:
        return Ordering.of(int(left), int(right))
    if left_numeric:
        return Ordering.LESS
    if right_numeric:
        return Ordering.GREATER
    return Ordering.of(left, right)


def compare_identifiers(left: Sequence[str], right: Sequence[str]) -> Ordering:
    """Compare two identifier sequences position by position.

    If every shared position is equal, the shorter sequence is less.
    """
    for left_id, right_id in zip(left, right, strict=False):
        result = compare_identifier(left_id, right_id)
        if result is not Ordering.EQUAL:
            return result
    return Ordering.of(len(left), len(right))


def compare_core(a: Version, b: Version) -> Ordering:
    """Stage 1: numeric core."""
    return Ordering.of(a.core, b.core)


def compare_prerelease(a: Version, b: Version) -> Ordering:
    """Stage 2: prerelease identifiers, absence ranks high."""
    if not a.prerelease and not b.prerelease:
        return Ordering.EQUAL
    if not a.prerelease:
        return Ordering.GREATER
    if not b.prerelease:
        return Ordering.LESS
    return compare_identifiers(a.prerelease, b.prerelease)


def compare_build(a: Version, b: Version) -> Ordering:
    """Stage 3: build metadata, absence ranks low."""
    if not a.build and not b.build:
        return Ordering.EQUAL
    if not a.build:
        return Ordering.LESS
    if not b.build:
        return Ordering.GREATER
    return compare_identifiers(a.build, b.build)


VERSION_STAGES: tuple[Stage, ...] = (
    compare_core,
    compare_prerelease,
    compare_build,
)


def compare_versions(a: Version, b: Version) -> Ordering:
    """Compare two versions through the stage chain.

    Args:
        a: Left version.
        b: Right version.

    Returns:
        Ordering of a relative to b.
    """
    for stage in VERSION_STAGES:
        result = stage(a, b)
        if result is not Ordering.EQUAL:
            return result
    return Ordering.EQUAL


version_key = functools.cmp_to_key(compare_versions)


def sort_versions(
    versions: Iterable[Version],
    direction: SortDirection = SortDirection.DESC,
) -> list[Version]:
    """Sort versions by precedence.

    The sort is stable: equal-ranked versions keep their input order in
    both directions.

    Args:
        versions: Versions to sort.
        direction: ASC (lowest first) or DESC (highest first).

    Returns:
        New sorted list.
    """
    direction = SortDirection(direction)
    return sorted(versions, key=version_key, reverse=direction is SortDirection.DESC)


def max_version(versions: Iterable[Version]) -> Version | None:
    """Return the highest version, or None for an empty input."""
    return max(versions, key=version_key, default=None)
