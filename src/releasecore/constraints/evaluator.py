"""Entitlement constraint evaluation.

A release declares zero or more constraints, each naming a required
entitlement code. Given the codes granted to a caller:

- unconstrained release: always satisfied
- PERMISSIVE: satisfied if any required code is granted
- STRICT: satisfied only if every required code is granted

Filters are pure and order-preserving; no state is carried across releases.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from releasecore.contracts.entities import Release


class ConstraintMode(str, Enum):
    """Constraint satisfaction policy."""

    PERMISSIVE = "permissive"
    STRICT = "strict"

    @classmethod
    def of(cls, strict: bool) -> ConstraintMode:
        """Map a strict flag to a mode."""
        return cls.STRICT if strict else cls.PERMISSIVE


@dataclass(frozen=True)
class RequiredEntitlements:
    """Entitlement codes required by one release.

    Attributes:
        codes: Required codes (duplicates collapsed).
    """

    codes: frozenset[str] = frozenset()

    @classmethod
    def of(cls, release: Release) -> RequiredEntitlements:
        """Collect required codes from a release's constraints."""
        return cls(codes=release.entitlement_codes)

    @property
    def is_empty(self) -> bool:
        """True if nothing is required."""
        return not self.codes

    def satisfied_by(self, granted: frozenset[str], mode: ConstraintMode) -> bool:
        """Check granted codes against the requirement."""
        if self.is_empty:
            return True
        if mode is ConstraintMode.STRICT:
            return self.codes <= granted
        return not self.codes.isdisjoint(granted)


def _granted_set(granted_codes: Iterable[str] | None) -> frozenset[str]:
    if granted_codes is None:
        return frozenset()
    if isinstance(granted_codes, str):
        return frozenset((granted_codes,))
    return frozenset(granted_codes)


def is_unconstrained(release: Release) -> bool:
    """True iff the release has no constraints."""
    return not release.constraints


def satisfies(
    release: Release,
    granted_codes: Iterable[str] | None,
    *,
    strict: bool = False,
) -> bool:
    """Decide whether granted codes satisfy a release's constraints.

    Args:
        release: Release to check.
        granted_codes: Entitlement codes granted to the caller (None = none).
        strict: Require every constraint (True) or at least one (False).

    Returns:
        True if the release is usable with the granted codes.
    """
    required = RequiredEntitlements.of(release)
    return required.satisfied_by(_granted_set(granted_codes), ConstraintMode.of(strict))


def without_constraints(releases: Iterable[Release]) -> list[Release]:
    """Select unconstrained releases, preserving input order."""
    return [release for release in releases if is_unconstrained(release)]


def with_constraints(releases: Iterable[Release]) -> list[Release]:
    """Select constrained releases, preserving input order."""
    return [release for release in releases if not is_unconstrained(release)]


def within_constraints(
    releases: Iterable[Release],
    granted_codes: Iterable[str] | None = None,
    *,
    strict: bool = False,
) -> list[Release]:
    """Select releases usable with the granted codes, preserving input order.

    Args:
        releases: Candidate releases.
        granted_codes: Entitlement codes granted to the caller.
        strict: Require every constraint (True) or at least one (False).

    Returns:
        Releases for which `satisfies` holds.
    """
    granted = _granted_set(granted_codes)
    mode = ConstraintMode.of(strict)
    return [
        release
        for release in releases
        if RequiredEntitlements.of(release).satisfied_by(granted, mode)
    ]
