"""Entitlement constraint evaluation for releases."""

from releasecore.constraints.evaluator import (
    ConstraintMode,
    RequiredEntitlements,
    is_unconstrained,
    satisfies,
    with_constraints,
    within_constraints,
    without_constraints,
)

__all__ = [
    "ConstraintMode",
    "RequiredEntitlements",
    "is_unconstrained",
    "satisfies",
    "with_constraints",
    "within_constraints",
    "without_constraints",
]
