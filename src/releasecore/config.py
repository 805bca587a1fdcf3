"""
Query configuration.

Defaults for ArtifactQuery ordering, constraint mode and bad-record policy.
Values can be overridden from environment variables via QueryConfig.from_env().
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from releasecore.versioning import SortDirection

ENV_SORT_DIRECTION = "RELEASECORE_SORT_DIRECTION"
ENV_STRICT_CONSTRAINTS = "RELEASECORE_STRICT_CONSTRAINTS"
ENV_ON_INVALID_VERSION = "RELEASECORE_ON_INVALID_VERSION"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

InvalidVersionPolicy = Literal["skip", "raise"]


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class QueryConfig:
    """ArtifactQuery defaults.

    Attributes:
        default_direction: Direction used by order_by_version() when none given.
        strict_constraints: Constraint mode used by within_constraints() when none given.
        on_invalid_version: "skip" excludes unparseable versions, "raise" fails fast.
        log_rejected: Log a warning for every excluded record.
    """

    default_direction: SortDirection = SortDirection.DESC
    strict_constraints: bool = False
    on_invalid_version: InvalidVersionPolicy = "skip"
    log_rejected: bool = True

    def __post_init__(self) -> None:
        try:
            direction = SortDirection(self.default_direction)
        except ValueError:
            raise ValueError(
                f"default_direction must be 'asc' or 'desc', got {self.default_direction!r}"
            ) from None
        object.__setattr__(self, "default_direction", direction)
        if self.on_invalid_version not in ("skip", "raise"):
            raise ValueError(
                f"on_invalid_version must be 'skip' or 'raise', got {self.on_invalid_version!r}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> QueryConfig:
        """Build config from environment variables.

        Unset variables keep the dataclass defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        direction = env.get(ENV_SORT_DIRECTION)
        if direction is not None:
            kwargs["default_direction"] = direction.strip().lower()

        strict = env.get(ENV_STRICT_CONSTRAINTS)
        if strict is not None:
            kwargs["strict_constraints"] = _parse_bool(ENV_STRICT_CONSTRAINTS, strict)

        policy = env.get(ENV_ON_INVALID_VERSION)
        if policy is not None:
            kwargs["on_invalid_version"] = policy.strip().lower()

        return cls(**kwargs)  # type: ignore[arg-type]
