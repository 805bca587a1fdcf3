"""
Entity contracts exchanged with the release catalog.

Entities are supplied by the storage/API layer and are read-only here.
All models are frozen; JSON (de)serialization goes through orjson.
"""

from __future__ import annotations

from typing import Any, Self

import orjson
from pydantic import BaseModel, ConfigDict, Field, model_validator

from releasecore.checksums import (
    ChecksumAlgorithm,
    ChecksumEncoding,
    ChecksumFingerprint,
    classify_checksum,
)

# Upper bound on artifact filesize (5 GiB)
MAX_FILESIZE = 5 * 1024**3


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson."""
        return orjson.dumps(self.model_dump(mode="json"))

    @classmethod
    def from_json(cls, data: bytes | str) -> Self:
        """Deserialize from JSON."""
        if isinstance(data, str):
            data = data.encode()
        return cls.model_validate(orjson.loads(data))


class Entitlement(_Contract):
    """
    Named right granted by a license.

    Attributes:
        id: Entitlement identifier.
        code: Entitlement code, unique within its scope.
    """

    id: str = Field(..., min_length=1, description="Entitlement identifier")
    code: str = Field(..., min_length=1, description="Entitlement code")


class Constraint(_Contract):
    """Release requirement on a single entitlement."""

    id: str = Field(..., min_length=1, description="Constraint identifier")
    entitlement: Entitlement = Field(..., description="Required entitlement")

    @property
    def code(self) -> str:
        """Code of the required entitlement."""
        return self.entitlement.code


class Release(_Contract):
    """
    Versioned release.

    The version is kept as the raw string: a malformed value is tolerated
    here and excluded later by the query layer.

    Attributes:
        id: Release identifier.
        version: Raw version string.
        constraints: Entitlement constraints (empty = unconstrained).
        environment_id: Isolation environment, if any.
    """

    id: str = Field(..., min_length=1, description="Release identifier")
    version: str = Field(..., description="Raw version string")
    constraints: tuple[Constraint, ...] = Field(default=(), description="Entitlement constraints")
    environment_id: str | None = Field(default=None, description="Isolation environment")

    @property
    def entitlement_codes(self) -> frozenset[str]:
        """Set of entitlement codes required by this release."""
        return frozenset(constraint.code for constraint in self.constraints)


class ReleaseArtifact(_Contract):
    """
    Distributable file belonging to exactly one release.

    When environment_id is omitted or None it is inherited from the release;
    when given it must match the release's environment exactly.

    Attributes:
        id: Artifact identifier.
        release: Owning release.
        checksum: Caller-provided checksum text (untrusted).
        filesize: Size in bytes, bounded to [0, MAX_FILESIZE].
        environment_id: Isolation environment, if any.
    """

    id: str = Field(..., min_length=1, description="Artifact identifier")
    release: Release = Field(..., description="Owning release")
    checksum: str | None = Field(default=None, description="Raw checksum text")
    filesize: int | None = Field(default=None, ge=0, le=MAX_FILESIZE, description="Bytes")
    environment_id: str | None = Field(default=None, description="Isolation environment")

    @model_validator(mode="before")
    @classmethod
    def inherit_environment(cls, data: Any) -> Any:
        """Default environment_id to the release's environment."""
        if not isinstance(data, dict) or data.get("environment_id") is not None:
            return data
        release = data.get("release")
        if isinstance(release, Release):
            return {**data, "environment_id": release.environment_id}
        if isinstance(release, dict):
            return {**data, "environment_id": release.get("environment_id")}
        return data

    @model_validator(mode="after")
    def check_environment(self) -> ReleaseArtifact:
        """Artifact and release must share the same environment."""
        if self.environment_id != self.release.environment_id:
            msg = (
                f"environment mismatch: artifact {self.environment_id!r} "
                f"!= release {self.release.environment_id!r}"
            )
            raise ValueError(msg)
        return self

    @property
    def version(self) -> str:
        """Raw version string of the owning release."""
        return self.release.version

    @property
    def checksum_fingerprint(self) -> ChecksumFingerprint:
        """Fingerprint derived from the raw checksum (recomputed each access)."""
        return classify_checksum(self.checksum)

    @property
    def checksum_encoding(self) -> ChecksumEncoding:
        """Detected checksum encoding."""
        return self.checksum_fingerprint.encoding

    @property
    def checksum_algorithm(self) -> ChecksumAlgorithm:
        """Detected checksum algorithm."""
        return self.checksum_fingerprint.algorithm

    def with_release(self, release: Release) -> ReleaseArtifact:
        """Return a copy attached to another release.

        The artifact's environment is kept and re-validated against the
        new release.

        Raises:
            pydantic.ValidationError: If environments do not match.
        """
        data = self.model_dump(exclude={"release"})
        return ReleaseArtifact.model_validate({**data, "release": release})
