"""ArtifactQuery: chainable catalog views over release artifacts.

Composes the three core algorithms over a caller-supplied collection:
- constraint filters (without / with / within constraints)
- version ordering (bad versions are excluded, not fatal)
- checksum fingerprint filters

Every operation returns a new ArtifactQuery; the input is never mutated.
Filters are single-pass O(n); ordering parses each version once and sorts
in O(n log n).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from releasecore.checksums import (
    ChecksumAlgorithm,
    ChecksumEncoding,
    ChecksumFingerprint,
    classify_checksum,
)
from releasecore.config import QueryConfig
from releasecore.constraints import ConstraintMode, RequiredEntitlements, is_unconstrained
from releasecore.contracts.entities import ReleaseArtifact
from releasecore.logging_config import get_logger
from releasecore.query.metrics import QueryMetrics
from releasecore.versioning import (
    SortDirection,
    Version,
    VersionParseError,
    parse_version,
    version_key,
)

logger = get_logger(__name__)


class ArtifactQuery:
    """Immutable, chainable view over a sequence of release artifacts.

    Usage:
        query = ArtifactQuery(artifacts)
        latest = query.within_constraints("PRO", strict=True).order_by_version().first()
    """

    def __init__(
        self,
        artifacts: Iterable[ReleaseArtifact],
        *,
        config: QueryConfig | None = None,
        metrics: QueryMetrics | None = None,
        rejected: Iterable[ReleaseArtifact] = (),
    ) -> None:
        """Initialize query.

        Args:
            artifacts: Artifacts in caller order.
            config: Query defaults (QueryConfig() if None).
            metrics: Optional metrics sink.
            rejected: Artifacts excluded by earlier operations.
        """
        self._artifacts: tuple[ReleaseArtifact, ...] = tuple(artifacts)
        self._config = config or QueryConfig()
        self._metrics = metrics
        self._rejected: tuple[ReleaseArtifact, ...] = tuple(rejected)

    @property
    def config(self) -> QueryConfig:
        """Get query configuration."""
        return self._config

    @property
    def rejected(self) -> tuple[ReleaseArtifact, ...]:
        """Artifacts excluded because their release version failed to parse."""
        return self._rejected

    def _derive(
        self,
        artifacts: Iterable[ReleaseArtifact],
        rejected: Iterable[ReleaseArtifact] | None = None,
    ) -> ArtifactQuery:
        return ArtifactQuery(
            artifacts,
            config=self._config,
            metrics=self._metrics,
            rejected=self._rejected if rejected is None else rejected,
        )

    def _record(self, operation: str) -> None:
        if self._metrics is not None:
            self._metrics.record_evaluated(operation, len(self._artifacts))

    def _fingerprint(self, artifact: ReleaseArtifact) -> ChecksumFingerprint:
        fingerprint = classify_checksum(artifact.checksum)
        if self._metrics is not None:
            self._metrics.record_fingerprint(fingerprint)
        return fingerprint

    # --- constraint filters ---

    def without_constraints(self) -> ArtifactQuery:
        """Keep artifacts whose release has no constraints."""
        self._record("without_constraints")
        return self._derive(a for a in self._artifacts if is_unconstrained(a.release))

    def with_constraints(self) -> ArtifactQuery:
        """Keep artifacts whose release has at least one constraint."""
        self._record("with_constraints")
        return self._derive(a for a in self._artifacts if not is_unconstrained(a.release))

    def within_constraints(
        self, *codes: str | Iterable[str], strict: bool | None = None
    ) -> ArtifactQuery:
        """Keep artifacts whose release is satisfied by the granted codes.

        Codes may be passed one per argument, as iterables, or mixed:
        within_constraints("A", "B") and within_constraints({"A", "B"})
        are equivalent.

        Args:
            *codes: Granted entitlement codes (none = only unconstrained pass).
            strict: Constraint mode; config.strict_constraints if None.

        Returns:
            Filtered query, input order preserved.
        """
        self._record("within_constraints")
        granted = frozenset(
            code
            for group in codes
            for code in ((group,) if isinstance(group, str) else group)
        )
        mode = ConstraintMode.of(self._config.strict_constraints if strict is None else strict)
        return self._derive(
            a
            for a in self._artifacts
            if RequiredEntitlements.of(a.release).satisfied_by(granted, mode)
        )

    # --- ordering ---

    def order_by_version(self, direction: SortDirection | str | None = None) -> ArtifactQuery:
        """Order artifacts by release version precedence.

        Artifacts with an unparseable version are excluded and collected in
        `rejected` (or raise, when config.on_invalid_version == "raise").
        Equal-ranked artifacts keep their current relative order.

        Args:
            direction: ASC or DESC; config.default_direction if None.

        Returns:
            Ordered query.

        Raises:
            VersionParseError: On a bad version with the "raise" policy.
        """
        self._record("order_by_version")
        resolved = (
            self._config.default_direction if direction is None else SortDirection(direction)
        )

        parsed: list[tuple[Version, ReleaseArtifact]] = []
        rejected = list(self._rejected)
        for artifact in self._artifacts:
            try:
                version = parse_version(artifact.version)
            except VersionParseError:
                if self._config.on_invalid_version == "raise":
                    raise
                self._reject(artifact)
                rejected.append(artifact)
                continue
            parsed.append((version, artifact))

        parsed.sort(
            key=lambda pair: version_key(pair[0]),
            reverse=resolved is SortDirection.DESC,
        )
        return self._derive((artifact for _, artifact in parsed), rejected=rejected)

    def _reject(self, artifact: ReleaseArtifact) -> None:
        if self._metrics is not None:
            self._metrics.record_invalid_version()
        if self._config.log_rejected:
            logger.warning(
                "Excluding artifact with invalid release version",
                extra={
                    "artifact_id": artifact.id,
                    "release_id": artifact.release.id,
                    "version": artifact.version,
                },
            )

    # --- checksum filters ---

    def with_checksum_algorithm(self, algorithm: ChecksumAlgorithm | str) -> ArtifactQuery:
        """Keep artifacts whose checksum classifies as the given algorithm."""
        self._record("with_checksum_algorithm")
        wanted = ChecksumAlgorithm(algorithm)
        return self._derive(a for a in self._artifacts if self._fingerprint(a).algorithm is wanted)

    def with_checksum_encoding(self, encoding: ChecksumEncoding | str) -> ArtifactQuery:
        """Keep artifacts whose checksum classifies as the given encoding."""
        self._record("with_checksum_encoding")
        wanted = ChecksumEncoding(encoding)
        return self._derive(a for a in self._artifacts if self._fingerprint(a).encoding is wanted)

    def fingerprints(self) -> dict[str, ChecksumFingerprint]:
        """Classify every artifact checksum, keyed by artifact id."""
        return {a.id: self._fingerprint(a) for a in self._artifacts}

    # --- results ---

    def first(self) -> ReleaseArtifact | None:
        """First artifact in current order, or None if empty."""
        return self._artifacts[0] if self._artifacts else None

    take = first

    def ids(self) -> list[str]:
        """Artifact ids in current order."""
        return [a.id for a in self._artifacts]

    def versions(self) -> list[str]:
        """Raw release versions in current order."""
        return [a.version for a in self._artifacts]

    def to_list(self) -> list[ReleaseArtifact]:
        """Artifacts in current order."""
        return list(self._artifacts)

    def __iter__(self) -> Iterator[ReleaseArtifact]:
        return iter(self._artifacts)

    def __len__(self) -> int:
        return len(self._artifacts)

    def __repr__(self) -> str:
        return f"ArtifactQuery(count={len(self._artifacts)}, rejected={len(self._rejected)})"
