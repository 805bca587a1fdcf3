"""
Prometheus metrics for catalog queries.

Only low-cardinality labels are used: no release, artifact or version
identifiers ever become label values.
"""

from __future__ import annotations

from prometheus_client import Counter
from prometheus_client.registry import CollectorRegistry

from releasecore.checksums import ChecksumFingerprint


class QueryMetrics:
    """
    Counters for ArtifactQuery operations.

    - releasecore_artifacts_evaluated_total{operation}
    - releasecore_invalid_versions_total
    - releasecore_checksum_classifications_total{encoding, algorithm}

    Usage:
        registry = CollectorRegistry()
        metrics = QueryMetrics(registry=registry)
        ArtifactQuery(artifacts, metrics=metrics).order_by_version()
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize counters.

        Args:
            registry: Prometheus CollectorRegistry. If None, a private one is created.
        """
        self._registry = registry or CollectorRegistry()

        self._artifacts_evaluated = Counter(
            "releasecore_artifacts_evaluated",
            "Artifacts evaluated by query operations",
            labelnames=("operation",),
            registry=self._registry,
        )
        self._invalid_versions = Counter(
            "releasecore_invalid_versions",
            "Artifacts excluded because their release version failed to parse",
            registry=self._registry,
        )
        self._checksum_classifications = Counter(
            "releasecore_checksum_classifications",
            "Checksum fingerprints computed, by detected encoding and algorithm",
            labelnames=("encoding", "algorithm"),
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Get the Prometheus registry."""
        return self._registry

    def record_evaluated(self, operation: str, count: int) -> None:
        """Count artifacts passed through an operation."""
        if count > 0:
            self._artifacts_evaluated.labels(operation=operation).inc(count)

    def record_invalid_version(self) -> None:
        """Count one excluded artifact."""
        self._invalid_versions.inc()

    def record_fingerprint(self, fingerprint: ChecksumFingerprint) -> None:
        """Count one checksum classification."""
        self._checksum_classifications.labels(
            encoding=fingerprint.encoding.value,
            algorithm=fingerprint.algorithm.value,
        ).inc()
