"""Catalog query layer composing version, constraint and checksum logic."""

from releasecore.query.artifact_query import ArtifactQuery
from releasecore.query.metrics import QueryMetrics

__all__ = [
    "ArtifactQuery",
    "QueryMetrics",
]
