"""Tests for ArtifactQuery composition."""

from __future__ import annotations

import logging

import pytest
from prometheus_client.registry import CollectorRegistry

from releasecore.checksums import ChecksumAlgorithm, ChecksumEncoding
from releasecore.config import QueryConfig
from releasecore.contracts.entities import Constraint, Entitlement, Release, ReleaseArtifact
from releasecore.query import ArtifactQuery, QueryMetrics
from releasecore.versioning import SortDirection, VersionParseError

CATALOG_VERSIONS = [
    "1.0.0-beta",
    "1.0.0-beta.2",
    "1.0.0-beta+exp.sha.6",
    "1.0.0-alpha.beta",
    "99.99.99",
    "1.0.0+20130313144700",
    "1.0.0-alpha",
    "1.0.11",
    "1.0.0-beta.11",
    "1.0.0-alpha.1",
    "1.0.0",
    "69.420.42",
    "1.11.0",
    "1.0.0+21AF26D3",
    "22.0.1-beta.0",
    "1.0.0-beta+exp.sha.5114f85",
    "1.0.0-rc.1",
    "1.0.0-alpha+001",
    "101.0.0",
    "1.0.2",
    "1.1.3",
    "11.0.0",
    "1.1.21",
    "1.2.0",
    "1.0.1",
    "2.0.0",
    "22.0.1",
    "22.0.1-beta.1",
]

EXPECTED_DESC = [
    "101.0.0",
    "99.99.99",
    "69.420.42",
    "22.0.1",
    "22.0.1-beta.1",
    "22.0.1-beta.0",
    "11.0.0",
    "2.0.0",
    "1.11.0",
    "1.2.0",
    "1.1.21",
    "1.1.3",
    "1.0.11",
    "1.0.2",
    "1.0.1",
    "1.0.0+21AF26D3",
    "1.0.0+20130313144700",
    "1.0.0",
    "1.0.0-rc.1",
    "1.0.0-beta.11",
    "1.0.0-beta.2",
    "1.0.0-beta+exp.sha.5114f85",
    "1.0.0-beta+exp.sha.6",
    "1.0.0-beta",
    "1.0.0-alpha.beta",
    "1.0.0-alpha.1",
    "1.0.0-alpha+001",
    "1.0.0-alpha",
]


def make_artifact(
    artifact_id: str,
    version: str = "1.0.0",
    codes: tuple[str, ...] = (),
    checksum: str | None = None,
) -> ReleaseArtifact:
    """Create an artifact whose release requires the given codes."""
    release = Release(
        id=f"rel-{artifact_id}",
        version=version,
        constraints=tuple(
            Constraint(id=f"{artifact_id}-c{i}", entitlement=Entitlement(id=f"e-{c}", code=c))
            for i, c in enumerate(codes)
        ),
    )
    return ReleaseArtifact(id=artifact_id, release=release, checksum=checksum)


@pytest.fixture
def versioned() -> list[ReleaseArtifact]:
    return [make_artifact(f"a{i}", v) for i, v in enumerate(CATALOG_VERSIONS)]


@pytest.fixture
def constrained() -> list[ReleaseArtifact]:
    return [
        make_artifact("a0", codes=("A", "B", "C", "D")),
        make_artifact("a1", codes=("A", "B", "C")),
        make_artifact("a2", codes=("A", "C")),
        make_artifact("a3", codes=("A",)),
        make_artifact("a4"),
        make_artifact("a5", codes=("E",)),
    ]


class TestOrderByVersion:
    """Tests for order_by_version."""

    def test_default_descending(self, versioned: list[ReleaseArtifact]) -> None:
        assert ArtifactQuery(versioned).order_by_version().versions() == EXPECTED_DESC

    def test_desc(self, versioned: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(versioned).order_by_version(SortDirection.DESC)
        assert result.versions() == EXPECTED_DESC

    def test_asc(self, versioned: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(versioned).order_by_version("asc")
        assert result.versions() == list(reversed(EXPECTED_DESC))

    def test_take_latest(self, versioned: list[ReleaseArtifact]) -> None:
        latest = ArtifactQuery(versioned).order_by_version().take()
        assert latest is not None
        assert latest.version == "101.0.0"

    def test_config_default_direction(self, versioned: list[ReleaseArtifact]) -> None:
        config = QueryConfig(default_direction=SortDirection.ASC)
        first = ArtifactQuery(versioned, config=config).order_by_version().first()
        assert first is not None
        assert first.version == "1.0.0-alpha"

    def test_invalid_versions_excluded(self, caplog: pytest.LogCaptureFixture) -> None:
        """A handful of bad records does not abort the batch."""
        artifacts = [
            make_artifact("good-1", "1.0.0"),
            make_artifact("bad-1", "latest"),
            make_artifact("good-2", "2.0.0"),
            make_artifact("bad-2", "1.0"),
        ]

        with caplog.at_level(logging.WARNING, logger="releasecore.query.artifact_query"):
            result = ArtifactQuery(artifacts).order_by_version()

        assert result.ids() == ["good-2", "good-1"]
        assert [a.id for a in result.rejected] == ["bad-1", "bad-2"]
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 2
        assert warnings[0].artifact_id == "bad-1"  # type: ignore[attr-defined]
        assert warnings[0].version == "latest"  # type: ignore[attr-defined]

    def test_rejected_not_logged_when_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        config = QueryConfig(log_rejected=False)
        with caplog.at_level(logging.WARNING):
            result = ArtifactQuery([make_artifact("bad", "x")], config=config).order_by_version()
        assert len(result) == 0
        assert len(result.rejected) == 1
        assert caplog.records == []

    def test_raise_policy(self) -> None:
        config = QueryConfig(on_invalid_version="raise")
        query = ArtifactQuery([make_artifact("ok"), make_artifact("bad", "v1")], config=config)
        with pytest.raises(VersionParseError):
            query.order_by_version()

    def test_stable_for_equal_rank(self) -> None:
        """Equal-ranked artifacts keep input order in both directions."""
        artifacts = [make_artifact("x", "1.0.0+001"), make_artifact("y", "1.0.0+1")]
        assert ArtifactQuery(artifacts).order_by_version("desc").ids() == ["x", "y"]
        assert ArtifactQuery(artifacts).order_by_version("asc").ids() == ["x", "y"]

    def test_empty(self) -> None:
        result = ArtifactQuery([]).order_by_version()
        assert len(result) == 0
        assert result.first() is None

    def test_input_not_mutated(self, versioned: list[ReleaseArtifact]) -> None:
        query = ArtifactQuery(versioned)
        query.order_by_version()
        assert query.versions() == CATALOG_VERSIONS


class TestConstraintFilters:
    """Tests for constraint scopes."""

    def test_within_permissive(self, constrained: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(constrained).within_constraints("A", "B", "C", strict=False)
        assert result.ids() == ["a0", "a1", "a2", "a3", "a4"]

    def test_within_strict(self, constrained: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(constrained).within_constraints("A", "B", "C", strict=True)
        assert result.ids() == ["a1", "a2", "a3", "a4"]

    def test_within_accepts_iterable(self, constrained: list[ReleaseArtifact]) -> None:
        """A single set of codes matches the same codes passed separately."""
        query = ArtifactQuery(constrained)
        for strict in (False, True):
            expected = query.within_constraints("A", "B", "C", strict=strict).ids()
            assert query.within_constraints({"A", "B", "C"}, strict=strict).ids() == expected
            assert query.within_constraints(["A"], "B", ("C",), strict=strict).ids() == expected

    def test_within_empty_iterable(self, constrained: list[ReleaseArtifact]) -> None:
        assert ArtifactQuery(constrained).within_constraints(set()).ids() == ["a4"]

    def test_within_no_codes(self, constrained: list[ReleaseArtifact]) -> None:
        assert ArtifactQuery(constrained).within_constraints().ids() == ["a4"]
        assert ArtifactQuery(constrained).within_constraints(strict=True).ids() == ["a4"]

    def test_within_config_strict_default(self, constrained: list[ReleaseArtifact]) -> None:
        query = ArtifactQuery(constrained, config=QueryConfig(strict_constraints=True))
        assert query.within_constraints("A", "B", "C").ids() == ["a1", "a2", "a3", "a4"]

    def test_without_constraints(self, constrained: list[ReleaseArtifact]) -> None:
        assert ArtifactQuery(constrained).without_constraints().ids() == ["a4"]

    def test_with_constraints(self, constrained: list[ReleaseArtifact]) -> None:
        assert ArtifactQuery(constrained).with_constraints().ids() == ["a0", "a1", "a2", "a3", "a5"]

    def test_partition(self, constrained: list[ReleaseArtifact]) -> None:
        query = ArtifactQuery(constrained)
        without = set(query.without_constraints().ids())
        with_ = set(query.with_constraints().ids())
        assert without.isdisjoint(with_)
        assert without | with_ == set(query.ids())


class TestChaining:
    """Tests for composed operations."""

    def test_latest_usable_release(self) -> None:
        artifacts = [
            make_artifact("free-1", "1.0.0"),
            make_artifact("pro-2", "2.0.0", codes=("PRO",)),
            make_artifact("ent-3", "3.0.0", codes=("ENTERPRISE",)),
            make_artifact("bad", "three"),
        ]
        latest = (
            ArtifactQuery(artifacts)
            .within_constraints("PRO", strict=True)
            .order_by_version()
            .first()
        )
        assert latest is not None
        assert latest.id == "pro-2"

    def test_rejected_carried_through_filters(self) -> None:
        artifacts = [make_artifact("bad", "nope"), make_artifact("ok", "1.0.0")]
        result = ArtifactQuery(artifacts).order_by_version().without_constraints()
        assert result.ids() == ["ok"]
        assert [a.id for a in result.rejected] == ["bad"]

    def test_iteration_and_len(self, constrained: list[ReleaseArtifact]) -> None:
        query = ArtifactQuery(constrained)
        assert len(query) == 6
        assert [a.id for a in query] == query.ids()
        assert query.to_list() == constrained
        assert repr(query) == "ArtifactQuery(count=6, rejected=0)"


class TestChecksumFilters:
    """Tests for checksum fingerprint filters."""

    @pytest.fixture
    def checksummed(self) -> list[ReleaseArtifact]:
        return [
            make_artifact(
                "sha256-hex",
                checksum="d363c888471a1e0f6c7adadd1d27407bbecaae40f8fac3032fa6cb495ef5ee6b",
            ),
            make_artifact("sha256-b64", checksum="02PIiEcaHg9setrdHSdAe77KrkD4+sMDL6bLSV717ms="),
            make_artifact("md5-hex", checksum="961eb510f6327f888457c1cc3836624a"),
            make_artifact("adler", checksum="124803a9"),
            make_artifact("none"),
        ]

    def test_with_checksum_algorithm(self, checksummed: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(checksummed).with_checksum_algorithm(ChecksumAlgorithm.SHA256)
        assert result.ids() == ["sha256-hex", "sha256-b64"]

    def test_with_checksum_algorithm_string(self, checksummed: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(checksummed).with_checksum_algorithm("unknown")
        assert result.ids() == ["adler", "none"]

    def test_with_checksum_encoding(self, checksummed: list[ReleaseArtifact]) -> None:
        result = ArtifactQuery(checksummed).with_checksum_encoding(ChecksumEncoding.HEX)
        assert result.ids() == ["sha256-hex", "md5-hex", "adler"]

    def test_fingerprints(self, checksummed: list[ReleaseArtifact]) -> None:
        fingerprints = ArtifactQuery(checksummed).fingerprints()
        assert fingerprints["sha256-b64"].encoding is ChecksumEncoding.BASE64
        assert fingerprints["adler"].algorithm is ChecksumAlgorithm.UNKNOWN
        assert not fingerprints["none"].is_known


class TestQueryMetrics:
    """Tests for metrics recorded by queries."""

    def test_counts_invalid_versions(self) -> None:
        registry = CollectorRegistry()
        metrics = QueryMetrics(registry=registry)
        artifacts = [make_artifact("ok"), make_artifact("bad", "x"), make_artifact("bad2", "y")]

        ArtifactQuery(artifacts, metrics=metrics).order_by_version()

        assert registry.get_sample_value("releasecore_invalid_versions_total") == 2
        assert (
            registry.get_sample_value(
                "releasecore_artifacts_evaluated_total", {"operation": "order_by_version"}
            )
            == 3
        )

    def test_metrics_propagate_through_chain(self) -> None:
        registry = CollectorRegistry()
        metrics = QueryMetrics(registry=registry)
        artifacts = [make_artifact("a", codes=("A",)), make_artifact("b")]

        ArtifactQuery(artifacts, metrics=metrics).with_constraints().order_by_version()

        assert (
            registry.get_sample_value(
                "releasecore_artifacts_evaluated_total", {"operation": "with_constraints"}
            )
            == 2
        )
        assert (
            registry.get_sample_value(
                "releasecore_artifacts_evaluated_total", {"operation": "order_by_version"}
            )
            == 1
        )

    def test_counts_fingerprints(self) -> None:
        registry = CollectorRegistry()
        metrics = QueryMetrics(registry=registry)
        artifacts = [
            make_artifact("a", checksum="961eb510f6327f888457c1cc3836624a"),
            make_artifact("b"),
        ]

        ArtifactQuery(artifacts, metrics=metrics).fingerprints()

        assert (
            registry.get_sample_value(
                "releasecore_checksum_classifications_total",
                {"encoding": "hex", "algorithm": "md5"},
            )
            == 1
        )
        assert (
            registry.get_sample_value(
                "releasecore_checksum_classifications_total",
                {"encoding": "unknown", "algorithm": "unknown"},
            )
            == 1
        )

    def test_no_metrics_by_default(self) -> None:
        """Queries run without a metrics sink."""
        result = ArtifactQuery([make_artifact("bad", "x")]).order_by_version()
        assert len(result.rejected) == 1
