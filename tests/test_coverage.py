"""Tests for requirement coverage auditing (prdforge.coverage)."""

from __future__ import annotations

import pytest

from prdforge.coverage import CoverageReport, audit, trace
from prdforge.parser.models import Requirement
from prdforge.synthesizer.models import Artifact


pytestmark = pytest.mark.unit


@pytest.fixture
def three_requirements() -> list[Requirement]:
    return [
        Requirement(id="r1", description="Users can sign up"),
        Requirement(id="r2", description="Users can sign in"),
        Requirement(id="r3", description="Users can reset passwords"),
    ]


class TestAudit:
    def test_two_of_three_covered(self, three_requirements):
        artifacts = [Artifact(id="auth", path="Auth.tsx", satisfied_requirement_ids=["r1", "r2"])]

        report = audit(three_requirements, artifacts)

        assert report.total_requirements == 3
        assert report.covered_requirements == 2
        assert report.coverage_percent == pytest.approx(66.7, abs=0.05)
        assert report.uncovered_descriptions == ["Users can reset passwords"]

    def test_no_requirements(self):
        report = audit([], [Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["r1"])])
        assert report == CoverageReport()
        assert report.coverage_percent == 0.0

    def test_no_artifacts(self, three_requirements):
        report = audit(three_requirements, [])
        assert report.covered_requirements == 0
        assert report.coverage_percent == 0.0
        assert len(report.uncovered_descriptions) == 3

    def test_full_coverage(self, three_requirements):
        artifacts = [
            Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["r1", "r3"]),
            Artifact(id="b", path="B.tsx", satisfied_requirement_ids=["r2", "r3"]),
        ]
        report = audit(three_requirements, artifacts)
        assert report.coverage_percent == 100.0
        assert report.uncovered_descriptions == []

    def test_stale_references_ignored(self, three_requirements):
        artifacts = [Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["gone", "old", "r1"])]
        report = audit(three_requirements, artifacts)
        assert report.covered_requirements == 1
        assert report.coverage_percent <= 100.0

    def test_only_stale_references_is_zero(self, three_requirements):
        artifacts = [Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["gone"])]
        assert audit(three_requirements, artifacts).coverage_percent == 0.0

    def test_duplicate_requirement_ids_counted_once(self):
        duplicated = [
            Requirement(id="r1", description="First"),
            Requirement(id="r1", description="Duplicate"),
        ]
        artifacts = [Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["r1"])]
        report = audit(duplicated, artifacts)
        assert report.total_requirements == 1
        assert report.coverage_percent == 100.0

    def test_duplicate_uncovered_requirement_listed_once(self):
        duplicated = [
            Requirement(id="r", description="a"),
            Requirement(id="r", description="b"),
        ]
        report = audit(duplicated, [])
        assert report.total_requirements == 1
        assert report.covered_requirements == 0
        assert report.uncovered_descriptions == ["a"]

    @pytest.mark.parametrize(
        "claims",
        [[], ["r1"], ["r1", "r2"], ["r1", "r2", "r3"], ["x", "y", "r2", "r2"]],
    )
    def test_bounds(self, three_requirements, claims):
        artifacts = [Artifact(id="a", path="A.tsx", satisfied_requirement_ids=claims)]
        report = audit(three_requirements, artifacts)
        assert 0.0 <= report.coverage_percent <= 100.0
        assert report.covered_requirements <= report.total_requirements


class TestTrace:
    def test_matrix(self, three_requirements):
        artifacts = [
            Artifact(id="a", path="A.tsx", satisfied_requirement_ids=["r1", "r2"]),
            Artifact(id="b", path="B.tsx", satisfied_requirement_ids=["r2", "stale"]),
        ]
        assert trace(three_requirements, artifacts) == {
            "r1": ["a"],
            "r2": ["a", "b"],
            "r3": [],
        }

    def test_keys_follow_requirement_order(self, three_requirements):
        assert list(trace(list(reversed(three_requirements)), [])) == ["r3", "r2", "r1"]
