"""Requirement coverage auditing.

Computes how much of the current requirement set is claimed by the current
artifact set.  Both functions are pure and cheap enough to call after every
artifact-set change.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from prdforge.parser.models import Requirement
from prdforge.synthesizer.models import Artifact


class CoverageReport(BaseModel):
    """Aggregate coverage of requirements by artifacts."""
    total_requirements: int = Field(default=0, ge=0)
    covered_requirements: int = Field(default=0, ge=0)
    coverage_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    uncovered_descriptions: list[str] = Field(
        default_factory=list,
        description="Descriptions of uncovered requirements, in requirement order",
    )


def audit(requirements: Sequence[Requirement], artifacts: Sequence[Artifact]) -> CoverageReport:
    """Return the coverage of *requirements* by *artifacts*.

    Only ids of requirements that currently exist are counted; artifacts
    referencing deleted requirements do not inflate coverage.
    """
    claimed: set[str] = set()
    for artifact in artifacts:
        claimed.update(artifact.satisfied_requirement_ids)

    # Duplicate ids can appear after external edits; the first one wins.
    live: dict[str, Requirement] = {}
    for req in requirements:
        live.setdefault(req.id, req)
    covered = sum(1 for req_id in live if req_id in claimed)
    total = len(live)
    percent = covered / total * 100 if total else 0.0

    return CoverageReport(
        total_requirements=total,
        covered_requirements=covered,
        coverage_percent=percent,
        uncovered_descriptions=[req.description for req_id, req in live.items() if req_id not in claimed],
    )


def trace(requirements: Sequence[Requirement], artifacts: Sequence[Artifact]) -> dict[str, list[str]]:
    """Map each requirement id to the ids of the artifacts claiming it.

    Keys follow requirement order; uncovered requirements map to ``[]``.
    """
    matrix: dict[str, list[str]] = {req.id: [] for req in requirements}
    for artifact in artifacts:
        for req_id in artifact.satisfied_requirement_ids:
            if req_id in matrix and artifact.id not in matrix[req_id]:
                matrix[req_id].append(artifact.id)
    return matrix
