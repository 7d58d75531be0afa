"""Bounded iteration control over synthesis passes.

The iteration counter lives on the ``RequirementStore`` and moves
``0 -> 1 -> ... -> max_iterations``.  Each successful ``generate`` call
advances it by exactly one, synthesizes with the store's current artifacts
as the prior set, and replaces the store's artifacts with the result.  At
the cap, ``generate`` refuses: it leaves the store untouched and reports the
refusal instead of raising.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from prdforge.coverage import CoverageReport, audit
from prdforge.store import RequirementStore
from prdforge.synthesizer.generator import synthesize
from prdforge.synthesizer.models import Artifact
from prdforge.synthesizer.registry import ArtifactRegistry
from prdforge.synthesizer.templates import TemplateRenderer

DEFAULT_MAX_ITERATIONS = 3


class IterationResult(BaseModel):
    """Outcome of one ``generate`` request."""
    model_config = ConfigDict(frozen=True)

    iteration: int = Field(..., ge=0, description="Counter value after the request")
    refused: bool = Field(default=False, description="True when the cap was already reached")
    artifacts: list[Artifact] = Field(default_factory=list)
    coverage: CoverageReport = Field(default_factory=CoverageReport)


class IterationController:
    """Drives synthesis passes against a shared ``RequirementStore``."""

    def __init__(
        self,
        store: RequirementStore,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        *,
        registry: Optional[ArtifactRegistry] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.store = store
        self.max_iterations = max_iterations
        self.registry = registry
        self.renderer = renderer if renderer is not None else TemplateRenderer()

    @property
    def can_generate(self) -> bool:
        """``False`` once the counter has reached ``max_iterations``."""
        return self.store.iteration < self.max_iterations

    @property
    def remaining(self) -> int:
        return max(self.max_iterations - self.store.iteration, 0)

    def generate(self) -> IterationResult:
        """Run one synthesis pass, or refuse if the cap is reached."""
        if not self.can_generate:
            return IterationResult(
                iteration=self.store.iteration,
                refused=True,
                artifacts=list(self.store.artifacts),
                coverage=audit(self.store.requirements, self.store.artifacts),
            )

        next_iteration = self.store.iteration + 1
        artifacts = synthesize(
            self.store.requirements,
            self.store.metadata,
            next_iteration,
            self.store.artifacts,
            registry=self.registry,
            renderer=self.renderer,
        )
        self.store.set_artifacts(artifacts)
        self.store.iteration = next_iteration

        return IterationResult(
            iteration=next_iteration,
            artifacts=artifacts,
            coverage=audit(self.store.requirements, artifacts),
        )

    def run(self, count: int) -> list[IterationResult]:
        """Run up to *count* passes, stopping after the first refusal."""
        results: list[IterationResult] = []
        for _ in range(count):
            result = self.generate()
            results.append(result)
            if result.refused:
                break
        return results
