"""The shared requirement store.

``RequirementStore`` is the single source of truth for requirements,
application metadata, generated artifacts and the iteration counter.  It is
passed explicitly to every stage that needs it; its fields are public so a
host application (UI, CLI) can read and mutate them between core calls.
Callers are responsible for serialising access.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from prdforge.parser.models import (
    AppMetadata,
    Category,
    ExtractionResult,
    Priority,
    Requirement,
    Status,
)
from prdforge.synthesizer.models import Artifact


class RequirementStore(BaseModel):
    """Requirements, metadata, artifacts and iteration state for one document."""

    requirements: list[Requirement] = Field(default_factory=list)
    metadata: AppMetadata = Field(default_factory=AppMetadata)
    artifacts: list[Artifact] = Field(default_factory=list)
    iteration: int = Field(default=0, ge=0)

    # ------------------------------------------------------------------
    # Requirements
    # ------------------------------------------------------------------

    def load_extraction(self, result: ExtractionResult) -> None:
        """Replace requirements and metadata with an extraction result."""
        self.requirements = list(result.requirements)
        self.metadata = result.metadata

    def set_requirements(self, requirements: list[Requirement]) -> None:
        self.requirements = list(requirements)

    def get_requirement(self, requirement_id: str) -> Optional[Requirement]:
        for req in self.requirements:
            if req.id == requirement_id:
                return req
        return None

    def _index_of(self, requirement_id: str) -> int:
        for index, req in enumerate(self.requirements):
            if req.id == requirement_id:
                return index
        raise KeyError(f"Unknown requirement: {requirement_id}")

    def _new_requirement_id(self) -> str:
        """``req-<epoch millis>``, bumped until unique in this store."""
        existing = {req.id for req in self.requirements}
        stamp = time.time_ns() // 1_000_000
        while f"req-{stamp}" in existing:
            stamp += 1
        return f"req-{stamp}"

    def add_requirement(
        self,
        description: str = "New requirement",
        category: Category = Category.CUSTOM,
        priority: Priority = Priority.MEDIUM,
        status: Status = Status.PENDING,
    ) -> Requirement:
        """Append a manually created requirement and return it."""
        requirement = Requirement(
            id=self._new_requirement_id(),
            category=category,
            description=description,
            priority=priority,
            status=status,
        )
        self.requirements.append(requirement)
        return requirement

    def update_requirement(self, requirement_id: str, **updates: Any) -> Requirement:
        """Apply field-level *updates* to a requirement, keeping its position.

        Raises:
            KeyError: If no requirement has *requirement_id*.
            ValueError: If an ``id`` update collides with another requirement.
            pydantic.ValidationError: If the updated record is invalid
                (e.g. an empty description or unknown category).
        """
        index = self._index_of(requirement_id)
        current = self.requirements[index]
        updated = Requirement.model_validate({**current.model_dump(), **updates})
        if updated.id != requirement_id and self.get_requirement(updated.id) is not None:
            raise ValueError(f"Requirement id already in use: {updated.id}")
        self.requirements[index] = updated
        return updated

    def delete_requirement(self, requirement_id: str) -> Requirement:
        """Remove a requirement. Artifacts keep their (now stale) references.

        Raises:
            KeyError: If no requirement has *requirement_id*.
        """
        return self.requirements.pop(self._index_of(requirement_id))

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def set_metadata(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        tech_stack: Optional[list[str]] = None,
    ) -> AppMetadata:
        """Override any of the metadata fields; ``None`` keeps the current value."""
        self.metadata = AppMetadata(
            name=self.metadata.name if name is None else name,
            description=self.metadata.description if description is None else description,
            tech_stack=self.metadata.tech_stack if tech_stack is None else tech_stack,
        )
        return self.metadata

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def set_artifacts(self, artifacts: list[Artifact]) -> None:
        self.artifacts = list(artifacts)

    def update_artifact(self, artifact_id: str, **updates: Any) -> Artifact:
        """Apply field-level *updates* to an artifact.

        Raises:
            KeyError: If no artifact has *artifact_id*.
        """
        for index, artifact in enumerate(self.artifacts):
            if artifact.id == artifact_id:
                updated = Artifact.model_validate({**artifact.model_dump(), **updates})
                self.artifacts[index] = updated
                return updated
        raise KeyError(f"Unknown artifact: {artifact_id}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear everything, including the iteration counter."""
        self.requirements = []
        self.metadata = AppMetadata()
        self.artifacts = []
        self.iteration = 0

    def save(self, path: Path) -> Path:
        """Persist the store to a JSON file and return the path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "RequirementStore":
        """Load a store previously written by :meth:`save`."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)
