"""Requirement-driven artifact synthesis.

Maps the current requirement set and application metadata to a list of
generated React artifacts (source plus companion test), each annotated with
the requirement ids it claims to satisfy.  Synthesis is a pure function of
its inputs: identical requirements, metadata, iteration and prior artifacts
always produce byte-identical output.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Optional

from prdforge.parser.models import AppMetadata, Category, Requirement

from .models import Artifact
from .registry import ArtifactKind, ArtifactRegistry, default_registry
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ANNOTATION_TEMPLATE = "annotations/iteration.j2"

# Start of the first iteration annotation appended to a source file.
_ANNOTATION_START = re.compile(r"\n\n(?://|/\*) Iteration \d+ improvements:")

_HIGHLIGHT_ICONS = ("🚀", "⚡", "🔍")

_DEFAULT_HIGHLIGHTS = (
    "Fast, responsive interface",
    "Simple, focused workflows",
    "Built from your requirements",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def group_requirements(requirements: Sequence[Requirement]) -> dict[Category, list[Requirement]]:
    """Partition requirements by category, preserving their order."""
    groups: dict[Category, list[Requirement]] = {}
    for req in requirements:
        groups.setdefault(req.category, []).append(req)
    return groups


def _highlights(functional: Sequence[Requirement]) -> list[dict[str, str]]:
    """Home-page feature highlights taken from the first functional requirements."""
    descriptions = [req.description for req in functional[: len(_HIGHLIGHT_ICONS)]]
    if not descriptions:
        descriptions = list(_DEFAULT_HIGHLIGHTS)
    return [
        {"title": f"Feature {index}", "description": description, "icon": icon}
        for index, (description, icon) in enumerate(zip(descriptions, _HIGHLIGHT_ICONS), start=1)
    ]


def _build_context(
    metadata: AppMetadata,
    groups: dict[Category, list[Requirement]],
    kinds: Sequence[ArtifactKind],
) -> dict[str, Any]:
    """Context shared by every artifact template in one synthesis pass."""
    return {
        "app_name": metadata.name,
        "app_description": metadata.description,
        "tech_stack": list(metadata.tech_stack),
        "artifact_ids": [kind.id for kind in kinds],
        "highlights": _highlights(groups.get(Category.FUNCTIONAL, [])),
    }


def _render_artifact(
    kind: ArtifactKind,
    context: dict[str, Any],
    groups: dict[Category, list[Requirement]],
    requirements: Sequence[Requirement],
    renderer: TemplateRenderer,
) -> Artifact:
    group = groups.get(kind.group, []) if kind.group is not None else []
    requirement_ids = kind.selector(group, requirements)
    artifact_context = {
        **context,
        "artifact_id": kind.id,
        "requirement_ids": requirement_ids,
    }
    artifact = Artifact(
        id=kind.id,
        path=kind.path,
        source_code=renderer.render(kind.template, artifact_context),
        satisfied_requirement_ids=requirement_ids,
    )
    artifact.test_code = _render_test(kind, artifact, requirements, renderer)
    return artifact


def _render_test(
    kind: ArtifactKind,
    artifact: Artifact,
    requirements: Sequence[Requirement],
    renderer: TemplateRenderer,
) -> str:
    """Render the companion test for *artifact*.

    Besides the smoke test, the test file carries one case per claimed
    requirement so each test documents what the artifact is traced to.
    """
    claimed = set(artifact.satisfied_requirement_ids)
    test_context = {
        **kind.test_params,
        "component_name": artifact.stem,
        "import_path": f"./{artifact.stem}",
        "file_name": artifact.name,
        "requirements": [req for req in requirements if req.id in claimed],
    }
    return renderer.render(kind.test_template, test_context)


# ---------------------------------------------------------------------------
# Iteration enrichment
# ---------------------------------------------------------------------------

def _annotation_history(source: str) -> str:
    """Return the iteration annotations already appended to *source*."""
    match = _ANNOTATION_START.search(source)
    if match is None:
        return ""
    return source[match.start():].rstrip("\n")


def render_annotation(artifact: Artifact, iteration: int, renderer: TemplateRenderer) -> str:
    """Render the iteration annotation comment for *artifact*'s file type."""
    context = {"iteration": iteration, "block_comment": artifact.path.endswith(".css")}
    return renderer.render(ANNOTATION_TEMPLATE, context).rstrip("\n")


def enrich_artifacts(
    artifacts: Sequence[Artifact],
    prior_artifacts: Sequence[Artifact],
    iteration: int,
    renderer: Optional[TemplateRenderer] = None,
) -> list[Artifact]:
    """Amend artifacts that carry forward from a previous iteration.

    Every artifact whose id matches a prior artifact keeps its freshly
    generated source, followed by the prior artifact's earlier iteration
    annotations, followed by a new annotation tagged with *iteration*.
    Artifacts without a prior match pass through unchanged.
    """
    renderer = renderer if renderer is not None else TemplateRenderer()
    prior_by_id = {prior.id: prior for prior in prior_artifacts}

    enriched: list[Artifact] = []
    for artifact in artifacts:
        prior = prior_by_id.get(artifact.id)
        if prior is None:
            enriched.append(artifact)
            continue
        source = (
            artifact.source_code.rstrip("\n")
            + _annotation_history(prior.source_code)
            + "\n\n"
            + render_annotation(artifact, iteration, renderer)
            + "\n"
        )
        enriched.append(artifact.model_copy(update={"source_code": source}))
    return enriched


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def synthesize(
    requirements: Sequence[Requirement],
    metadata: AppMetadata,
    iteration: int,
    prior_artifacts: Sequence[Artifact] = (),
    *,
    registry: Optional[ArtifactRegistry] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> list[Artifact]:
    """Generate the artifact set for one synthesis pass.

    Args:
        requirements: Current requirements, in store order.
        metadata: Application name, description and tech stack.
        iteration: The pass number (1-based).
        prior_artifacts: Artifacts from the previous pass; only used when
            *iteration* is greater than 1.
        registry: Artifact kinds to emit. Defaults to the built-in set.
        renderer: Template renderer. Defaults to the packaged templates.

    Returns:
        Artifacts in emission order: the root artifact, then the functional,
        UI and data groups, each in registration order.
    """
    registry = registry if registry is not None else default_registry()
    renderer = renderer if renderer is not None else TemplateRenderer()

    groups = group_requirements(requirements)
    kinds = [
        kind for kind in registry.kinds()
        if kind.group is None or groups.get(kind.group)
    ]
    context = _build_context(metadata, groups, kinds)

    artifacts = [
        _render_artifact(kind, context, groups, requirements, renderer)
        for kind in kinds
    ]

    if iteration > 1 and prior_artifacts:
        return enrich_artifacts(artifacts, prior_artifacts, iteration, renderer)
    return artifacts
