"""prdforge component synthesizer -- requirement-traced React artifacts.

Renders a registry of Jinja2 artifact templates against the current
requirement set and application metadata.  Every artifact records the
requirement ids it claims, and later iterations amend artifacts carried
forward from earlier passes.

Quick usage::

    from prdforge.synthesizer import synthesize, ProjectExporter

    artifacts = synthesize(requirements, metadata, iteration=1)
    project_root = await ProjectExporter().export(artifacts, metadata, "/tmp/out")
"""

from prdforge.synthesizer.exporter import ProjectExporter
from prdforge.synthesizer.generator import enrich_artifacts, group_requirements, synthesize
from prdforge.synthesizer.models import Artifact
from prdforge.synthesizer.registry import ArtifactKind, ArtifactRegistry, default_registry
from prdforge.synthesizer.templates import TemplateRenderer

__all__ = [
    "Artifact",
    "ArtifactKind",
    "ArtifactRegistry",
    "ProjectExporter",
    "TemplateRenderer",
    "default_registry",
    "enrich_artifacts",
    "group_requirements",
    "synthesize",
]
