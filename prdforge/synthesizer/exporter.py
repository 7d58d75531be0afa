"""Project export for generated artifacts.

Materialises an artifact set into a standalone Vite + React project:

- ``package.json``, ``README.md``, ``index.html``, ``vite.config.js``,
  ``tsconfig.json`` and ``src/main.tsx`` rendered from ``project/`` templates
- ``src/<path>`` for every artifact, plus ``src/<test_path>`` when the
  artifact carries a test

The same path -> content mapping is available without touching disk via
:meth:`ProjectExporter.build_file_tree`, for consumers such as an
in-browser preview sandbox.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from prdforge.parser.models import AppMetadata

from .models import Artifact
from .templates import TemplateRenderer, slugify, write_file


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_DEV_PORT = 3000

PROJECT_FILES: tuple[tuple[str, str], ...] = (
    ("project/package.json.j2", "package.json"),
    ("project/README.md.j2", "README.md"),
    ("project/index.html.j2", "index.html"),
    ("project/vite.config.js.j2", "vite.config.js"),
    ("project/tsconfig.json.j2", "tsconfig.json"),
    ("project/main.tsx.j2", "src/main.tsx"),
)


def _safe_relative(path: str) -> str:
    """Validate an artifact path and return it in POSIX form.

    Raises:
        ValueError: If *path* is absolute or escapes the project via ``..``.
    """
    posix = PurePosixPath(path.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts or not posix.parts:
        raise ValueError(f"Unsafe artifact path: {path!r}")
    return posix.as_posix()


def project_slug(metadata: AppMetadata) -> str:
    """Directory/package name for the exported project."""
    return slugify(metadata.name) or "app"


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """Builds and writes the file tree of a generated project."""

    def __init__(
        self,
        renderer: Optional[TemplateRenderer] = None,
        dev_port: int = DEFAULT_DEV_PORT,
    ) -> None:
        self.renderer = renderer if renderer is not None else TemplateRenderer()
        self.dev_port = dev_port

    def _context(self, artifacts: Sequence[Artifact], metadata: AppMetadata) -> dict[str, Any]:
        return {
            "app_name": metadata.name,
            "app_description": metadata.description,
            "tech_stack": list(metadata.tech_stack),
            "artifacts": list(artifacts),
            "dev_port": self.dev_port,
        }

    def build_file_tree(
        self,
        artifacts: Sequence[Artifact],
        metadata: AppMetadata,
    ) -> dict[str, str]:
        """Return an ordered ``{relative_path: content}`` mapping.

        Project scaffolding files come first, then each artifact's source
        and test in artifact order.

        Raises:
            ValueError: If an artifact path is absolute or contains ``..``.
        """
        context = self._context(artifacts, metadata)
        files: dict[str, str] = {
            output: self.renderer.render(template, context)
            for template, output in PROJECT_FILES
        }
        for artifact in artifacts:
            files[f"src/{_safe_relative(artifact.path)}"] = artifact.source_code
            if artifact.test_code is not None:
                files[f"src/{_safe_relative(artifact.test_path)}"] = artifact.test_code
        return files

    async def export(
        self,
        artifacts: Sequence[Artifact],
        metadata: AppMetadata,
        output_dir: str | Path,
    ) -> Path:
        """Write the project under ``output_dir/<slug>`` and return its root.

        The whole file tree is built (and validated) before anything is
        written.
        """
        files = self.build_file_tree(artifacts, metadata)
        project_root = Path(output_dir) / project_slug(metadata)
        for relative, content in files.items():
            await asyncio.to_thread(write_file, project_root / relative, content)
        return project_root
