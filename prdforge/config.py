"""prdforge configuration.

Centralised, typed configuration for the CLI pipeline. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from prdforge.iteration import DEFAULT_MAX_ITERATIONS
from prdforge.synthesizer.exporter import DEFAULT_DEV_PORT


class Config(BaseModel):
    """Global prdforge configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``Pipeline``.
    """

    project_name: str = Field(default="", description="Overrides the inferred application name")
    output_dir: Path = Field(default=Path("./output"))
    state_dir: str = Field(default=".prdforge")
    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS, ge=1, description="Synthesis passes allowed per store"
    )
    iterations: int = Field(default=1, ge=1, description="Synthesis passes the CLI runs")
    fetch_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for fetching remote documents"
    )
    dev_port: int = Field(default=DEFAULT_DEV_PORT, ge=1, le=65535)
    export: bool = Field(default=True, description="Write the generated project to disk")

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def state_path(self) -> Path:
        """Root of the ``.prdforge/`` metadata directory inside the output."""
        return self.output_dir / self.state_dir

    @property
    def store_path(self) -> Path:
        """Path to the persisted requirement store."""
        return self.state_path / "store.json"

    @property
    def coverage_path(self) -> Path:
        """Path to the latest coverage report."""
        return self.state_path / "coverage.json"

    @property
    def trace_path(self) -> Path:
        """Path to the requirement -> artifact trace matrix."""
        return self.state_path / "trace.json"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<state_path>/config.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.state_path / "config.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            PRDFORGE_PROJECT_NAME, PRDFORGE_OUTPUT_DIR, PRDFORGE_MAX_ITERATIONS,
            PRDFORGE_ITERATIONS, PRDFORGE_FETCH_TIMEOUT, PRDFORGE_DEV_PORT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PRDFORGE_PROJECT_NAME"):
            kwargs["project_name"] = os.environ["PRDFORGE_PROJECT_NAME"]
        if os.environ.get("PRDFORGE_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["PRDFORGE_OUTPUT_DIR"])
        if os.environ.get("PRDFORGE_MAX_ITERATIONS"):
            kwargs["max_iterations"] = int(os.environ["PRDFORGE_MAX_ITERATIONS"])
        if os.environ.get("PRDFORGE_ITERATIONS"):
            kwargs["iterations"] = int(os.environ["PRDFORGE_ITERATIONS"])
        if os.environ.get("PRDFORGE_FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = float(os.environ["PRDFORGE_FETCH_TIMEOUT"])
        if os.environ.get("PRDFORGE_DEV_PORT"):
            kwargs["dev_port"] = int(os.environ["PRDFORGE_DEV_PORT"])
        return cls(**kwargs)

    def ensure_directories(self) -> None:
        """Create the directories that must exist before the pipeline runs."""
        self.state_path.mkdir(parents=True, exist_ok=True)
