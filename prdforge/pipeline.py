"""prdforge Pipeline Orchestrator.

Implements the 4-stage document-to-project pipeline:

Stage 1: EXTRACT    -- Load the PRD, extract metadata and requirements.
Stage 2: SYNTHESIZE -- Run bounded synthesis passes over the requirement store.
Stage 3: AUDIT      -- Compute coverage and the requirement trace matrix.
Stage 4: EXPORT     -- Write the generated React project to disk.

Usage::

    python -m prdforge.pipeline requirements.md --output ./my-project
    python -m prdforge.pipeline https://example.com/prd.md --iterations 2
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
import traceback
from datetime import datetime, timezone
from typing import Any

import httpx
from rich.panel import Panel

from prdforge.config import Config
from prdforge.coverage import audit, trace
from prdforge.ingest import load_document
from prdforge.iteration import IterationController
from prdforge.parser import extract
from prdforge.store import RequirementStore
from prdforge.synthesizer import ProjectExporter, TemplateRenderer
from prdforge.utils import (
    STAGE_NAMES,
    console,
    format_duration,
    load_json,
    print_error,
    print_requirements_table,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Raised when a pipeline stage fails irrecoverably."""

    def __init__(self, stage: int, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage {stage} ({STAGE_NAMES.get(stage, '?')}): {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives a single document through extraction, synthesis, audit and export.

    Attributes:
        config: Global pipeline configuration.
        store: The requirement store shared by every stage.
        state: Mutable dictionary that accumulates results from each stage.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.store = RequirementStore()
        self.renderer = TemplateRenderer()
        self.controller = IterationController(
            self.store, config.max_iterations, renderer=self.renderer
        )
        self.exporter = ProjectExporter(self.renderer, dev_port=config.dev_port)
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "stages_completed": [],
            "stages_failed": [],
            "success": False,
        }

    _STAGE_METHODS: dict[int, str] = {
        1: "stage1_extract",
        2: "stage2_synthesize",
        3: "stage3_audit",
        4: "stage4_export",
    }

    @property
    def stages(self) -> list[int]:
        if self.config.export:
            return [1, 2, 3, 4]
        return [1, 2, 3]

    async def run(self, source: str) -> dict[str, Any]:
        """Execute every enabled stage in order.

        Args:
            source: Local path or ``http(s)`` URL of the requirements document.

        Returns:
            The final state dictionary, including a top-level ``success`` flag.
        """
        pipeline_start = time.monotonic()

        console.print(
            Panel(
                f"[bold bright_cyan]prdforge[/bold bright_cyan]\n"
                f"Source     : {source}\n"
                f"Output     : {self.config.output_dir.resolve()}\n"
                f"Iterations : {self.config.iterations} (max {self.config.max_iterations})",
                title="[bold]Pipeline Start[/bold]",
                border_style="bright_cyan",
            )
        )
        self.config.ensure_directories()
        self.state["source"] = source

        all_success = True
        for stage in self.stages:
            print_stage_header(stage)
            stage_name = STAGE_NAMES[stage]
            stage_start = time.monotonic()
            try:
                method = getattr(self, self._STAGE_METHODS[stage])
                if stage == 1:
                    result = await method(source)
                else:
                    result = await method()

                elapsed = time.monotonic() - stage_start
                self.state[f"stage{stage}"] = result
                self.state["stages_completed"].append(stage)
                print_success(
                    f"Stage {stage} ({stage_name}) completed in {format_duration(elapsed)}"
                )

            except PipelineError as exc:
                elapsed = time.monotonic() - stage_start
                all_success = False
                self.state["stages_failed"].append(stage)
                self.state[f"stage{stage}_error"] = str(exc)
                print_error(
                    f"Stage {stage} ({stage_name}) FAILED after {format_duration(elapsed)}: {exc}"
                )
                break

            except Exception as exc:
                elapsed = time.monotonic() - stage_start
                all_success = False
                self.state["stages_failed"].append(stage)
                tb = traceback.format_exc()
                self.state[f"stage{stage}_error"] = tb
                print_error(
                    f"Stage {stage} ({stage_name}) FAILED after {format_duration(elapsed)}: {exc}"
                )
                console.print(f"[dim]{tb}[/dim]")
                break

        await asyncio.to_thread(self.store.save, self.config.store_path)

        total_elapsed = time.monotonic() - pipeline_start
        self.state["success"] = all_success
        self.state["total_duration"] = format_duration(total_elapsed)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()

        self._print_final_summary(total_elapsed)
        return self.state

    # ------------------------------------------------------------------
    # Stage 1: EXTRACT
    # ------------------------------------------------------------------

    async def stage1_extract(self, source: str) -> dict[str, Any]:
        """Load *source* and populate the store from the extraction."""
        try:
            text = await load_document(source, timeout=self.config.fetch_timeout)
        except FileNotFoundError as exc:
            raise PipelineError(1, str(exc)) from exc
        except ValueError as exc:
            raise PipelineError(1, str(exc)) from exc
        except httpx.HTTPError as exc:
            raise PipelineError(1, f"Failed to fetch {source}: {exc}") from exc

        if not text.strip():
            print_warning("Document is empty -- falling back to default requirements.")

        self.store.load_extraction(extract(text))
        if self.config.project_name:
            self.store.set_metadata(name=self.config.project_name)

        print_requirements_table(
            [
                {
                    "id": req.id,
                    "category": req.category.value,
                    "priority": req.priority.value,
                    "description": req.description,
                }
                for req in self.store.requirements
            ]
        )
        print_summary_table(
            {
                "Name": self.store.metadata.name,
                "Description": self.store.metadata.description,
                "Tech stack": ", ".join(self.store.metadata.tech_stack),
                "Requirements": len(self.store.requirements),
            },
            title="Application",
        )
        return {
            "name": self.store.metadata.name,
            "requirements": len(self.store.requirements),
        }

    # ------------------------------------------------------------------
    # Stage 2: SYNTHESIZE
    # ------------------------------------------------------------------

    async def stage2_synthesize(self) -> dict[str, Any]:
        """Run the configured number of synthesis passes."""
        results = self.controller.run(self.config.iterations)
        completed = [r for r in results if not r.refused]
        if any(r.refused for r in results):
            print_warning(
                f"Iteration cap reached ({self.config.max_iterations}); "
                f"ran {len(completed)} of {self.config.iterations} requested pass(es)."
            )
        for result in completed:
            console.print(
                f"  [green]+[/green] Iteration {result.iteration}: "
                f"{len(result.artifacts)} artifact(s), "
                f"{result.coverage.coverage_percent:.1f}% coverage"
            )
        return {
            "iteration": self.store.iteration,
            "artifacts": [artifact.path for artifact in self.store.artifacts],
        }

    # ------------------------------------------------------------------
    # Stage 3: AUDIT
    # ------------------------------------------------------------------

    async def stage3_audit(self) -> dict[str, Any]:
        """Compute coverage and persist the report and trace matrix.

        The coverage report left by an earlier run in the same output
        directory, if any, is read first so the change can be reported.
        """
        report = audit(self.store.requirements, self.store.artifacts)
        matrix = trace(self.store.requirements, self.store.artifacts)
        previous = self._previous_coverage()

        await save_json(report.model_dump(), self.config.coverage_path)
        await save_json(matrix, self.config.trace_path)

        summary: dict[str, Any] = {
            "Requirements": report.total_requirements,
            "Covered": report.covered_requirements,
            "Coverage": f"{report.coverage_percent:.1f}%",
        }
        if previous is not None:
            summary["Previous run"] = f"{previous:.1f}%"
        print_summary_table(summary, title="Coverage")
        for description in report.uncovered_descriptions:
            print_warning(f"  Uncovered: {description}")

        return {**report.model_dump(), "previous_coverage_percent": previous}

    def _previous_coverage(self) -> float | None:
        """Coverage percentage from the last saved report, or ``None``."""
        path = self.config.coverage_path
        if not path.exists():
            return None
        try:
            data = load_json(path)
        except json.JSONDecodeError:
            print_warning(f"Ignoring unreadable coverage report: {path}")
            return None
        value = data.get("coverage_percent")
        return float(value) if isinstance(value, (int, float)) else None

    # ------------------------------------------------------------------
    # Stage 4: EXPORT
    # ------------------------------------------------------------------

    async def stage4_export(self) -> dict[str, Any]:
        """Write the generated project under the output directory."""
        if not self.store.artifacts:
            raise PipelineError(4, "No artifacts to export")
        try:
            project_root = await self.exporter.export(
                self.store.artifacts, self.store.metadata, self.config.output_dir
            )
        except (OSError, ValueError) as exc:
            raise PipelineError(4, f"Export failed: {exc}") from exc

        console.print(f"  [green]+[/green] Project written to {project_root}")
        return {"project_root": str(project_root)}

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_final_summary(self, total_elapsed: float) -> None:
        """Print the final pipeline summary panel."""
        stages_ok = self.state.get("stages_completed", [])
        stages_fail = self.state.get("stages_failed", [])

        if self.state.get("success"):
            border_style = "bold green"
            status_text = "[bold green]PIPELINE SUCCEEDED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]PIPELINE FAILED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration  : {format_duration(total_elapsed)}",
            f"Completed : {', '.join(str(s) for s in stages_ok) or 'none'}",
        ]
        if stages_fail:
            detail_lines.append(f"Failed    : {', '.join(str(s) for s in stages_fail)}")
        detail_lines.extend([
            "",
            f"Output    : {self.config.output_dir.resolve()}",
            f"Store     : {self.config.store_path}",
        ])

        console.print()
        console.print(
            Panel(
                "\n".join(detail_lines),
                title="[bold]Pipeline Complete[/bold]",
                border_style=border_style,
            )
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``prdforge`` and ``python -m prdforge.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="prdforge",
        description="prdforge -- turn a PRD into a requirement-traced React project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  prdforge requirements.md\n"
            "  prdforge requirements.md -o ./my-project --iterations 2\n"
            "  prdforge https://example.com/prd.md --project-name my-app --no-export\n"
        ),
    )
    parser.add_argument("source", help="Path or http(s) URL of the requirements document")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: ./output)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Synthesis passes to run (default: 1)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Iteration cap for the requirement store (default: 3)",
    )
    parser.add_argument(
        "--project-name",
        default=None,
        help="Override the application name inferred from the document",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip writing the generated project to disk",
    )

    args = parser.parse_args(argv)

    config = Config.from_env()
    overrides: dict[str, Any] = {}
    if args.output:
        overrides["output_dir"] = args.output
    if args.iterations is not None:
        overrides["iterations"] = args.iterations
    if args.max_iterations is not None:
        overrides["max_iterations"] = args.max_iterations
    if args.project_name:
        overrides["project_name"] = args.project_name
    if args.no_export:
        overrides["export"] = False

    try:
        config = Config.model_validate({**config.model_dump(), **overrides})
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid options: {exc}")
        sys.exit(1)

    pipeline = Pipeline(config)
    result = asyncio.run(pipeline.run(args.source))

    if result.get("success"):
        console.print("[bold green]Pipeline completed successfully![/bold green]")
    else:
        console.print("[bold red]Pipeline failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
