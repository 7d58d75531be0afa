"""Shared pytest fixtures for the prdforge test suite.

Provides reusable fixtures for:
- Sample PRD documents (file and inline text)
- Pre-built requirement sets and application metadata
- A template renderer and requirement store
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from prdforge.parser.models import AppMetadata, Category, Priority, Requirement
from prdforge.store import RequirementStore
from prdforge.synthesizer.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_prd_path() -> Path:
    """Path to the sample-prd.md fixture file."""
    path = Path(__file__).parent / "fixtures" / "sample-prd.md"
    assert path.exists(), f"Sample PRD fixture not found at {path}"
    return path


@pytest.fixture
def sample_prd_text(sample_prd_path: Path) -> str:
    """Contents of the sample PRD."""
    return sample_prd_path.read_text(encoding="utf-8")


@pytest.fixture
def taskmaster_text() -> str:
    """Unstructured three-line PRD: a title and two requirement lines."""
    return (
        "Title: TaskMaster\n"
        "Users must be able to create tasks. This is critical.\n"
        "The UI should be responsive."
    )


@pytest.fixture
def numbered_prd_text() -> str:
    """PRD using numbered items as section breaks."""
    return textwrap.dedent("""\
        App Name: Fleet Tracker
        Description: Tracks delivery vans in real time.

        1. Drivers must be able to log their current location.
        2. The dashboard should use a dark theme.
        3. Trip history should be stored in a SQL database.
    """)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_requirements() -> list[Requirement]:
    """One requirement per synthesized group plus an ungrouped one."""
    return [
        Requirement(
            id="req-1",
            category=Category.FUNCTIONAL,
            description="Users can browse the home page feed",
            priority=Priority.HIGH,
        ),
        Requirement(
            id="req-2",
            category=Category.FUNCTIONAL,
            description="Users can bookmark articles",
        ),
        Requirement(
            id="req-3",
            category=Category.UI,
            description="Articles should display as cards",
        ),
        Requirement(
            id="req-4",
            category=Category.DATA,
            description="Bookmarks should persist between sessions",
            priority=Priority.LOW,
        ),
        Requirement(
            id="req-5",
            category=Category.SECURITY,
            description="Only signed-in users may bookmark",
        ),
    ]


@pytest.fixture
def sample_metadata() -> AppMetadata:
    return AppMetadata(
        name="News Reader",
        description="Read and bookmark the latest articles.",
        tech_stack=["React", "TypeScript", "Tailwind CSS"],
    )


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Renderer over the packaged templates."""
    return TemplateRenderer()


@pytest.fixture
def store(sample_requirements: list[Requirement], sample_metadata: AppMetadata) -> RequirementStore:
    """Store pre-loaded with the sample requirements and metadata."""
    return RequirementStore(requirements=sample_requirements, metadata=sample_metadata)
