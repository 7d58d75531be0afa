"""Pydantic v2 models for the prdforge requirements extractor.

Defines the requirement record, the application metadata inferred from a
PRD, and the combined extraction result handed to the requirement store.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_APP_NAME = "My App"
DEFAULT_APP_DESCRIPTION = "A React application generated from PRD requirements"
MAX_DESCRIPTION_LENGTH = 100


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Category(str, Enum):
    """Requirement category, used to route requirements to artifact groups."""
    FUNCTIONAL = "functional"
    UI = "ui"
    DATA = "data"
    PERFORMANCE = "performance"
    SECURITY = "security"
    CUSTOM = "custom"


class Priority(str, Enum):
    """Requirement priority inferred from urgency/optionality language."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Status(str, Enum):
    """Lifecycle status of a requirement."""
    PENDING = "pending"
    ANALYZED = "analyzed"
    IMPLEMENTED = "implemented"
    TESTED = "tested"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def truncate_description(text: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    """Trim *text* and cut it to *limit* characters, ending with an ellipsis.

    Examples::

        truncate_description("  short ") -> "short"
        truncate_description("x" * 120) -> "x" * 97 + "..."
    """
    stripped = text.strip()
    if len(stripped) > limit:
        return stripped[: limit - 3] + "..."
    return stripped


def _ordered_unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


# ---------------------------------------------------------------------------
# Requirement
# ---------------------------------------------------------------------------

class Requirement(BaseModel):
    """A single structured requirement extracted from (or added to) a PRD."""
    id: str = Field(..., min_length=1, description="Unique id, e.g. 'req-3'")
    category: Category = Field(default=Category.FUNCTIONAL, description="Requirement category")
    description: str = Field(..., description="First line of the requirement, at most 100 chars")
    priority: Priority = Field(default=Priority.MEDIUM, description="Requirement priority")
    status: Status = Field(default=Status.PENDING, description="Lifecycle status")

    @field_validator("description")
    @classmethod
    def _normalise_description(cls, value: str) -> str:
        value = truncate_description(value)
        if not value:
            raise ValueError("requirement description must not be empty")
        return value


# ---------------------------------------------------------------------------
# Application metadata
# ---------------------------------------------------------------------------

class AppMetadata(BaseModel):
    """Application-level metadata inferred from the document."""
    name: str = Field(default=DEFAULT_APP_NAME, description="Application name")
    description: str = Field(
        default=DEFAULT_APP_DESCRIPTION, description="One-paragraph application description"
    )
    tech_stack: list[str] = Field(
        default_factory=list, description="Technologies, in discovery order without duplicates"
    )

    @field_validator("name")
    @classmethod
    def _default_name(cls, value: str) -> str:
        return value.strip() or DEFAULT_APP_NAME

    @field_validator("description")
    @classmethod
    def _default_description(cls, value: str) -> str:
        return value.strip() or DEFAULT_APP_DESCRIPTION

    @field_validator("tech_stack")
    @classmethod
    def _dedupe_stack(cls, value: list[str]) -> list[str]:
        return _ordered_unique(value)


# ---------------------------------------------------------------------------
# Extraction result
# ---------------------------------------------------------------------------

class ExtractionResult(BaseModel):
    """Complete result of extracting a PRD document."""
    name: str = Field(default=DEFAULT_APP_NAME, description="Inferred application name")
    description: str = Field(
        default=DEFAULT_APP_DESCRIPTION, description="Inferred application description"
    )
    tech_stack: list[str] = Field(default_factory=list, description="Inferred technologies")
    requirements: list[Requirement] = Field(
        default_factory=list, description="Requirements in document order"
    )

    @property
    def metadata(self) -> AppMetadata:
        """The name/description/tech stack as an ``AppMetadata``."""
        return AppMetadata(
            name=self.name,
            description=self.description,
            tech_stack=list(self.tech_stack),
        )
