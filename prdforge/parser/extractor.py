"""Core PRD requirements extractor for prdforge.

Turns raw document text into application metadata (name, description,
technology stack) and an ordered list of categorised, prioritised
requirements. Uses pure regex rules -- no AI calls -- and never raises for
sparse or malformed input: every step has a defined fallback.
"""

from __future__ import annotations

import re
from pathlib import Path

from prdforge.ingest import read_document

from .models import (
    DEFAULT_APP_DESCRIPTION,
    DEFAULT_APP_NAME,
    Category,
    ExtractionResult,
    Priority,
    Requirement,
    Status,
    truncate_description,
)
from .rules import (
    BASE_TECH_STACK,
    DESCRIPTION_RULES,
    NAME_RULES,
    TECH_RULES,
    all_matches,
    classify_category,
    classify_priority,
    first_match,
    is_requirement,
    name_from_leading_lines,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_SECTION_LENGTH = 10

# Headings, numbered items and bullets at the start of a line.
_SECTION_BREAK = re.compile(r"^[ \t]*(?:#{1,6}|\d+[.)]|[-*+])[ \t]+", re.MULTILINE)

_DEFAULT_REQUIREMENTS: tuple[tuple[Category, str, Priority], ...] = (
    (Category.FUNCTIONAL, "The application should allow users to view content", Priority.HIGH),
    (Category.UI, "The application should have a responsive design", Priority.MEDIUM),
    (Category.DATA, "The application should store user preferences", Priority.LOW),
)


# ---------------------------------------------------------------------------
# Metadata inference
# ---------------------------------------------------------------------------

def _extract_app_name(text: str) -> str:
    """Labeled fields first, then the leading-lines heuristic, then the default."""
    return first_match(NAME_RULES, text) or name_from_leading_lines(text) or DEFAULT_APP_NAME


def _extract_app_description(text: str) -> str:
    return first_match(DESCRIPTION_RULES, text) or DEFAULT_APP_DESCRIPTION


def _determine_tech_stack(text: str) -> list[str]:
    """Start from the base stack and append every matching technology group."""
    stack = list(BASE_TECH_STACK)
    for techs in all_matches(TECH_RULES, text):
        for tech in techs:
            if tech not in stack:
                stack.append(tech)
    return stack


# ---------------------------------------------------------------------------
# Section splitting
# ---------------------------------------------------------------------------

def _split_sections(text: str) -> list[str]:
    """Split *text* into candidate requirement sections.

    Headings, numbered items and bullets start a new section. A document
    with none of those markers is treated line by line, so plain prose
    with one requirement per line is still usable.
    """
    if _SECTION_BREAK.search(text):
        return _SECTION_BREAK.split(text)
    return text.splitlines()


def _build_requirement(section: str, position: int) -> Requirement:
    first_line = section.splitlines()[0]
    return Requirement(
        id=f"req-{position + 1}",
        category=classify_category(section),
        description=truncate_description(first_line),
        priority=classify_priority(section),
        status=Status.PENDING,
    )


def _extract_requirements(text: str) -> list[Requirement]:
    requirements: list[Requirement] = []
    for position, raw in enumerate(_split_sections(text)):
        section = raw.strip()
        if len(section) < MIN_SECTION_LENGTH:
            continue
        if not is_requirement(section):
            continue
        requirements.append(_build_requirement(section, position))

    if not requirements:
        requirements = default_requirements()
    return requirements


def default_requirements() -> list[Requirement]:
    """The fallback triple used when a document yields no requirements."""
    return [
        Requirement(id=f"req-{index}", category=category, description=description, priority=priority)
        for index, (category, description, priority) in enumerate(_DEFAULT_REQUIREMENTS, start=1)
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(text: str) -> ExtractionResult:
    """Extract application metadata and requirements from document text.

    Deterministic and total: identical input always yields identical
    output, and the result always holds at least one requirement.

    Args:
        text: Plain text of the PRD (headings, numbering or bullets are
            recognised as section breaks; unstructured text also works).

    Returns:
        An ``ExtractionResult`` with name, description, tech stack and
        requirements in document order.
    """
    text = text.replace("\r\n", "\n")
    return ExtractionResult(
        name=_extract_app_name(text),
        description=_extract_app_description(text),
        tech_stack=_determine_tech_stack(text),
        requirements=_extract_requirements(text),
    )


async def parse_requirements(document_path: str | Path) -> ExtractionResult:
    """Read a PRD from disk and extract it.

    Raises:
        FileNotFoundError: If the document does not exist.
        ValueError: If the file is not a text or markdown document.
    """
    text = await read_document(document_path)
    return extract(text)
