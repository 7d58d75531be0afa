"""Ordered heuristic rules for the requirements extractor.

Every heuristic cascade (name, description, category, priority, technology)
is expressed as a list of ``Rule`` objects evaluated in priority order, so
each rule can be tested on its own.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .models import Category, Priority

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Rule primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule(Generic[T]):
    """A ``(predicate, extractor)`` pair with a label for diagnostics.

    ``extract`` may return ``None`` (or an empty value) to signal that the
    predicate matched but produced nothing usable; evaluation then moves on
    to the next rule.
    """

    label: str
    predicate: Callable[[str], bool]
    extract: Callable[[str], T | None]

    def apply(self, text: str) -> T | None:
        if not self.predicate(text):
            return None
        value = self.extract(text)
        return value or None


def first_match(rules: Iterable[Rule[T]], text: str) -> T | None:
    """Return the value of the first rule that matches *text*, or ``None``."""
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            return value
    return None


def all_matches(rules: Iterable[Rule[T]], text: str) -> list[T]:
    """Return the values of every rule that matches *text*, in rule order."""
    values: list[T] = []
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            values.append(value)
    return values


def keywords(*words: str) -> re.Pattern[str]:
    """Compile a case-insensitive pattern matching any word at a word start.

    ``keywords("ui", "style")`` matches "UI" and "styles" but not "require".
    Spaces inside a keyword match any run of whitespace.
    """
    alternatives = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in words)
    return re.compile(rf"\b(?:{alternatives})", re.IGNORECASE)


def keyword_rule(label: str, pattern: re.Pattern[str], value: T) -> Rule[T]:
    """Rule that yields a constant *value* whenever *pattern* is found."""
    return Rule(label=label, predicate=lambda text: bool(pattern.search(text)), extract=lambda _: value)


def labeled_field_rule(
    label: str,
    pattern: re.Pattern[str],
    collapse_newlines: bool = False,
) -> Rule[str]:
    """Rule that returns the trimmed first capture group of *pattern*."""

    def _extract(text: str) -> str | None:
        match = pattern.search(text)
        if match is None:
            return None
        value = match.group(1)
        if collapse_newlines:
            value = re.sub(r"\s*\n\s*", " ", value)
        return value.strip()

    return Rule(label=label, predicate=lambda text: bool(pattern.search(text)), extract=_extract)


# ---------------------------------------------------------------------------
# Application name
# ---------------------------------------------------------------------------

def _name_pattern(label: str) -> re.Pattern[str]:
    return re.compile(rf"\b{label}[ \t]*:[ \t]*([^\n]+)", re.IGNORECASE)


NAME_RULES: list[Rule[str]] = [
    labeled_field_rule("app-name", _name_pattern(r"App(?:lication)?[ \t]+Name")),
    labeled_field_rule("project-name", _name_pattern(r"Project[ \t]+Name")),
    labeled_field_rule("title", _name_pattern("Title")),
    labeled_field_rule("product", _name_pattern("Product")),
]

_LEADING_LINES_NAME = re.compile(
    r"^(?:the\s+)?([\w\s]{3,30}?)\s*(?:app|application|system|platform)?$",
    re.IGNORECASE,
)


def name_from_leading_lines(text: str, line_count: int = 5) -> str | None:
    """Guess a name from a short run of words at the top of the document.

    The first *line_count* lines are joined with spaces; if the result is a
    3-30 character run of words, a leading "The" and a trailing generic
    suffix (App/Application/System/Platform) are removed.

    Examples::

        name_from_leading_lines("The Recipe Box App") -> "Recipe Box"
        name_from_leading_lines("Budget Tracker")     -> "Budget Tracker"
    """
    head = " ".join(text.splitlines()[:line_count]).strip()
    match = _LEADING_LINES_NAME.match(head)
    if match is None:
        return None
    return match.group(1).strip() or None


# ---------------------------------------------------------------------------
# Application description
# ---------------------------------------------------------------------------

def _description_pattern(label: str) -> re.Pattern[str]:
    # A label at the start of a line (heading or "Label:"), any blank lines,
    # then the first content line plus up to three non-blank continuation lines.
    return re.compile(
        rf"^[ \t#>*-]*{label}[ \t]*(?::|$)[ \t]*(?:\n[ \t]*)*([^\n]+(?:\n[^\n]*\S[^\n]*){{0,3}})",
        re.IGNORECASE | re.MULTILINE,
    )


DESCRIPTION_RULES: list[Rule[str]] = [
    labeled_field_rule(label.lower(), _description_pattern(label), collapse_newlines=True)
    for label in ("Description", "Overview", "Summary", "Introduction")
]


# ---------------------------------------------------------------------------
# Technology stack
# ---------------------------------------------------------------------------

BASE_TECH_STACK: tuple[str, ...] = ("React", "TypeScript", "Tailwind CSS")

_RELATIONAL = keywords("sql", "relational", "postgres", "mysql")


def _persistence_stack(text: str) -> list[str]:
    return ["PostgreSQL"] if _RELATIONAL.search(text) else ["MongoDB"]


def _stack_rule(label: str, pattern: re.Pattern[str], extract: Callable[[str], list[str]]) -> Rule[list[str]]:
    return Rule(label=label, predicate=lambda text: bool(pattern.search(text)), extract=extract)


TECH_RULES: list[Rule[list[str]]] = [
    _stack_rule("mobile", keywords("mobile", "ios", "android", "responsive"), lambda _: ["React Native"]),
    _stack_rule("api", keywords("api", "rest", "graphql", "backend", "server"), lambda _: ["Node.js", "Express"]),
    _stack_rule("persistence", keywords("database", "data store", "datastore", "storage", "persist"), _persistence_stack),
    _stack_rule("auth", keywords("auth", "login", "user account", "permission", "role"), lambda _: ["Auth0"]),
    _stack_rule("testing", keywords("test", "jest", "cypress", "selenium"), lambda _: ["Jest", "React Testing Library"]),
]


# ---------------------------------------------------------------------------
# Requirement filtering and classification
# ---------------------------------------------------------------------------

REQUIREMENT_SIGNALS = keywords(
    "shall", "should", "must", "need", "require", "feature", "function", "capability",
    "user can", "users can", "system will", "application will",
)

CATEGORY_RULES: list[Rule[Category]] = [
    keyword_rule(
        "ui",
        keywords("ui", "ux", "interface", "design", "layout", "color", "colour", "style", "theme", "responsive"),
        Category.UI,
    ),
    keyword_rule(
        "data",
        keywords("data", "database", "storage", "persist", "save", "load", "retrieve"),
        Category.DATA,
    ),
    keyword_rule(
        "performance",
        keywords("performance", "speed", "fast", "optimize", "optimise", "efficient", "response time"),
        Category.PERFORMANCE,
    ),
    keyword_rule(
        "security",
        keywords("security", "secure", "auth", "login", "permission", "role", "protect", "encrypt"),
        Category.SECURITY,
    ),
]

PRIORITY_RULES: list[Rule[Priority]] = [
    keyword_rule(
        "high",
        keywords("critical", "crucial", "essential", "highest", "must", "urgent", "important"),
        Priority.HIGH,
    ),
    keyword_rule(
        "low",
        keywords("optional", "nice to have", "if possible", "could", "may", "low"),
        Priority.LOW,
    ),
]


def classify_category(text: str) -> Category:
    """Classify a section, defaulting to ``Category.FUNCTIONAL``."""
    return first_match(CATEGORY_RULES, text) or Category.FUNCTIONAL


def classify_priority(text: str) -> Priority:
    """Classify a section's priority, defaulting to ``Priority.MEDIUM``."""
    return first_match(PRIORITY_RULES, text) or Priority.MEDIUM


def is_requirement(text: str) -> bool:
    """Return ``True`` if *text* uses requirement-signalling vocabulary."""
    return bool(REQUIREMENT_SIGNALS.search(text))
