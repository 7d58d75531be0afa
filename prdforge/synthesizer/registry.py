"""Artifact kinds and the registry that drives synthesis.

Each ``ArtifactKind`` names a template, the requirement group that triggers
it, and a selector that picks the requirement ids the artifact claims.
New artifact kinds are added by registering them, not by branching in the
generator.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from prdforge.parser.models import Category, Requirement

# (requirements in the triggering group, all requirements) -> claimed ids
Selector = Callable[[Sequence[Requirement], Sequence[Requirement]], list[str]]

# Emission order of groups. ``None`` is the unconditional root group.
GROUP_ORDER: tuple[Optional[Category], ...] = (
    None,
    Category.FUNCTIONAL,
    Category.UI,
    Category.DATA,
)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

def no_requirements(group: Sequence[Requirement], requirements: Sequence[Requirement]) -> list[str]:
    return []


def whole_group(group: Sequence[Requirement], requirements: Sequence[Requirement]) -> list[str]:
    return [req.id for req in group]


def categories(*wanted: Category) -> Selector:
    """Select every requirement (from the full set) in one of *wanted*."""

    def _select(group: Sequence[Requirement], requirements: Sequence[Requirement]) -> list[str]:
        return [req.id for req in requirements if req.category in wanted]

    return _select


def mentioning(*words: str, fallback_first: bool = False) -> Selector:
    """Select group members whose description mentions any of *words*.

    With *fallback_first*, an empty selection falls back to the first
    member of the group.
    """

    def _select(group: Sequence[Requirement], requirements: Sequence[Requirement]) -> list[str]:
        selected = [
            req.id for req in group
            if any(word in req.description.lower() for word in words)
        ]
        if not selected and fallback_first and group:
            selected = [group[0].id]
        return selected

    return _select


# ---------------------------------------------------------------------------
# Artifact kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArtifactKind:
    """Declarative description of one generated artifact.

    Attributes:
        id: Stable artifact id, used to match artifacts across iterations.
        path: Output path relative to ``src/``.
        template: Source template, relative to the template root.
        test_template: Companion test template.
        group: Requirement category that triggers the artifact, or ``None``
            for artifacts that are always emitted.
        selector: Picks the requirement ids the artifact claims.
        test_params: Extra context for the test template (e.g. the JSX
            used to mount a component).
    """

    id: str
    path: str
    template: str
    test_template: str
    group: Optional[Category] = None
    selector: Selector = no_requirements
    test_params: dict[str, Any] = field(default_factory=dict)


class ArtifactRegistry:
    """Ordered collection of artifact kinds."""

    def __init__(self, kinds: Iterable[ArtifactKind] = ()) -> None:
        self._kinds: list[ArtifactKind] = []
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ArtifactKind) -> None:
        """Add *kind*; ids must be unique within the registry."""
        if kind.group not in GROUP_ORDER:
            raise ValueError(f"Artifact kind {kind.id!r} uses unsupported group {kind.group}")
        if any(existing.id == kind.id for existing in self._kinds):
            raise ValueError(f"Artifact kind already registered: {kind.id}")
        self._kinds.append(kind)

    def kinds(self) -> list[ArtifactKind]:
        """All kinds in emission order: by group, then registration order."""
        return sorted(self._kinds, key=lambda kind: GROUP_ORDER.index(kind.group))

    def __len__(self) -> int:
        return len(self._kinds)

    def __contains__(self, artifact_id: object) -> bool:
        return any(kind.id == artifact_id for kind in self._kinds)


def default_registry() -> ArtifactRegistry:
    """The built-in React artifact set."""
    return ArtifactRegistry([
        ArtifactKind(
            id="app-component",
            path="App.tsx",
            template="components/app.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            selector=categories(Category.FUNCTIONAL, Category.UI),
            test_params={"markup": "<App />", "with_router": False},
        ),
        ArtifactKind(
            id="home-page",
            path="pages/HomePage.tsx",
            template="pages/home_page.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.FUNCTIONAL,
            selector=mentioning("home", "landing", "main", fallback_first=True),
            test_params={"markup": "<HomePage />", "with_router": True},
        ),
        ArtifactKind(
            id="about-page",
            path="pages/AboutPage.tsx",
            template="pages/about_page.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.FUNCTIONAL,
            test_params={"markup": "<AboutPage />", "with_router": True},
        ),
        ArtifactKind(
            id="header-component",
            path="components/Header.tsx",
            template="components/header.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.FUNCTIONAL,
            test_params={"markup": '<Header appName="Test App" />', "with_router": True},
        ),
        ArtifactKind(
            id="footer-component",
            path="components/Footer.tsx",
            template="components/footer.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.FUNCTIONAL,
            test_params={"markup": "<Footer />", "with_router": True},
        ),
        ArtifactKind(
            id="feature-card",
            path="components/FeatureCard.tsx",
            template="components/feature_card.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.UI,
            selector=mentioning("card", "display"),
            test_params={
                "markup": '<FeatureCard title="Title" description="Description" icon="*" />',
                "with_router": False,
            },
        ),
        ArtifactKind(
            id="button-component",
            path="components/Button.tsx",
            template="components/button.tsx.j2",
            test_template="tests/component.test.tsx.j2",
            group=Category.UI,
            selector=mentioning("button", "click"),
            test_params={"markup": "<Button>Click me</Button>", "with_router": False},
        ),
        ArtifactKind(
            id="app-css",
            path="App.css",
            template="styles/app.css.j2",
            test_template="tests/stylesheet.test.ts.j2",
            group=Category.UI,
            selector=mentioning("style", "css", "design"),
        ),
        ArtifactKind(
            id="data-service",
            path="hooks/useDataService.ts",
            template="hooks/use_data_service.ts.j2",
            test_template="tests/hook.test.ts.j2",
            group=Category.DATA,
            selector=whole_group,
        ),
    ])
