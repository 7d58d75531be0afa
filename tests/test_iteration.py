"""Tests for bounded iteration control (prdforge.iteration)."""

from __future__ import annotations

import pytest

from prdforge.iteration import DEFAULT_MAX_ITERATIONS, IterationController
from prdforge.store import RequirementStore


pytestmark = pytest.mark.unit


@pytest.fixture
def controller(store: RequirementStore, renderer) -> IterationController:
    return IterationController(store, renderer=renderer)


class TestIterationController:
    def test_default_cap(self, controller: IterationController):
        assert controller.max_iterations == DEFAULT_MAX_ITERATIONS == 3

    def test_invalid_cap(self, store: RequirementStore):
        with pytest.raises(ValueError):
            IterationController(store, max_iterations=0)

    def test_first_generate(self, controller: IterationController, store: RequirementStore):
        result = controller.generate()

        assert not result.refused
        assert result.iteration == 1
        assert store.iteration == 1
        assert store.artifacts == result.artifacts
        assert result.coverage.coverage_percent == pytest.approx(80.0)

    def test_counter_increments_by_one(self, controller: IterationController, store: RequirementStore):
        seen = []
        for _ in range(3):
            controller.generate()
            seen.append(store.iteration)
        assert seen == [1, 2, 3]

    def test_refuses_at_cap(self, controller: IterationController, store: RequirementStore):
        controller.run(3)
        before = [a.model_copy() for a in store.artifacts]

        result = controller.generate()

        assert result.refused
        assert result.iteration == 3
        assert store.iteration == 3
        assert store.artifacts == before
        assert not controller.can_generate
        assert controller.remaining == 0

    def test_carry_forward_between_passes(self, controller: IterationController):
        controller.generate()
        second = controller.generate()
        assert all("Iteration 2 improvements:" in a.source_code for a in second.artifacts)

    def test_picks_up_external_edits(self, controller: IterationController, store: RequirementStore):
        controller.generate()
        store.delete_requirement("req-4")

        result = controller.generate()

        assert "data-service" not in [a.id for a in result.artifacts]
        assert result.coverage.total_requirements == 4

    def test_run_stops_after_refusal(self, controller: IterationController):
        results = controller.run(5)
        assert [r.refused for r in results] == [False, False, False, True]
        assert [r.iteration for r in results] == [1, 2, 3, 3]

    def test_custom_cap(self, store: RequirementStore, renderer):
        controller = IterationController(store, max_iterations=1, renderer=renderer)
        assert not controller.generate().refused
        assert controller.generate().refused

    def test_externally_set_counter_respected(self, controller: IterationController, store: RequirementStore):
        store.iteration = 3
        assert controller.generate().refused
        assert store.artifacts == []
