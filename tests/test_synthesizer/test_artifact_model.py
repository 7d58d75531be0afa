"""Tests for the Artifact model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from prdforge.synthesizer.models import Artifact


class TestArtifact:
    @pytest.mark.unit
    def test_defaults(self):
        artifact = Artifact(id="a", path="App.tsx")
        assert artifact.source_code == ""
        assert artifact.test_code is None
        assert artifact.satisfied_requirement_ids == []

    @pytest.mark.unit
    def test_requirement_ids_deduplicated(self):
        artifact = Artifact(id="a", path="App.tsx", satisfied_requirement_ids=["r2", "r1", "r2"])
        assert artifact.satisfied_requirement_ids == ["r2", "r1"]

    @pytest.mark.unit
    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            Artifact(id="a", path="")

    @pytest.mark.unit
    def test_name_and_stem(self):
        artifact = Artifact(id="a", path="hooks/useDataService.ts")
        assert artifact.name == "useDataService.ts"
        assert artifact.stem == "useDataService"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("pages/HomePage.tsx", "pages/HomePage.test.tsx"),
            ("hooks/useDataService.ts", "hooks/useDataService.test.ts"),
            ("legacy/widget.jsx", "legacy/widget.test.jsx"),
            ("App.css", "App.css.test.ts"),
        ],
    )
    def test_test_path(self, path: str, expected: str):
        assert Artifact(id="a", path=path).test_path == expected

    @pytest.mark.unit
    def test_json_round_trip_keeps_test_code(self):
        artifact = Artifact(id="a", path="App.tsx", source_code="x", test_code="y")
        assert Artifact.model_validate_json(artifact.model_dump_json()) == artifact
