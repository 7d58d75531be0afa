"""Tests for project export (exporter module)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prdforge.parser.models import AppMetadata
from prdforge.synthesizer.exporter import (
    PROJECT_FILES,
    ProjectExporter,
    _safe_relative,
    project_slug,
)
from prdforge.synthesizer.generator import synthesize
from prdforge.synthesizer.models import Artifact


pytestmark = pytest.mark.unit


@pytest.fixture
def artifacts(sample_requirements, sample_metadata, renderer) -> list[Artifact]:
    return synthesize(sample_requirements, sample_metadata, 1, renderer=renderer)


class TestSafeRelative:
    @pytest.mark.parametrize("path", ["App.tsx", "pages/HomePage.tsx", "a\\b.ts"])
    def test_accepts_relative(self, path: str):
        assert not _safe_relative(path).startswith("/")

    def test_normalises_backslashes(self):
        assert _safe_relative("pages\\Home.tsx") == "pages/Home.tsx"

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside.ts", "pages/../../x.ts", ""])
    def test_rejects_unsafe(self, path: str):
        with pytest.raises(ValueError, match="Unsafe artifact path"):
            _safe_relative(path)


class TestProjectSlug:
    def test_slug(self):
        assert project_slug(AppMetadata(name="News Reader")) == "news-reader"

    def test_fallback(self):
        assert project_slug(AppMetadata(name="!!!")) == "app"


class TestBuildFileTree:
    def test_project_files_first(self, artifacts, sample_metadata):
        files = ProjectExporter().build_file_tree(artifacts, sample_metadata)
        expected_head = [output for _, output in PROJECT_FILES]
        assert list(files)[: len(expected_head)] == expected_head

    def test_artifact_sources_and_tests(self, artifacts, sample_metadata):
        files = ProjectExporter().build_file_tree(artifacts, sample_metadata)
        assert files["src/App.tsx"] == artifacts[0].source_code
        assert "src/App.test.tsx" in files
        assert "src/pages/HomePage.test.tsx" in files
        assert "src/hooks/useDataService.test.ts" in files
        assert "src/App.css.test.ts" in files

    def test_artifact_without_test(self, sample_metadata):
        bare = [Artifact(id="x", path="util.ts", source_code="export {};\n")]
        files = ProjectExporter().build_file_tree(bare, sample_metadata)
        assert "src/util.ts" in files
        assert "src/util.test.ts" not in files

    def test_package_json_is_valid(self, artifacts, sample_metadata):
        files = ProjectExporter().build_file_tree(artifacts, sample_metadata)
        package = json.loads(files["package.json"])
        assert package["name"] == "news-reader"
        assert package["description"] == sample_metadata.description
        assert "react" in package["dependencies"]
        assert package["scripts"]["test"] == "vitest run"

    def test_tsconfig_is_valid_json(self, artifacts, sample_metadata):
        files = ProjectExporter().build_file_tree(artifacts, sample_metadata)
        json.loads(files["tsconfig.json"])

    def test_dev_port(self, artifacts, sample_metadata):
        files = ProjectExporter(dev_port=4321).build_file_tree(artifacts, sample_metadata)
        assert "port: 4321" in files["vite.config.js"]

    def test_readme_lists_artifacts(self, artifacts, sample_metadata):
        readme = ProjectExporter().build_file_tree(artifacts, sample_metadata)["README.md"]
        assert readme.startswith("# News Reader")
        assert "| `src/hooks/useDataService.ts` | req-4 |" in readme

    def test_index_html_escapes_name(self, artifacts):
        metadata = AppMetadata(name="<Tags> & Co")
        html = ProjectExporter().build_file_tree(artifacts, metadata)["index.html"]
        assert "<title>&lt;Tags&gt; &amp; Co</title>" in html

    def test_rejects_unsafe_artifact(self, sample_metadata):
        evil = [Artifact(id="evil", path="../../etc/cron.d/job")]
        with pytest.raises(ValueError):
            ProjectExporter().build_file_tree(evil, sample_metadata)


class TestExport:
    @pytest.mark.asyncio
    async def test_writes_project(self, artifacts, sample_metadata, tmp_path: Path):
        root = await ProjectExporter().export(artifacts, sample_metadata, tmp_path)

        assert root == tmp_path / "news-reader"
        assert (root / "package.json").exists()
        assert (root / "src" / "main.tsx").exists()
        assert (root / "src" / "components" / "FeatureCard.tsx").read_text(encoding="utf-8") == (
            next(a for a in artifacts if a.id == "feature-card").source_code
        )

    @pytest.mark.asyncio
    async def test_nothing_written_for_unsafe_paths(self, sample_metadata, tmp_path: Path):
        evil = [Artifact(id="ok", path="App.tsx"), Artifact(id="evil", path="/abs.ts")]
        with pytest.raises(ValueError):
            await ProjectExporter().export(evil, sample_metadata, tmp_path)
        assert not (tmp_path / "news-reader").exists()
