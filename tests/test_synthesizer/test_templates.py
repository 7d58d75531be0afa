"""Tests for the Jinja2 template renderer (templates module)."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from prdforge.synthesizer.templates import TemplateRenderer, slugify, write_file


class TestSlugify:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Recipe Box", "recipe-box"),
            ("  My  App!! ", "my-app"),
            ("Café 2.0", "caf-2-0"),
            ("***", ""),
        ],
    )
    def test_slugify(self, value: str, expected: str):
        assert slugify(value) == expected


class TestTemplateRenderer:
    @pytest.mark.unit
    def test_list_templates(self, renderer: TemplateRenderer):
        templates = renderer.list_templates()
        assert "components/app.tsx.j2" in templates
        assert "annotations/iteration.j2" in templates
        assert templates == sorted(templates)

    @pytest.mark.unit
    def test_list_templates_with_prefix(self, renderer: TemplateRenderer):
        assert renderer.list_templates("tests") == [
            "tests/component.test.tsx.j2",
            "tests/hook.test.ts.j2",
            "tests/stylesheet.test.ts.j2",
        ]

    @pytest.mark.unit
    def test_list_templates_missing_prefix(self, renderer: TemplateRenderer):
        assert renderer.list_templates("nope") == []

    @pytest.mark.unit
    def test_custom_template_dir(self, tmp_path: Path):
        (tmp_path / "hello.txt.j2").write_text("Hello {{ name|slugify }}!", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render("hello.txt.j2", {"name": "Big World"}) == "Hello big-world!"

    @pytest.mark.unit
    def test_undefined_variable_raises(self, tmp_path: Path):
        (tmp_path / "strict.j2").write_text("{{ missing }}", encoding="utf-8")
        with pytest.raises(UndefinedError):
            TemplateRenderer(tmp_path).render("strict.j2", {})

    @pytest.mark.unit
    def test_no_html_escaping(self, tmp_path: Path):
        (tmp_path / "jsx.j2").write_text("{{ markup }}", encoding="utf-8")
        rendered = TemplateRenderer(tmp_path).render("jsx.j2", {"markup": "<App />"})
        assert rendered == "<App />"

    @pytest.mark.unit
    def test_missing_template(self, renderer: TemplateRenderer):
        with pytest.raises(TemplateNotFound):
            renderer.render("does/not/exist.j2", {})

    @pytest.mark.unit
    def test_annotation_template(self, renderer: TemplateRenderer):
        rendered = renderer.render("annotations/iteration.j2", {"iteration": 2, "block_comment": False})
        assert rendered == (
            "// Iteration 2 improvements:\n"
            "// - Improved code structure\n"
            "// - Enhanced performance\n"
            "// - Fixed bugs from previous iteration\n"
        )


class TestWriteFile:
    @pytest.mark.unit
    def test_creates_parent_directories(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c.txt"
        write_file(target, "content")
        assert target.read_text(encoding="utf-8") == "content"
