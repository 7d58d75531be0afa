"""Pydantic v2 model for generated artifacts."""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_SCRIPT_SUFFIX = re.compile(r"\.(tsx|ts|jsx|js)$")


class Artifact(BaseModel):
    """A generated source file, its companion test, and the requirements it claims."""
    id: str = Field(..., min_length=1, description="Stable artifact id, e.g. 'home-page'")
    path: str = Field(..., min_length=1, description="Slash-delimited path relative to src/")
    source_code: str = Field(default="", description="Generated source")
    test_code: Optional[str] = Field(default=None, description="Generated companion test")
    satisfied_requirement_ids: list[str] = Field(
        default_factory=list,
        description="Requirement ids this artifact claims to satisfy (ordered, unique)",
    )

    @field_validator("satisfied_requirement_ids")
    @classmethod
    def _dedupe_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def name(self) -> str:
        """Final path segment, e.g. ``HomePage.tsx``."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def stem(self) -> str:
        """File name without its extension, e.g. ``HomePage``."""
        return self.name.split(".", 1)[0]

    @property
    def test_path(self) -> str:
        """Where the companion test lives.

        Examples::

            "pages/HomePage.tsx" -> "pages/HomePage.test.tsx"
            "App.css"            -> "App.css.test.ts"
        """
        if _SCRIPT_SUFFIX.search(self.path):
            return _SCRIPT_SUFFIX.sub(r".test.\1", self.path)
        return f"{self.path}.test.ts"
