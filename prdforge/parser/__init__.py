"""prdforge requirements extractor.

Parses PRD text and extracts application metadata plus structured,
categorised requirements for code synthesis.

Usage::

    from prdforge.parser import extract, parse_requirements

    result = extract(document_text)
    print(result.name, result.tech_stack)
    print(result.requirements)

    result = await parse_requirements("path/to/prd.md")
"""

from prdforge.parser.models import (
    AppMetadata,
    Category,
    ExtractionResult,
    Priority,
    Requirement,
    Status,
)
from prdforge.parser.extractor import extract, parse_requirements

__all__ = [
    "extract",
    "parse_requirements",
    "AppMetadata",
    "Category",
    "ExtractionResult",
    "Priority",
    "Requirement",
    "Status",
]
