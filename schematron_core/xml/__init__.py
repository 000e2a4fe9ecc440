"""
XML Processing Utilities
========================

Parsing and text helpers shared across the package.
"""

from schematron_core.xml.utils import (
    SCHEMATRON_NS,
    SVRL_NS,
    element_text,
    local_name,
    make_document_parser,
    normalize_whitespace,
    parse_document,
    to_text,
)

__all__ = [
    "SCHEMATRON_NS",
    "SVRL_NS",
    "element_text",
    "local_name",
    "make_document_parser",
    "normalize_whitespace",
    "parse_document",
    "to_text",
]
