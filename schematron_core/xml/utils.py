"""
XML Utility Functions
=====================

Parsing and text helpers shared by the executor and the report builder.
"""

from typing import Any, Optional, Union
import logging
import re

from lxml import etree

logger = logging.getLogger(__name__)

SCHEMATRON_NS = "http://purl.oclc.org/dsdl/schematron"
SVRL_NS = "http://purl.oclc.org/dsdl/svrl"

_WHITESPACE = re.compile(r"\s+")


def make_document_parser() -> etree.XMLParser:
    """Parser for untrusted input documents: no entities, no network, no DTD."""
    return etree.XMLParser(
        dtd_validation=False,
        load_dtd=False,
        resolve_entities=False,
        no_network=True,
        remove_blank_text=False,
    )


def parse_document(document: Union[bytes, str, etree._Element, etree._ElementTree],
                   base_url: Optional[str] = None) -> etree._ElementTree:
    """
    Parse a document into an ElementTree.

    Strings are encoded as UTF-8 first so documents carrying an XML
    declaration are accepted.

    Raises:
        etree.XMLSyntaxError: If the content is not well-formed
        TypeError: If the document is of an unsupported type
    """
    if isinstance(document, etree._ElementTree):
        return document
    if isinstance(document, etree._Element):
        return etree.ElementTree(document)
    if isinstance(document, str):
        document = document.encode("utf-8")
    if not isinstance(document, (bytes, bytearray)):
        raise TypeError(f"Cannot parse document of type {type(document).__name__}")

    root = etree.fromstring(bytes(document), make_document_parser(), base_url=base_url)
    return etree.ElementTree(root)


def local_name(element: Any) -> str:
    """
    Extract local name from element tag, stripping any namespace prefix.

    Example:
        >>> elem = etree.Element("{http://purl.oclc.org/dsdl/svrl}failed-assert")
        >>> local_name(elem)
        'failed-assert'
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def element_text(element: Any) -> str:
    """All descendant text of ``element``, whitespace-normalized."""
    if element is None:
        return ""
    return normalize_whitespace("".join(element.itertext()))


def to_text(tree: Union[etree._Element, etree._ElementTree]) -> str:
    """Serialize a tree to a pretty-printed unicode string."""
    return etree.tostring(tree, encoding="unicode", pretty_print=True)
