"""
XSLT Transformer
================

Loading and applying XSLT stylesheets fetched through a ResourceResolver.
Every call returns the diagnostics libxslt reported so callers can decide
which ones are fatal.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union
import logging

from lxml import etree

from schematron_core.resources.resolver import (
    LxmlResolverBridge,
    ResourceResolver,
    normalize_resource_path,
)
from schematron_core.transform.diagnostics import (
    Diagnostic,
    Severity,
    diagnostics_from_log,
)

logger = logging.getLogger(__name__)


class XSLTLoadError(Exception):
    """A stylesheet could not be fetched, parsed or compiled."""

    def __init__(self, message: str, path: str, missing: Optional[List[str]] = None,
                 diagnostics: Optional[List[Diagnostic]] = None):
        super().__init__(message)
        self.path = path
        self.missing = list(missing or [])
        self.diagnostics = list(diagnostics or [])


class XSLTRunError(Exception):
    """Applying a stylesheet raised an error."""

    def __init__(self, message: str, missing: Optional[List[str]] = None,
                 diagnostics: Optional[List[Diagnostic]] = None):
        super().__init__(message)
        self.missing = list(missing or [])
        self.diagnostics = list(diagnostics or [])


@dataclass
class TransformResult:
    """Output tree of one transformation plus what libxslt reported."""

    tree: etree._ElementTree
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def failures(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity.aborts]


def parse_with_bridge(data: bytes, bridge: LxmlResolverBridge,
                      base_url: Optional[str] = None) -> etree._ElementTree:
    """
    Parse XML bytes with a parser whose URL lookups go through ``bridge``.

    Raises:
        etree.XMLSyntaxError: If the bytes are not well-formed XML
    """
    parser = bridge.make_parser()
    root = etree.fromstring(data, parser, base_url=base_url)
    return etree.ElementTree(root)


def load_xslt_transform(path: str, resolver: ResourceResolver,
                        bridge: Optional[LxmlResolverBridge] = None) -> etree.XSLT:
    """
    Load an XSLT stylesheet through a resolver.

    Args:
        path: Relative resource path of the stylesheet
        resolver: Resolver used for the stylesheet and everything it imports
        bridge: Optional bridge to share miss tracking with the caller

    Returns:
        Compiled XSLT transform

    Raises:
        ResourceNotFoundError: If the stylesheet itself cannot be resolved
        XSLTLoadError: If the stylesheet or one of its imports fails
    """
    bridge = bridge or LxmlResolverBridge(resolver)
    path = normalize_resource_path(path)

    logger.debug(f"Loading XSLT stylesheet: {path}")
    data = resolver.resolve(path)

    try:
        xslt_doc = parse_with_bridge(data, bridge, base_url=path)
    except etree.XMLSyntaxError as e:
        raise XSLTLoadError(f"Malformed XSLT stylesheet {path}: {e}", path) from e

    try:
        transform = etree.XSLT(xslt_doc)
    except etree.XSLTParseError as e:
        diagnostics = diagnostics_from_log(e.error_log, source=path)
        raise XSLTLoadError(
            f"Could not compile XSLT stylesheet {path}: {e}",
            path,
            missing=bridge.missing,
            diagnostics=diagnostics,
        ) from e

    if bridge.missing:
        raise XSLTLoadError(
            f"XSLT stylesheet {path} references missing resource(s): "
            f"{', '.join(bridge.missing)}",
            path,
            missing=bridge.missing,
        )

    logger.debug(f"XSLT stylesheet loaded successfully: {path}")
    return transform


def apply_xslt_transform(
    xml_input: Union[etree._Element, etree._ElementTree],
    xslt_transform: etree.XSLT,
    bridge: Optional[LxmlResolverBridge] = None,
    **params
) -> TransformResult:
    """
    Apply an XSLT transformation to an XML document.

    Args:
        xml_input: lxml Element or ElementTree
        xslt_transform: Compiled XSLT transform
        bridge: Bridge whose misses (document() lookups) are checked afterwards
        **params: XSLT parameters, passed as string parameters

    Returns:
        TransformResult with the output tree and captured diagnostics

    Raises:
        XSLTRunError: If the transformation raised or left no result
    """
    if isinstance(xml_input, etree._Element):
        xml_doc = etree.ElementTree(xml_input)
    elif isinstance(xml_input, etree._ElementTree):
        xml_doc = xml_input
    else:
        raise TypeError("xml_input must be an lxml Element or ElementTree")

    xslt_params = {k: etree.XSLT.strparam(str(v)) for k, v in params.items() if v is not None}
    missing_before = len(bridge.missing) if bridge else 0

    try:
        return _run_transform(xml_doc, xslt_transform, xslt_params, bridge, missing_before)
    finally:
        # Misses are per call; the bridge outlives the call.
        if bridge:
            del bridge.missing[missing_before:]


def _run_transform(
    xml_doc: etree._ElementTree,
    xslt_transform: etree.XSLT,
    xslt_params: dict,
    bridge: Optional[LxmlResolverBridge],
    missing_before: int,
) -> TransformResult:
    try:
        result = xslt_transform(xml_doc, **xslt_params)
    except etree.XSLTApplyError as e:
        diagnostics = diagnostics_from_log(xslt_transform.error_log)
        missing = bridge.missing[missing_before:] if bridge else []
        message = f"XSLT transformation failed: {e}"
        if missing:
            message += f" (missing resource(s): {', '.join(missing)})"
        raise XSLTRunError(message, missing=missing, diagnostics=diagnostics) from e

    diagnostics = diagnostics_from_log(xslt_transform.error_log)

    if bridge and len(bridge.missing) > missing_before:
        missing = bridge.missing[missing_before:]
        raise XSLTRunError(
            f"XSLT transformation referenced missing resource(s): {', '.join(missing)}",
            missing=missing,
            diagnostics=diagnostics,
        )

    if result.getroot() is None:
        raise XSLTRunError("XSLT transformation produced an empty result", diagnostics=diagnostics)

    for diagnostic in diagnostics:
        if diagnostic.severity is Severity.WARNING:
            logger.debug(f"  {diagnostic}")

    return TransformResult(tree=result, diagnostics=diagnostics)
