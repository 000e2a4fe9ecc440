"""
Transformation Framework
========================

XSLT loading and application with captured diagnostics.

Components:
- load_xslt_transform: Load XSLT through a resolver
- apply_xslt_transform: Apply XSLT and collect diagnostics
- Diagnostic / Severity: Tagged diagnostics from libxslt
"""

from schematron_core.transform.diagnostics import (
    Diagnostic,
    Severity,
    diagnostics_from_log,
)

from schematron_core.transform.xslt import (
    TransformResult,
    XSLTLoadError,
    XSLTRunError,
    apply_xslt_transform,
    load_xslt_transform,
)

__all__ = [
    "Diagnostic",
    "Severity",
    "diagnostics_from_log",
    "TransformResult",
    "XSLTLoadError",
    "XSLTRunError",
    "apply_xslt_transform",
    "load_xslt_transform",
]
