"""
Validation Framework
====================

Report building and the Schematron validator facade.

Components:
- BaseValidator: Abstract base class for validators
- ValidationReport / Assertion: Parsed SVRL outcome
- SchematronValidator: Compile-once, validate-many facade
- PreIngestHooks: Create/update/delete pipeline adapter
"""

from schematron_core.validation.base import BaseValidator

from schematron_core.validation.report import (
    Assertion,
    AssertionSeverity,
    ValidationReport,
    build_report,
    format_failure_message,
    is_report_valid,
)

from schematron_core.validation.schematron_validator import (
    EntryOutcome,
    SchematronValidator,
    ValidatorSettings,
    document_of,
)

from schematron_core.validation.pipeline import PreIngestHooks

__all__ = [
    # Base classes
    "BaseValidator",
    # Report
    "Assertion",
    "AssertionSeverity",
    "ValidationReport",
    "build_report",
    "format_failure_message",
    "is_report_valid",
    # Schematron
    "EntryOutcome",
    "SchematronValidator",
    "ValidatorSettings",
    "document_of",
    # Pipeline
    "PreIngestHooks",
]
