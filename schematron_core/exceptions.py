"""
Exceptions
==========

Error taxonomy for schema compilation, document execution and validation.

- SchemaCompilationError: fatal, raised while building a validator
- ExecutionError: one document could not be checked
- SchematronValidationError: the document was checked and is invalid
- StopProcessingError: a pipeline hook refuses the request
"""

from typing import Any, List, Optional, Sequence


class SchematronError(Exception):
    """Base class for all schematron_core errors."""


class ResourceNotFoundError(SchematronError, LookupError):
    """A resolver has no resource for the requested path."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Resource not found: {path}")


class SchemaCompilationError(SchematronError):
    """
    Compiling a rule schema failed.

    Attributes:
        schema: Identifier of the schema being compiled
        stage: Name of the compilation stage that failed (if known)
        resource: Path of the missing resource (if the failure was a miss)
        diagnostics: Diagnostics collected before the failure
    """

    def __init__(self,
                 message: str,
                 schema: Optional[str] = None,
                 stage: Optional[str] = None,
                 resource: Optional[str] = None,
                 diagnostics: Sequence[Any] = ()):
        super().__init__(message)
        self.schema = schema
        self.stage = stage
        self.resource = resource
        self.diagnostics = list(diagnostics)


class ExecutionError(SchematronError):
    """Applying a compiled check program to a document failed."""

    def __init__(self, message: str, diagnostics: Sequence[Any] = ()):
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class SchematronValidationError(SchematronError):
    """
    A document was checked successfully but is not valid.

    Attributes:
        errors: Messages of failed mandatory assertions
        warnings: Messages of failed advisory assertions (empty when suppressed)
        report: The ValidationReport that was found invalid
        entry_number: 1-based position in a batch, None for single documents
    """

    def __init__(self,
                 message: str,
                 errors: Optional[List[str]] = None,
                 warnings: Optional[List[str]] = None,
                 report: Any = None,
                 entry_number: Optional[int] = None):
        super().__init__(message)
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        self.report = report
        self.entry_number = entry_number


class StopProcessingError(SchematronError):
    """Raised by pipeline hooks to stop the host ingest pipeline."""

    def __init__(self, message: str, failures: Sequence[Any] = ()):
        super().__init__(message)
        self.failures = list(failures)
