"""
Schematron Validator
====================

Validator facade: compiles a Schematron schema once at construction and
validates any number of documents against it.

Example:
    validator = SchematronValidator("record.sch", default_resolver(Path("schemas")))
    try:
        report = validator.validate(xml_bytes)
    except SchematronValidationError as e:
        print(e)
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional
import logging
import threading

from lxml import etree

from schematron_core.compile.compiler import (
    CompiledCheckProgram,
    RuleSchema,
    SchemaCompiler,
)
from schematron_core.config.settings import (
    DEFAULT_PRIORITY,
    ValidatorConfig,
    clamp_priority,
)
from schematron_core.exceptions import ExecutionError, SchematronValidationError
from schematron_core.execution.executor import CheckExecutor
from schematron_core.resources.resolver import ResourceResolver, default_resolver
from schematron_core.validation.base import BaseValidator
from schematron_core.validation.report import (
    ValidationReport,
    build_report,
    format_failure_message,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatorSettings:
    """Runtime configuration of a validator, replaced as a whole on update."""

    suppress_warnings: bool = False
    priority: int = DEFAULT_PRIORITY

    def __post_init__(self):
        object.__setattr__(self, 'priority', clamp_priority(self.priority))
        object.__setattr__(self, 'suppress_warnings', bool(self.suppress_warnings))


@dataclass(frozen=True)
class EntryOutcome:
    """Result of validating one entry of a batch."""

    entry_number: int
    report: Optional[ValidationReport] = None
    error: Optional[Exception] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None and self.report is not None and self.report.is_valid

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""


def document_of(entry: Any) -> Any:
    """
    Extract the XML document from a pipeline entry.

    Entries may be the document itself (bytes, str, lxml tree) or an object
    exposing it through a ``metadata`` attribute or key.
    """
    if entry is None or isinstance(entry, (bytes, bytearray, str, etree._Element, etree._ElementTree)):
        return entry
    if isinstance(entry, dict):
        return entry.get('metadata')
    return getattr(entry, 'metadata', None)


class SchematronValidator(BaseValidator):
    """
    Validates XML documents against one compiled Schematron schema.

    Compilation happens in the constructor; a SchemaCompilationError there
    means the validator cannot be created.
    """

    def __init__(self,
                 schema_path: str,
                 resolver: Optional[ResourceResolver] = None,
                 suppress_warnings: bool = False,
                 priority: int = DEFAULT_PRIORITY,
                 compiler: Optional[SchemaCompiler] = None):
        logger.debug(f"Creating SchematronValidator for {schema_path} "
                     f"(suppress_warnings={suppress_warnings}, priority={priority})")
        self._resolver = resolver or default_resolver()
        self._schema = RuleSchema(schema_path, self._resolver)
        self._settings = ValidatorSettings(suppress_warnings, priority)
        self._settings_lock = threading.Lock()
        self._report: Optional[ValidationReport] = None
        self._executor = CheckExecutor()

        compiler = compiler or SchemaCompiler()
        self._program: CompiledCheckProgram = compiler.compile(self._schema, self._resolver)
        logger.info(f"Schematron validator ready for {self.schema_identifier}")

    @classmethod
    def from_config(cls, config: ValidatorConfig,
                    resolver: Optional[ResourceResolver] = None) -> 'SchematronValidator':
        """Create a validator from a ValidatorConfig."""
        if not config.schema_path:
            raise ValueError("Configuration has no schema_path")
        resolver = resolver or default_resolver(config.schema_dir or None,
                                                config.preprocessor_dir or None)
        compile_params = {'phase': config.phase} if config.phase else None
        return cls(
            config.schema_path,
            resolver,
            suppress_warnings=config.suppress_warnings,
            priority=config.priority,
            compiler=SchemaCompiler(compile_params=compile_params),
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, document: Any, entry_number: Optional[int] = None) -> ValidationReport:
        """
        Validate one document.

        Args:
            document: XML as bytes, string or lxml tree
            entry_number: Position in a batch, used in the failure message

        Returns:
            The ValidationReport when the document is valid

        Raises:
            SchematronValidationError: If the report is invalid
            ExecutionError: If the document could not be checked
        """
        settings = self._settings
        logger.debug(f"Using Schematron ruleset: {self.schema_identifier}")

        output = self._executor.execute(self._program, document)
        report = build_report(output, settings.suppress_warnings)
        self._report = report

        if not report.is_valid:
            message = format_failure_message(report, entry_number)
            logger.debug(message)
            raise SchematronValidationError(
                message,
                errors=report.error_messages,
                warnings=[] if settings.suppress_warnings else report.warning_messages,
                report=report,
                entry_number=entry_number,
            )
        return report

    def validate_entry(self, entry: Any) -> ValidationReport:
        """Validate a single pipeline entry (a document or an object carrying ``metadata``)."""
        return self.validate(document_of(entry))

    def validate_batch(self, entries: Iterable[Any]) -> List[EntryOutcome]:
        """
        Validate every entry in order, numbering entries from 1.

        Failures are recorded per entry and never stop later entries.
        """
        outcomes = []
        for entry_number, entry in enumerate(entries, start=1):
            try:
                report = self.validate(document_of(entry), entry_number=entry_number)
            except SchematronValidationError as e:
                outcomes.append(EntryOutcome(entry_number, report=e.report, error=e))
            except ExecutionError as e:
                logger.warning(f"Could not validate catalog entry #{entry_number}: {e}")
                outcomes.append(EntryOutcome(entry_number, error=ExecutionError(
                    f"Could not perform validation for catalog entry #{entry_number}: {e}",
                    diagnostics=e.diagnostics,
                )))
            else:
                outcomes.append(EntryOutcome(entry_number, report=report))
        return outcomes

    # ------------------------------------------------------------------
    # Accessors and configuration
    # ------------------------------------------------------------------

    @property
    def schema_type(self) -> str:
        return "Schematron"

    @property
    def schema_identifier(self) -> str:
        return self._schema.identifier

    @property
    def program(self) -> CompiledCheckProgram:
        return self._program

    @property
    def report(self) -> Optional[ValidationReport]:
        return self._report

    @property
    def settings(self) -> ValidatorSettings:
        return self._settings

    @property
    def suppress_warnings(self) -> bool:
        return self._settings.suppress_warnings

    @property
    def priority(self) -> int:
        return self._settings.priority

    def update_settings(self, **changes) -> ValidatorSettings:
        """
        Apply a configuration update atomically.

        Args:
            **changes: New values for ``suppress_warnings`` and/or ``priority``

        Returns:
            The settings now in effect
        """
        with self._settings_lock:
            settings = replace(self._settings, **changes)
            self._settings = settings
        logger.debug(f"Settings for {self.schema_identifier} updated: {settings}")
        return settings

    def get_report(self) -> Optional[ValidationReport]:
        return self._report

    def get_schema_identifier(self) -> str:
        return self.schema_identifier

    def set_suppress_warnings(self, suppress_warnings: bool) -> None:
        self.update_settings(suppress_warnings=suppress_warnings)

    def get_suppress_warnings(self) -> bool:
        return self.suppress_warnings

    def set_priority(self, priority: int) -> None:
        self.update_settings(priority=priority)

    def get_priority(self) -> int:
        return self.priority

    def __repr__(self) -> str:
        return f"SchematronValidator({self.schema_identifier!r}, {self._settings})"
