"""
SVRL Report
===========

Builds a ValidationReport from the SVRL tree produced by a compiled check
program.

Every ``svrl:failed-assert`` and ``svrl:successful-report`` node becomes one
Assertion, classified as an error or a warning from its ``role`` attribute
(falling back to ``flag``). Unmarked failed asserts are errors, unmarked
successful reports are warnings.

Validity:
    - any error makes the report invalid
    - warnings make it invalid unless warnings are suppressed
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from schematron_core.execution.executor import ExecutionOutput
from schematron_core.transform.diagnostics import Diagnostic
from schematron_core.xml.utils import SVRL_NS, element_text, local_name, to_text

logger = logging.getLogger(__name__)

FAILED_ASSERT = "failed-assert"
SUCCESSFUL_REPORT = "successful-report"
FIRED_RULE = "fired-rule"

WARNING_MARKERS = frozenset({"warning", "warn", "info", "information", "advisory"})
ERROR_MARKERS = frozenset({"error", "fatal", "mandatory"})


class AssertionSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Assertion:
    """One diagnostic entry of an SVRL report."""

    severity: AssertionSeverity
    message: str
    location: str = ""
    test: str = ""
    kind: str = FAILED_ASSERT
    role: str = ""
    flag: str = ""
    assertion_id: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity is AssertionSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            'severity': self.severity.value,
            'message': self.message,
            'location': self.location,
            'test': self.test,
            'kind': self.kind,
            'role': self.role,
            'flag': self.flag,
            'id': self.assertion_id,
        }


def is_report_valid(has_errors: bool, has_warnings: bool, suppress_warnings: bool) -> bool:
    if has_errors:
        return False
    if has_warnings and not suppress_warnings:
        return False
    return True


@dataclass(frozen=True)
class ValidationReport:
    """
    Outcome of validating one document.

    Attributes:
        errors: Failed mandatory assertions, in SVRL document order
        warnings: Failed advisory assertions, in SVRL document order
        suppress_warnings: Policy the validity verdict was computed with
        fired_rules: Number of rules whose context matched the document
        svrl_text: The raw SVRL report
        messages: Runtime warnings reported by the check program
    """

    errors: Tuple[Assertion, ...] = ()
    warnings: Tuple[Assertion, ...] = ()
    suppress_warnings: bool = False
    fired_rules: int = 0
    svrl_text: str = field(default="", repr=False)
    messages: Tuple[Diagnostic, ...] = ()

    @property
    def is_valid(self) -> bool:
        return is_report_valid(bool(self.errors), bool(self.warnings), self.suppress_warnings)

    def is_valid_with(self, suppress_warnings: bool) -> bool:
        """Validity of the same assertions under another suppress-warnings policy."""
        return is_report_valid(bool(self.errors), bool(self.warnings), suppress_warnings)

    @property
    def error_messages(self) -> List[str]:
        return [a.message for a in self.errors]

    @property
    def warning_messages(self) -> List[str]:
        return [a.message for a in self.warnings]

    def report_as_text(self) -> str:
        return self.svrl_text

    def summary(self) -> str:
        """Generate a text summary of the report."""
        if self.is_valid:
            if self.warnings:
                return f"Validation PASSED - {len(self.warnings)} warning(s) suppressed"
            return "Validation PASSED - No errors found"

        lines = [f"Validation FAILED - {len(self.errors)} error(s), {len(self.warnings)} warning(s)"]
        for assertion in self.errors:
            lines.append(f"  ERROR: {assertion.message}")
        for assertion in self.warnings:
            lines.append(f"  WARNING: {assertion.message}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.is_valid,
            'suppress_warnings': self.suppress_warnings,
            'fired_rules': self.fired_rules,
            'errors': [a.to_dict() for a in self.errors],
            'warnings': [a.to_dict() for a in self.warnings],
        }


def classify(kind: str, role: Optional[str], flag: Optional[str]) -> AssertionSeverity:
    """Decide whether an SVRL node is an error or a warning."""
    for marker in (role, flag):
        value = (marker or "").strip().lower()
        if value in WARNING_MARKERS:
            return AssertionSeverity.WARNING
        if value in ERROR_MARKERS:
            return AssertionSeverity.ERROR
    if kind == SUCCESSFUL_REPORT:
        return AssertionSeverity.WARNING
    return AssertionSeverity.ERROR


def parse_assertions(svrl_root) -> List[Assertion]:
    """Extract assertions from an SVRL root element, in document order."""
    assertions = []
    tags = (f"{{{SVRL_NS}}}{FAILED_ASSERT}", f"{{{SVRL_NS}}}{SUCCESSFUL_REPORT}")
    for node in svrl_root.iter(*tags):
        kind = local_name(node)
        role = node.get("role", "")
        flag = node.get("flag", "")
        assertions.append(Assertion(
            severity=classify(kind, role, flag),
            message=element_text(node.find(f"{{{SVRL_NS}}}text")),
            location=node.get("location", ""),
            test=node.get("test", ""),
            kind=kind,
            role=role,
            flag=flag,
            assertion_id=node.get("id", ""),
        ))
    return assertions


def build_report(output: ExecutionOutput, suppress_warnings: bool = False) -> ValidationReport:
    """Build a ValidationReport from an execution's SVRL output."""
    root = output.svrl.getroot()
    if root is None:
        return ValidationReport(suppress_warnings=suppress_warnings, messages=output.messages)

    assertions = parse_assertions(root)
    errors = tuple(a for a in assertions if a.is_error)
    warnings = tuple(a for a in assertions if not a.is_error)
    fired_rules = sum(1 for _ in root.iter(f"{{{SVRL_NS}}}{FIRED_RULE}"))

    logger.debug(f"SVRL report for {output.schema_id}: {len(errors)} error(s), "
                 f"{len(warnings)} warning(s), {fired_rules} fired rule(s)")

    return ValidationReport(
        errors=errors,
        warnings=warnings,
        suppress_warnings=suppress_warnings,
        fired_rules=fired_rules,
        svrl_text=to_text(output.svrl),
        messages=output.messages,
    )


def format_failure_message(report: ValidationReport, entry_number: Optional[int] = None) -> str:
    """
    Aggregate an invalid report into a human-readable message.

    Every error is listed, then every warning unless warnings are suppressed,
    one per line.
    """
    if entry_number is None:
        header = "Schematron validation failed.\n\n"
    else:
        header = f"Schematron validation failed for catalog entry #{entry_number}.\n\n"

    lines: Sequence[str] = list(report.error_messages)
    if not report.suppress_warnings:
        lines = list(lines) + report.warning_messages
    return header + "".join(f"{line}\n" for line in lines)
