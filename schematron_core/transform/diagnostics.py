"""
Transformation Diagnostics
==========================

Tagged diagnostics captured from lxml/libxslt error logs.

Only WARNING diagnostics let a transformation continue; ERROR and FATAL
diagnostics abort the operation that produced them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from lxml import etree


class Severity(str, Enum):
    """Severity of a transformation diagnostic."""
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def aborts(self) -> bool:
        return self is not Severity.WARNING


@dataclass(frozen=True)
class Diagnostic:
    """One message reported while parsing, compiling or applying a stylesheet."""

    severity: Severity
    message: str
    line: Optional[int] = None
    source: str = ""

    def __str__(self) -> str:
        where = f"{self.source}:{self.line}: " if self.source and self.line else ""
        return f"[{self.severity.value}] {where}{self.message}"


def classify_log_entry(entry) -> Severity:
    """
    Map an lxml error log entry to a Severity.

    Non-terminating ``xsl:message`` output is logged by libxslt as an ERROR
    in the XSLT domain with no error code; it is reported as a warning.
    """
    if entry.level == etree.ErrorLevels.FATAL:
        return Severity.FATAL
    if entry.level == etree.ErrorLevels.WARNING:
        return Severity.WARNING
    if entry.domain == etree.ErrorDomains.XSLT and entry.type == etree.ErrorTypes.ERR_OK:
        return Severity.WARNING
    return Severity.ERROR


def diagnostics_from_log(error_log: Iterable, source: str = "") -> List[Diagnostic]:
    """Convert an lxml error log into a list of Diagnostics, in log order."""
    diagnostics = []
    for entry in error_log:
        if entry.level == etree.ErrorLevels.NONE:
            continue
        diagnostics.append(Diagnostic(
            severity=classify_log_entry(entry),
            message=(entry.message or "").strip(),
            line=entry.line or None,
            source=source or (entry.filename or ""),
        ))
    return diagnostics
