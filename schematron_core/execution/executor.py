"""
Check Executor
==============

Applies a CompiledCheckProgram to one document and returns the raw SVRL
output tree. Executions share nothing but the immutable program.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union
import logging

from lxml import etree

from schematron_core.compile.compiler import CompiledCheckProgram
from schematron_core.exceptions import ExecutionError
from schematron_core.transform.diagnostics import Diagnostic
from schematron_core.transform.xslt import XSLTRunError, apply_xslt_transform
from schematron_core.xml.utils import parse_document, to_text

logger = logging.getLogger(__name__)

Document = Union[bytes, str, etree._Element, etree._ElementTree]


@dataclass(frozen=True)
class ExecutionOutput:
    """SVRL tree produced for one document plus any runtime messages."""

    svrl: etree._ElementTree = field(repr=False)
    messages: Tuple[Diagnostic, ...] = ()
    schema_id: str = ""

    @property
    def text(self) -> str:
        return to_text(self.svrl)


class CheckExecutor:
    """Runs documents through a compiled check program."""

    def execute(self, program: CompiledCheckProgram, document: Document) -> ExecutionOutput:
        """
        Apply ``program`` to ``document``.

        Raises:
            ExecutionError: If the document is not well-formed XML or the
                program reports an error while running
        """
        if document is None:
            raise ExecutionError("No document to validate")

        try:
            tree = parse_document(document)
        except etree.XMLSyntaxError as e:
            logger.debug(f"Document is not well-formed: {e}")
            raise ExecutionError(f"Document is not well-formed XML: {e}") from e
        except (TypeError, ValueError) as e:
            raise ExecutionError(f"Could not read document: {e}") from e

        transform, bridge = program.transformer()
        try:
            result = apply_xslt_transform(tree, transform, bridge)
        except XSLTRunError as e:
            logger.warning(f"Could not run check program {program.schema_id}: {e}")
            raise ExecutionError(
                f"Could not perform validation with {program.schema_id}: {e}",
                diagnostics=e.diagnostics,
            ) from e

        failures = result.failures
        if failures:
            logger.warning(f"Check program {program.schema_id} reported {len(failures)} error(s)")
            raise ExecutionError(
                f"Could not perform validation with {program.schema_id}: "
                + "; ".join(d.message for d in failures),
                diagnostics=result.diagnostics,
            )

        output = ExecutionOutput(svrl=result.tree, messages=tuple(result.warnings),
                                 schema_id=program.schema_id)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"SVRL report:\n\n{output.text}")
        return output


def execute(program: CompiledCheckProgram, document: Document) -> ExecutionOutput:
    """Apply ``program`` to ``document`` with a fresh CheckExecutor."""
    return CheckExecutor().execute(program, document)
