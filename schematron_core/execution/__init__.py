"""
Check Execution
===============

Applies compiled check programs to documents.
"""

from schematron_core.execution.executor import (
    CheckExecutor,
    ExecutionOutput,
    execute,
)

__all__ = [
    "CheckExecutor",
    "ExecutionOutput",
    "execute",
]
