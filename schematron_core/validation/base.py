"""
Base Validation Classes
=======================

Abstract base class for validators. Concrete validators implement
``validate`` for in-memory documents; file validation is shared.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


class BaseValidator(ABC):
    """
    Abstract base class for validators.

    Example:
        class MyValidator(BaseValidator):
            def validate(self, document):
                ...
                return report
    """

    @abstractmethod
    def validate(self, document: Any) -> Any:
        """
        Validate a single in-memory document.

        Args:
            document: XML content as bytes, string or lxml tree

        Returns:
            A report describing the validation outcome
        """
        pass

    def validate_file(self, file_path: Path) -> Any:
        """
        Validate a document stored on disk.

        Args:
            file_path: Path to the XML file

        Returns:
            A report describing the validation outcome
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Document not found: {file_path}")
        logger.debug(f"Validating file: {file_path}")
        return self.validate(file_path.read_bytes())

    @property
    def schema_type(self) -> str:
        """Return the type of schema this validator uses (e.g., 'DTD', 'Schematron')."""
        return "Unknown"

    @property
    def schema_identifier(self) -> Optional[str]:
        """Return the identifier of the schema (if applicable)."""
        return None
