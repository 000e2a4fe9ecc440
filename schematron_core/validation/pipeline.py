"""
Pre-Ingest Pipeline Hooks
=========================

Adapts a SchematronValidator to a host ingest pipeline: create and update
requests are validated, delete requests pass through untouched.
"""

from typing import Any, Iterable, List, Mapping, Sequence
import logging

from schematron_core.exceptions import StopProcessingError
from schematron_core.validation.schematron_validator import EntryOutcome, SchematronValidator

logger = logging.getLogger(__name__)


class PreIngestHooks:
    """
    Pipeline hooks backed by one validator.

    Example:
        hooks = PreIngestHooks(validator)
        entries = hooks.on_create(entries)   # raises StopProcessingError if invalid
    """

    def __init__(self, validator: SchematronValidator):
        self.validator = validator

    @property
    def priority(self) -> int:
        return self.validator.priority

    def on_create(self, entries: Iterable[Any]) -> Iterable[Any]:
        """
        Validate every entry of a create request and return the request.

        One-shot iterables are consumed once and returned as a list.
        """
        if entries is None:
            raise StopProcessingError("Null create request")
        entries = self._materialize(entries)
        self._validate_entries(list(entries))
        return entries

    def on_update(self, updates: Any) -> Any:
        """
        Validate the new version of every entry of an update request.

        ``updates`` is a mapping of key to entry, a sequence of (key, entry)
        pairs, or a sequence of entries. One-shot iterables are returned
        as a list.
        """
        if updates is None:
            raise StopProcessingError("Null update request")
        if not isinstance(updates, Mapping):
            updates = self._materialize(updates)
        self._validate_entries(self._updated_entries(updates))
        return updates

    def on_delete(self, request: Any) -> Any:
        """Deletes are not validated."""
        return request

    @staticmethod
    def _materialize(request: Iterable[Any]) -> Sequence[Any]:
        if isinstance(request, Sequence):
            return request
        return list(request)

    def _validate_entries(self, entries: List[Any]) -> List[EntryOutcome]:
        logger.debug(f"Validating {len(entries)} entries with {self.validator.schema_identifier}")
        outcomes = self.validator.validate_batch(entries)
        failures = [outcome for outcome in outcomes if not outcome.is_valid]
        if failures:
            message = "\n".join(outcome.message for outcome in failures)
            logger.info(f"{len(failures)} of {len(outcomes)} entries failed validation")
            raise StopProcessingError(message, failures=failures)
        return outcomes

    @staticmethod
    def _updated_entries(updates: Any) -> List[Any]:
        if isinstance(updates, Mapping):
            return list(updates.values())
        entries = []
        for update in updates:
            if isinstance(update, tuple) and len(update) == 2:
                entries.append(update[1])
            else:
                entries.append(update)
        return entries
