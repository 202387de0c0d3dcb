"""Precondition violations raised by the differs.

These signal a wiring error upstream (for example a fetch that did not include
a relation) and should stop processing of the current item.
"""

from __future__ import annotations


class ReconciliationPreconditionError(ValueError):
    """Raised when the differ receives inputs that break its contract."""


class MissingIdentifierError(ReconciliationPreconditionError):
    """Raised when an old entity that must be referenced carries no ``uid``."""

    def __init__(self, *, context: str) -> None:
        self.context = context
        super().__init__(f"Old entity has no uid: {context}")


class UnexpandedRelationError(ReconciliationPreconditionError):
    """Raised when a relation is nested on the new side but not on the old side."""

    def __init__(self, *, field_key: str, old_value: object) -> None:
        self.field_key = field_key
        self.old_value = old_value
        super().__init__(
            f"relation field '{field_key}': old value must be a nested fieldset when the new value "
            f"is nested (got {type(old_value).__name__}). "
            "Ensure the fetch of the old entity includes the relation field."
        )
