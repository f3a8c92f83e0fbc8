"""Exception taxonomy for model wiring and character mutation.

Model errors are integration bugs and subclass ValueError so callers can
treat them like any other bad argument. Capacity or slot exhaustion when
storing items is never an error; see Character.store().
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Coarse classification carried by every CharsheetError."""
    INVALID_MODEL = "invalid_model"
    DUPLICATE_ID = "duplicate_id"
    UNBOUND_PLACEHOLDER = "unbound_placeholder"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    NOT_STORABLE = "not_storable"
    INVALID_OPERATION = "invalid_operation"


class CharsheetError(Exception):
    """Base class for all errors raised by charsheet."""

    kind: ErrorKind = ErrorKind.INVALID_MODEL


class InvalidModelError(CharsheetError, ValueError):
    """The model was wired incorrectly or an id does not belong to it."""

    kind = ErrorKind.INVALID_MODEL


class DuplicateIdError(InvalidModelError):
    """An id string was registered twice within the same namespace."""

    kind = ErrorKind.DUPLICATE_ID

    def __init__(self, namespace: str, id_str: str) -> None:
        super().__init__(f"Duplicate {namespace} id {id_str!r}")
        self.namespace = namespace
        self.id_str = id_str


class CyclicDependencyError(InvalidModelError):
    """Adding an edge would make the value graph cyclic."""

    kind = ErrorKind.CYCLIC_DEPENDENCY

    def __init__(self, cycle: list[int]) -> None:
        path = " -> ".join(f"v{idx}" for idx in cycle)
        super().__init__(f"Dependency cycle: {path}")
        self.cycle = cycle


class NotStorableError(InvalidModelError):
    """The item has no physical descriptor or owns an inventory itself."""

    kind = ErrorKind.NOT_STORABLE


class UnboundPlaceholderError(CharsheetError, RuntimeError):
    """A calculation was evaluated while it still contained a placeholder."""

    kind = ErrorKind.UNBOUND_PLACEHOLDER


class InvalidOperationError(CharsheetError, ValueError):
    """A character mutation is not allowed in the current state."""

    kind = ErrorKind.INVALID_OPERATION
