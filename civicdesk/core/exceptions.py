"""Domain exception hierarchy.

Services raise these instead of HTTP errors so that they stay usable outside
the web layer. ``civicdesk.main`` maps them to responses:

    NotFound           -> 404
    ValidationFailure  -> 422
    Conflict           -> 409
    TransactionFailure -> 500
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class NotFound(DomainError):
    """Referenced record does not exist or is outside the caller's scope."""

    status_code = 404

    def __init__(self, entity: str, entity_id: object | None = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            message = f"{entity} not found"
        else:
            message = f"{entity} {entity_id} not found"
        super().__init__(message)


class ValidationFailure(DomainError):
    """Malformed input, rejected before any mutation."""

    status_code = 422


class Conflict(DomainError):
    """Uniqueness violation or other clash with stored state."""

    status_code = 409


class TransactionFailure(DomainError):
    """A multi-step write failed and was rolled back."""

    status_code = 500
