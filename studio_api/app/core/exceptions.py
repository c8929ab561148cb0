"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below and the endpoint that called them decides which status
code to answer with.  The request-level errors derive from
``ValueError`` so callers that only care about "the request could not
be satisfied" can catch that one type.
"""


class NotFoundError(ValueError):
    """The requested document does not exist."""


class ValidationError(ValueError):
    """The payload is well formed but violates a business rule."""


class ConflictError(ValueError):
    """The write collides with the current state of the store."""


class StaleWriteError(ConflictError):
    """A document changed between being read and being written back."""


class InvalidTransitionError(ConflictError):
    """A booking status change is not allowed by the lifecycle."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot change booking status from {current} to {requested}")
        self.current = current
        self.requested = requested


class StoreError(RuntimeError):
    """The underlying database failed; the request cannot be served."""
