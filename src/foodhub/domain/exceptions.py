"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each subclass carries a short ``kind`` string that names the failure for
callers that need to branch on it.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "error"


class ValidationError(DomainException):
    """Malformed input or a violated business rule."""

    kind = "validation_error"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "not_found"


class ForbiddenError(DomainException):
    """The caller's role or relationship to the resource does not allow this."""

    kind = "forbidden"


class InvalidTransitionError(DomainException):
    """A status change is not permitted from the current state."""

    kind = "invalid_transition"


class InvalidQuantityError(DomainException):
    """A quantity is out of bounds (over-return, negative stock)."""

    kind = "invalid_quantity"


class ConflictError(DomainException):
    """A concurrent modification was detected; retry from a fresh read."""

    kind = "conflict"


class DuplicateOrderNumberError(ConflictError):
    """The generated order number is already taken."""
