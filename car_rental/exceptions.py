"""
Custom exception classes for the Car Rental API.

Every error carries a `kind` (the name reported to API clients), an HTTP
status and a human readable message, so handlers can turn any of them into
the same `{"error": {"name", "message"}}` payload.
"""


class DomainError(Exception):
    """Base class for errors that map onto an API error response."""

    kind = "DomainError"
    status_code = 400
    default_message = "Error: request could not be processed"

    def __init__(self, message: str | None = None, kind: str | None = None) -> None:
        self.message = message or self.default_message
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_dict(self) -> dict:
        return {"name": self.kind, "message": self.message}


class CarNotFoundError(DomainError):
    """Raised when a car ID cannot be found in the system."""

    kind = "CarNotFoundError"
    status_code = 404
    default_message = "Error: car not found"


class CarAlreadyRentedError(DomainError):
    """Raised when a car already has a rental covering the requested period."""

    kind = "CarAlreadyRentedError"
    status_code = 409
    default_message = "Error: car is already rented"


class InvalidRentalPeriodError(DomainError):
    """Raised when rentEndedAt is not after rentStartedAt or a timestamp is invalid."""

    kind = "InvalidRentalPeriodError"
    status_code = 422
    default_message = "Error: invalid rental period"


class CarValidationError(DomainError):
    """Raised by a car repository when submitted fields are rejected."""

    kind = "ValidationError"
    status_code = 422
    default_message = "Error: invalid car data"


class InvalidBodyError(DomainError):
    """Raised when a request body is not a JSON object."""

    kind = "InvalidBodyError"
    status_code = 422
    default_message = "Error: request body must be a JSON object"


class InvalidQueryError(DomainError):
    """Raised when list query parameters cannot be interpreted."""

    kind = "InvalidQueryError"
    status_code = 400
    default_message = "Error: invalid query parameters"


class UnauthorizedError(DomainError):
    kind = "UnauthorizedError"
    status_code = 401
    default_message = "Error: authentication required"


class RepositoryError(DomainError):
    """Generic rejection from a data-access layer; callers may pick the kind."""

    kind = "RepositoryError"
    status_code = 422
    default_message = "Error: repository rejected the operation"


def error_payload(err: BaseException) -> dict:
    """Build the `{"name", "message"}` body for any raised error."""
    if isinstance(err, DomainError):
        return err.to_dict()
    return {"name": type(err).__name__, "message": str(err)}
