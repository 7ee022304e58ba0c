"""Domain exceptions raised by the service layer.

The HTTP shell maps each class to a status code in ``hotel_booking.main``.
An authorization deny is a plain ``False`` from the evaluator; ``Forbidden``
is only raised by callers that need to stop.
"""


class HotelBookingError(Exception):
    """Base exception for the hotel booking domain."""

    status_code = 400
    error_code = "error"

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFound(HotelBookingError):
    """Raised when a referenced entity does not exist."""
    status_code = 404
    error_code = "not_found"


class ConflictError(HotelBookingError):
    """Raised on a unique-constraint violation."""
    status_code = 409
    error_code = "conflict"


class ValidationError(HotelBookingError):
    """Raised for malformed input or a mismatched hotel context."""
    status_code = 400
    error_code = "validation_error"


class Forbidden(HotelBookingError):
    """Raised when the authorization evaluator denies an operation."""
    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class AuthenticationError(HotelBookingError):
    """Raised when credentials or a token are missing or invalid."""
    status_code = 401
    error_code = "unauthorized"
