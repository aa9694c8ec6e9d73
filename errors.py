from typing import Any, Dict


class BookingApiError(Exception):
    """Base class for errors reported to API clients as ``{"error": message}``."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(BookingApiError):
    status_code = 400
    default_message = "Invalid request"


class ConflictError(BookingApiError):
    # Duplicate registrations are reported as a bad request.
    status_code = 400
    default_message = "This email is already registered"


class InvalidState(BookingApiError):
    status_code = 400
    default_message = "Operation not allowed for the current booking status"


class InvalidCredentials(BookingApiError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(BookingApiError):
    status_code = 401
    default_message = "Access token required"


class InvalidCredential(BookingApiError):
    status_code = 403
    default_message = "Invalid or expired token"


class Forbidden(BookingApiError):
    status_code = 403
    default_message = "You do not have permission to access this booking"


class NotFound(BookingApiError):
    status_code = 404
    default_message = "Resource not found"


class InsufficientCapacity(BookingApiError):
    status_code = 409
    default_message = "Not enough seats available"

    def __init__(self, available_seats: int, message: str = None):
        super().__init__(message)
        self.available_seats = available_seats

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message, "availableSeats": self.available_seats}
