"""Module: errors.

Domain failures raised by the service layer. Each carries the HTTP status and
machine-readable code the API renders, so routes never translate them by hand.
"""


class AppError(Exception):
    status_code = 400
    code = "error"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    code = "validation_error"
    default_message = "Invalid request"


class PastDate(AppError):
    code = "past_date"
    default_message = "Start date cannot be in the past"


class InvalidRange(AppError):
    code = "invalid_range"
    default_message = "End date must be on or after start date"


class InsufficientBalance(AppError):
    code = "insufficient_balance"
    default_message = "Insufficient leave balance"


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Not allowed"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class AlreadyProcessed(Conflict):
    code = "already_processed"
    default_message = "Leave application has already been processed"


class AlreadyBooked(Conflict):
    code = "already_booked"
    default_message = "Time slot is already booked"


class NotBooked(Conflict):
    code = "not_booked"
    default_message = "Time slot is not booked"
