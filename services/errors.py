# services/errors.py


class BookingError(Exception):
    """Base error for booking domain failures."""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingError):
    status_code = 400


class BookingNotFound(BookingError):
    status_code = 404


class InvalidTransition(BookingError):
    """Raised when a lifecycle guard does not hold."""
    status_code = 409


class CapacityExceeded(BookingError):
    """Raised when requested consoles exceed what is free for the window."""
    status_code = 409
