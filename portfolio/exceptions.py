"""
Custom exception classes for the application.

Each exception carries an ``http_status`` used both for HTTP responses and
for the ``status_code`` field of WebSocket error results, so that the two
protocols report failures the same way.
"""

from portfolio.constants import ID_NOT_FOUND_MESSAGE


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: Status code for HTTP and WebSocket error results.
    """

    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppException):
    """
    Data validation failed.

    HTTP Status: 400 Bad Request
    """

    http_status = 400


class NotFoundError(AppException):
    """
    Resource not found.

    Reported as 400 with ``{"message": "Id not found"}``, which is the
    contract existing clients rely on.

    HTTP Status: 400 Bad Request
    """

    http_status = 400

    def __init__(self, message: str = ID_NOT_FOUND_MESSAGE):
        super().__init__(message)


class DatabaseError(AppException):
    """
    Database operation failed.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500
