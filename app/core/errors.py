"""
Domain-specific exceptions for the Commerce API.

These exceptions represent request and storage failures and are mapped
to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class AppError(Exception):
    """Base exception for all commerce API domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentError(AppError):
    """
    Raised when a required path parameter is missing or blank.

    Examples:
    - GET /users/ with an empty email
    - PUT /order/{id} with a whitespace-only id

    HTTP Status: 400 Bad Request
    """

    pass


class InvalidRequestBodyError(AppError):
    """
    Raised when a request body cannot be decoded into the entity shape.

    Examples:
    - Malformed JSON
    - JSON array where an object is expected
    - Wrong value type (e.g. a non-numeric price)

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(AppError):
    """
    Raised when no document matches a keyed get/update/delete.

    HTTP Status: 404 Not Found
    """

    pass


class UserNotFoundError(NotFoundError):
    """No user document matches the given email."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("user not found", details)


class ProductNotFoundError(NotFoundError):
    """No product document matches the given id."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("product not found", details)


class OrderNotFoundError(NotFoundError):
    """No order document matches the given id."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("order not found", details)


class StorageError(AppError):
    """
    Raised for any storage driver failure other than "no document matched".

    Examples:
    - Server selection timeout (MongoDB unreachable)
    - Network error mid-operation
    - Write rejected by the server

    HTTP Status: 500 Internal Server Error
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    InvalidArgumentError: 400,
    InvalidRequestBodyError: 400,
    NotFoundError: 404,
    StorageError: 500,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Subclasses resolve to the status of their nearest mapped ancestor,
    so UserNotFoundError maps to 404 through NotFoundError.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    for klass in type(error).__mro__:
        if klass in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[klass]
    return 500
