"""Domain errors raised by the entitlement engine and its collaborators."""

from typing import Optional


class AccountError(Exception):
    """Base class for errors that terminate a request with an HTTP status."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidInput(AccountError):
    status_code = 400
    default_message = "invalid params"


class Unauthorized(AccountError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(AccountError):
    status_code = 404
    default_message = "user_not_found"


class AlreadyExists(AccountError):
    status_code = 409
    default_message = "User exists"


class InternalError(AccountError):
    status_code = 500


class StorageError(InternalError):
    """The key-value store failed to complete an operation."""

    default_message = "storage_error"
