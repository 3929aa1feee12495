"""Typed errors raised by the data-access layer.

Every failed operation surfaces one of these to its caller. The API turns them
into JSON error responses (see ``taskboard.api.errors``) and the HTTP client
turns those responses back into the same classes.
"""

from starlette import status


class TaskboardError(Exception):
    """Base class for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(TaskboardError):
    """Malformed input caught before any store call."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_message = "Invalid input"


class InvalidContentTypeError(ValidationError):
    """Uploaded file is not an image."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    code = "invalid_content_type"
    default_message = "File must be an image"


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit."""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "file_too_large"
    default_message = "File too large"


class AuthenticationError(TaskboardError):
    """No active session where one is required."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_required"
    default_message = "Not authenticated"


class AuthorizationError(TaskboardError):
    """The store rejected a write on a row the caller does not own."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Not allowed to modify this row"


class NotFoundError(TaskboardError):
    """Target row is absent or not visible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class TransientError(TaskboardError):
    """Network or storage failure; the operation may or may not have applied."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "transient_error"
    default_message = "Service temporarily unavailable"


ERRORS_BY_CODE: dict[str, type[TaskboardError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        InvalidContentTypeError,
        FileTooLargeError,
        AuthenticationError,
        AuthorizationError,
        NotFoundError,
        TransientError,
    )
}
