"""
Typed application errors.

Services raise these; the exception handlers in ``spotjott.main`` map each one
to its HTTP status and the standard ``{"success": false, "error": ...}`` body.
"""


class AppError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication failed"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class MaxTagsError(ValidationError):
    default_message = "A diary entry can have a maximum of 5 tags"


class MediaUploadError(ValidationError):
    default_message = "Failed to upload media"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later"

    def __init__(self, message: str = None, retry_after: int = None):
        super().__init__(message)
        self.retry_after = retry_after
