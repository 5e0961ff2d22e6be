"""Custom application exceptions."""

from app.core.messages import BilingualMessage, get_error_message


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_001",
        details: dict | None = None,
    ):
        """Initialize exception with message, status code and error code."""
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def messages(self) -> BilingualMessage:
        """Bilingual text for this error's code."""
        return get_error_message(self.code)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "COMPLEX_006",
        details: dict | None = None,
    ):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404, code=code, details=details)


class PreconditionException(AppException):
    """A business precondition of the requested operation is not met."""

    def __init__(
        self,
        message: str = "Precondition failed",
        code: str = "COMPLEX_005",
        details: dict | None = None,
    ):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400, code=code, details=details)


class ValidationException(AppException):
    """Validation error exception."""

    def __init__(
        self,
        message: str = "Validation error",
        code: str = "VALIDATION_001",
        details: dict | None = None,
    ):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422, code=code, details=details)


class InternalException(AppException):
    """Unexpected failure while talking to the data store."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        code: str = "INTERNAL_001",
        details: dict | None = None,
    ):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500, code=code, details=details)
