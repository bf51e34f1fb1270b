from typing import Any, Dict, Optional


class CustomException(Exception):
    """Base exception class for all custom exceptions."""

    code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"
    message: str = "An unexpected error occurred"
    data: Optional[Dict[str, Any]] = None

    def __init__(
        self,
        message: str = None,
        code: int = None,
        error_code: str = None,
        data: Dict[str, Any] = None
    ):
        self.message = message or self.message
        self.code = code or self.code
        self.error_code = error_code or self.error_code
        self.data = data or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, error_code={self.error_code}, message={self.message})"


class NotFoundException(CustomException):
    """Exception for resource not found (404)."""

    code = 404
    error_code = "NOT_FOUND"
    message = "Resource not found"


class ValidationException(CustomException):
    """Exception for validation errors (422)."""

    code = 422
    error_code = "VALIDATION_ERROR"
    message = "Validation error"


class UnknownReferenceException(ValidationException):
    """Exception for identifiers that do not reference an existing row (422)."""

    error_code = "UNKNOWN_REFERENCE"
    message = "One or more referenced records do not exist"

    def __init__(self, missing_ids, message: str = None):
        missing = sorted(missing_ids)
        super().__init__(message=message, data={"missing_ids": missing})
        self.missing_ids = missing


class TransientStorageException(CustomException):
    """Exception for storage failures that outlived the retry budget (500).

    The message is safe to show to clients; the underlying cause is kept
    on ``__cause__`` and logged server-side.
    """

    code = 500
    error_code = "TRANSIENT_STORAGE_ERROR"
    message = "The request could not be completed, please try again later"
