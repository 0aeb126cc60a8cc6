"""Client exception classes and error normalization helpers."""

from typing import Any

import httpx

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class AppException(Exception):
    """Base client exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class NotAuthenticatedError(AppException):
    """No stored credentials for an operation that needs them."""

    def __init__(self) -> None:
        super().__init__(
            message="Not authenticated",
            code="NOT_AUTHENTICATED",
            status_code=401,
        )


# --- Not Found (404) ---


class MessageNotFoundError(AppException):
    """Message not present in the local conversation."""

    def __init__(self) -> None:
        super().__init__(
            message="Message not found",
            code="MESSAGE_NOT_FOUND",
            status_code=404,
        )


# --- Validation (422) ---


class InputValidationError(AppException):
    """Input rejected locally before any request is sent."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
        )


# --- Normalization ---


def _response_detail(error: httpx.HTTPStatusError) -> Any:
    """Return the `detail` field of a JSON error body, if any."""
    try:
        body = error.response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("detail")
    return None


def get_error_message(error: object) -> str:
    """Extract a human-readable message from any error. Never raises."""
    try:
        if isinstance(error, httpx.HTTPStatusError):
            detail = _response_detail(error)
            if isinstance(detail, dict):
                return str(detail.get("message") or GENERIC_ERROR_MESSAGE)
            if isinstance(detail, str) and detail:
                return detail
            return str(error)
        if isinstance(error, AppException):
            return error.message
        if isinstance(error, BaseException):
            return str(error) or GENERIC_ERROR_MESSAGE
    except Exception:
        return GENERIC_ERROR_MESSAGE
    return GENERIC_ERROR_MESSAGE


def get_error_code(error: object) -> str | None:
    """Extract a machine-readable error code, when the error carries one."""
    try:
        if isinstance(error, httpx.HTTPStatusError):
            detail = _response_detail(error)
            if isinstance(detail, dict) and detail.get("error_code"):
                return str(detail["error_code"])
            return None
        if isinstance(error, AppException):
            return error.code
    except Exception:
        return None
    return None


def get_error_info(error: object) -> dict[str, str | None]:
    """Return both code and message for an error."""
    return {
        "code": get_error_code(error),
        "message": get_error_message(error),
    }


# Failures a user action reports instead of raising.
RECOVERABLE_ERRORS = (httpx.HTTPError, AppException, ValueError)
