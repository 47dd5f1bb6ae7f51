"""Application exception types and the JSON error envelope."""

import traceback
from typing import List, Optional


class ApiError(Exception):
    """Error that maps directly to an HTTP status and an envelope message."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[List[dict]] = None):
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)


class RequestValidationFailed(ApiError):
    status_code = 400

    def __init__(self, details: List[dict]):
        super().__init__("Validation failed", details=details)


class AuthError(ApiError):
    """401 for missing credentials or unknown users, 403 for bad tokens."""
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class PayloadTooLarge(ApiError):
    status_code = 413


class InternalError(ApiError):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


def error_envelope(message: str, details: Optional[List[dict]] = None, exc: Optional[BaseException] = None) -> dict:
    """Build `{"success": false, "error": {...}}`.

    `exc` is only passed outside production; its traceback is exposed as
    `error.stack`.
    """
    error = {"message": message}
    if details is not None:
        error["details"] = details
    if exc is not None:
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return {"success": False, "error": error}


__all__ = [
    "ApiError",
    "RequestValidationFailed",
    "AuthError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "PayloadTooLarge",
    "error_envelope",
]
