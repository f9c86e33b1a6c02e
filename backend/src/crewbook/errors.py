"""HTTP error types raised by services and dependencies.

Each error is an HTTPException with a fixed status code, so FastAPI renders
it as ``{"detail": "<message>"}`` without extra handlers.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for expected, client-facing errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class StorageUnavailableError(AppError):
    """Object storage could not sign or serve a request."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Object storage is unavailable"


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group Pydantic/FastAPI validation errors by field.

    The location prefix ("body", "query", "path") is dropped and nested
    locations are dotted.

    Example:
        >>> format_validation_errors([{"loc": ("body", "email"), "msg": "bad"}])
        {'email': ['bad']}
    """
    details: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        field = ".".join(loc) or "_root"
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return details
